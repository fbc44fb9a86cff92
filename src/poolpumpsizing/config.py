"""
Configuration & Constants
=========================
This module serves as the central registry for global constants and defaults.

Why is this file needed?
------------------------
1. Abstraction: It prevents magic numbers (sanity ceilings, formula exponents,
   default pool sizes) from being scattered throughout the engine.
2. Consistency: The state model, the estimator and the CLI all read the same
   defaults, so a fresh project and a half-filled imported one agree.

Exports:
    APP_VERSION (str): Installed package version (or a dev placeholder).
    MAX_SANE_FLOW_GPM (float): Flow above which the TDH estimate is not applied.
    MAX_SANE_HEAD_FT (float): Head above which the TDH estimate is not applied.
"""
from importlib.metadata import version, PackageNotFoundError

try:
    APP_VERSION: str = version("poolpumpsizing")
except PackageNotFoundError:
    APP_VERSION = "0.0.0-dev"

# Hazen-Williams (US customary units: GPM, inches, feet)
HAZEN_WILLIAMS_COEFFICIENT: float = 4.52
HAZEN_WILLIAMS_FLOW_EXPONENT: float = 1.85
HAZEN_WILLIAMS_DIAMETER_EXPONENT: float = 4.87

# Guard rails for the TDH estimate
MAX_SANE_FLOW_GPM: float = 400.0
MAX_SANE_HEAD_FT: float = 200.0

# Segments with a smaller head delta are treated as flat
FLAT_SEGMENT_TOLERANCE: float = 1e-9

# Project defaults
DEFAULT_PROJECT_NAME: str = "Untitled Pool"
DEFAULT_POOL_VOLUME_GAL: float = 18000.0
DEFAULT_TURNOVER_HOURS: float = 6.0

# Spa defaults
DEFAULT_SPA_VOLUME_GAL: float = 500.0
DEFAULT_SPA_TURNOVER_HOURS: float = 0.5
DEFAULT_SPA_JET_COUNT: int = 6
DEFAULT_SPA_FLOW_PER_JET_GPM: float = 12.0
DEFAULT_SPA_TARGET_HEAD_FT: float = 60.0

# Pump defaults
DEFAULT_PUMP_TARGET_HEAD_FT: float = 50.0

# Engineering defaults (2" schedule 40 PVC)
DEFAULT_EQUIPMENT_DISTANCE_FT: float = 50.0
DEFAULT_EXTRA_FITTINGS_FT: float = 40.0
DEFAULT_PIPE_DIAMETER_IN: float = 2.067
DEFAULT_ELEVATION_CHANGE_FT: float = 0.0
DEFAULT_EQUIPMENT_HEAD_LOSS_FT: float = 20.0
DEFAULT_HAZEN_C: float = 140.0

WATER_FEATURE_TYPES: tuple[str, ...] = (
    "Sheer",
    "Deck Jet",
    "Rain Curtain",
    "Scupper",
    "Bubbler",
)
