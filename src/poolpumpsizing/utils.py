import math
from typing import Any


def to_float(value: Any, default: float = 0.0) -> float:
    """Parse a configuration value, falling back to `default` when not finite."""
    if isinstance(value, bool):
        return float(value)
    try:
        if isinstance(value, str):
            value = value.strip()
        result = float(value)
    except (TypeError, ValueError):
        return default
    return result if math.isfinite(result) else default


def to_int(value: Any, default: int = 0) -> int:
    """Parse an integer configuration value (truncating floats)."""
    result = to_float(value, float("nan"))
    if not math.isfinite(result):
        return default
    return int(result)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def to_bool(value: Any, default: bool = False) -> bool:
    """Parse a flag; only True, 1, "true" and "1" switch it on."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value == 1
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1")
    return default
