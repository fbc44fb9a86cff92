"""
Pump Curve Library
==================
Defines the data structures for pump performance curves.

A pump model owns several RPM lines (one per motor speed); each RPM line is a
piecewise-linear flow [GPM] vs. head [ft] relation given by its points.
The library is edited by the curve editor and is read-only during evaluation.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any, Dict, Iterable, List, Optional, TYPE_CHECKING

import numpy as np

from poolpumpsizing.utils import to_float

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CurvePoint:
    flow: float  # GPM
    head: float  # ft (TDH)

    def to_dict(self) -> Dict[str, float]:
        return {"gpm": self.flow, "tdh": self.head}

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> Optional[CurvePoint]:
        """Returns None for a malformed or negative point."""
        if not isinstance(data, dict):
            return None
        flow = to_float(data.get("gpm"), float("nan"))
        head = to_float(data.get("tdh"), float("nan"))
        if not (flow >= 0 and head >= 0):
            return None
        return CurvePoint(flow=flow, head=head)


def normalize_points(points: Iterable[CurvePoint]) -> List[CurvePoint]:
    """Sort ascending by flow; a repeated flow keeps the latest point."""
    by_flow: Dict[float, CurvePoint] = {}
    for p in points:
        by_flow[p.flow] = p
    return [by_flow[flow] for flow in sorted(by_flow)]


@dataclass
class RpmLine:
    """One speed curve of a pump model."""
    rpm: float
    label: str = ""
    points: List[CurvePoint] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.set_points(self.points)
        if not self.label:
            self.label = f"{self.rpm:g} RPM"

    def set_points(self, points: Iterable[CurvePoint]) -> None:
        self.points = normalize_points(points)

    @property
    def is_usable(self) -> bool:
        return len(self.points) >= 2

    @property
    def flows(self) -> npt.NDArray[np.float64]:
        return np.array([p.flow for p in self.points], dtype=np.float64)

    @property
    def heads(self) -> npt.NDArray[np.float64]:
        return np.array([p.head for p in self.points], dtype=np.float64)

    @property
    def max_head(self) -> float:
        return float(self.heads.max()) if self.points else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rpm": self.rpm,
            "label": self.label,
            "points": [p.to_dict() for p in self.points],
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> RpmLine:
        raw_points = data.get("points", [])
        if not isinstance(raw_points, list):
            raw_points = []
        points = [p for p in (CurvePoint.from_dict(d) for d in raw_points) if p is not None]
        skipped = len(raw_points) - len(points)
        if skipped:
            logger.debug(f"Dropped {skipped} malformed point(s) from line '{data.get('label', '')}'.")
        return RpmLine(
            rpm=to_float(data.get("rpm"), 0.0),
            label=str(data.get("label") or ""),
            points=points,
        )


@dataclass
class PumpCurveModel:
    model_id: str
    label: str = ""
    rpm_lines: List[RpmLine] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.label:
            self.label = self.model_id

    @property
    def usable_lines(self) -> List[RpmLine]:
        """Lines with at least two points, slowest first."""
        return sorted((line for line in self.rpm_lines if line.is_usable), key=lambda line: line.rpm)

    @property
    def is_usable(self) -> bool:
        return bool(self.usable_lines)

    @property
    def max_head(self) -> float:
        """Maximum rated head over every usable line (shut-off head of the fastest line)."""
        lines = self.usable_lines
        return max(line.max_head for line in lines) if lines else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "modelLabel": self.label,
            "rpmLines": [line.to_dict() for line in self.rpm_lines],
        }

    @staticmethod
    def from_dict(model_id: str, data: Dict[str, Any]) -> PumpCurveModel:
        raw_lines = data.get("rpmLines", [])
        if not isinstance(raw_lines, list):
            raw_lines = []
        return PumpCurveModel(
            model_id=model_id,
            label=str(data.get("modelLabel") or model_id),
            rpm_lines=[RpmLine.from_dict(d) for d in raw_lines if isinstance(d, dict)],
        )


def _line(rpm: float, pairs: List[tuple[float, float]]) -> RpmLine:
    return RpmLine(rpm=rpm, points=[CurvePoint(q, h) for q, h in pairs])


def default_models() -> List[PumpCurveModel]:
    """Built-in catalogue. Lower speeds follow the affinity laws from the full-speed line."""
    return [
        PumpCurveModel(
            model_id="Jandy VS FloPro 2.7 HP",
            rpm_lines=[
                _line(3450, [(0, 95), (30, 92), (60, 86), (90, 75), (120, 55), (135, 44)]),
                _line(2750, [(0, 60.3), (23.9, 58.4), (47.8, 54.6), (71.7, 47.6), (95.7, 34.9), (107.6, 27.9)]),
                _line(2250, [(0, 40.4), (19.6, 39.1), (39.1, 36.6), (58.7, 31.9), (78.3, 23.4), (88.0, 18.7)]),
                _line(1750, [(0, 24.4), (15.2, 23.7), (30.4, 22.1), (45.7, 19.3), (60.9, 14.2), (68.5, 11.3)]),
            ],
        ),
        PumpCurveModel(
            model_id="Pentair IntelliFlo VSF",
            rpm_lines=[
                _line(3450, [(0, 105), (40, 100), (80, 90), (120, 72), (150, 52), (165, 40)]),
                _line(2400, [(0, 50.8), (27.8, 48.4), (55.7, 43.6), (83.5, 34.8), (104.3, 25.2), (114.8, 19.4)]),
                _line(1800, [(0, 28.6), (20.9, 27.2), (41.7, 24.5), (62.6, 19.6), (78.3, 14.2), (86.1, 10.9)]),
            ],
        ),
    ]


@dataclass
class CurveLibrary:
    """
    Manages the pump curve catalogue (model id -> PumpCurveModel).
    """
    models: Dict[str, PumpCurveModel] = field(default_factory=dict)

    @classmethod
    def with_defaults(cls) -> CurveLibrary:
        return cls(models={m.model_id: m for m in default_models()})

    def add_model(self, model: PumpCurveModel) -> None:
        """Add or replace a model in the library."""
        self.models[model.model_id] = model

    def get_model(self, model_id: str) -> Optional[PumpCurveModel]:
        return self.models.get(model_id)

    def get_names(self) -> List[str]:
        return list(self.models.keys())

    def to_dict(self) -> Dict[str, Any]:
        return {model_id: model.to_dict() for model_id, model in self.models.items()}

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> CurveLibrary:
        library = CurveLibrary()
        for model_id, model_data in data.items():
            if not isinstance(model_data, dict):
                logger.warning(f"Ignoring malformed curve entry for model '{model_id}'.")
                continue
            library.add_model(PumpCurveModel.from_dict(str(model_id), model_data))
        return library
