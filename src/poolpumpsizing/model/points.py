"""
Curve Point Text Grammar
========================
Parses the free-form text a user types into the curve editor.

Grammar (one point per line):
    line      := flow SEP head [SEP ...]
    SEP       := any run of ',', ';' or whitespace

Examples that all describe the same point::

    0,95
    0 , 95
    0 95
    0;95

Blank lines are ignored. Malformed lines are skipped and reported as a
`LineDiagnostic` instead of aborting the whole parse.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
import math
import re
from typing import List, Iterable

from poolpumpsizing.model.curves import CurvePoint, normalize_points

logger = logging.getLogger(__name__)

_SEPARATOR = re.compile(r"[,\s;]+")


@dataclass(frozen=True)
class LineDiagnostic:
    """Why a single input line was skipped."""
    line_number: int
    text: str
    reason: str


@dataclass
class PointParseResult:
    points: List[CurvePoint] = field(default_factory=list)
    diagnostics: List[LineDiagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.diagnostics


def _parse_number(token: str) -> float:
    value = float(token)
    if not math.isfinite(value):
        raise ValueError(f"'{token}' is not a finite number")
    return value


def parse_points(text: str) -> PointParseResult:
    """
    Parse curve points from text.

    Returns a result holding the valid points sorted ascending by flow
    (duplicate flows collapse to the last one entered) together with one
    diagnostic per rejected line.
    """
    result = PointParseResult()
    raw: List[CurvePoint] = []

    for line_number, line in enumerate(str(text or "").splitlines(), start=1):
        stripped = line.strip()
        if not stripped:
            continue

        tokens = [t for t in _SEPARATOR.split(stripped) if t]
        if len(tokens) < 2:
            result.diagnostics.append(
                LineDiagnostic(line_number, stripped, "expected a flow and a head value")
            )
            continue

        try:
            flow = _parse_number(tokens[0])
            head = _parse_number(tokens[1])
        except ValueError:
            result.diagnostics.append(
                LineDiagnostic(line_number, stripped, "flow and head must be numbers")
            )
            continue

        if flow < 0 or head < 0:
            result.diagnostics.append(
                LineDiagnostic(line_number, stripped, "flow and head must not be negative")
            )
            continue

        raw.append(CurvePoint(flow=flow, head=head))

    result.points = normalize_points(raw)
    if result.diagnostics:
        logger.debug(f"Skipped {len(result.diagnostics)} malformed curve point line(s).")
    return result


def points_to_text(points: Iterable[CurvePoint]) -> str:
    """Inverse of `parse_points` for display in the editor."""
    return "\n".join(f"{p.flow:g},{p.head:g}" for p in points)
