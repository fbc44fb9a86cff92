"""
Pump Matching
=============
Decides whether one pump assignment delivers the flow its demand system needs.

For every RPM line of the assignment's model the achievable flow at the target
head is looked up on the curve and multiplied by the pump quantity. The
slowest line that still meets demand is selected (lowest energy use). If no
line does, the strongest line is reported and the pump is marked CLOSE.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
import logging
from typing import List, Optional, Tuple

from poolpumpsizing.engine.interpolation import flow_at_head
from poolpumpsizing.model.curves import CurveLibrary, PumpCurveModel, RpmLine
from poolpumpsizing.model.state import PumpAssignment
from poolpumpsizing.utils import to_float, to_int

logger = logging.getLogger(__name__)


class PumpVerdict(StrEnum):
    PASS = "PASS"
    CLOSE = "CLOSE"          # runs, but short of the required flow
    FAIL = "FAIL"            # target head above the model's maximum rated head
    NO_CURVE = "NO CURVE"    # model missing or without a usable RPM line


@dataclass(frozen=True)
class LineCapacity:
    line: RpmLine
    unit_flow: float   # GPM of a single pump
    capacity: float    # GPM of all pumps in the assignment


@dataclass(frozen=True)
class PumpEvaluation:
    pump_id: str
    verdict: PumpVerdict
    explanation: str
    required_flow: float
    target_head: float
    selected_line: Optional[RpmLine] = None
    unit_flow: float = 0.0
    total_capacity: float = 0.0
    line_capacities: Tuple[LineCapacity, ...] = field(default_factory=tuple)

    @property
    def passed(self) -> bool:
        return self.verdict == PumpVerdict.PASS

    @property
    def is_hard_failure(self) -> bool:
        """No operating point exists at the target head."""
        return self.verdict == PumpVerdict.FAIL


def _quantity(assignment: PumpAssignment) -> int:
    return max(1, to_int(assignment.quantity, 1))


def _target_head(value: float) -> float:
    return max(0.0, to_float(value, 0.0))


def line_capacities(model: PumpCurveModel, head: float, quantity: int) -> List[LineCapacity]:
    result = []
    for line in model.usable_lines:
        unit_flow = flow_at_head(line.points, head)
        result.append(LineCapacity(line=line, unit_flow=unit_flow, capacity=unit_flow * quantity))
    return result


def select_line(capacities: List[LineCapacity], required_flow: float) -> Tuple[LineCapacity, bool]:
    """
    Pick the slowest line meeting `required_flow`, else the strongest one.

    Returns:
        (selected line capacity, whether it meets demand)
    """
    qualifying = [c for c in capacities if c.capacity >= required_flow]
    if qualifying:
        return min(qualifying, key=lambda c: c.line.rpm), True
    return max(capacities, key=lambda c: (c.capacity, -c.line.rpm)), False


def evaluate_pump(
    assignment: PumpAssignment,
    library: CurveLibrary,
    required_flow: float,
) -> PumpEvaluation:
    required_flow = max(0.0, to_float(required_flow, 0.0))
    head = _target_head(assignment.target_head)

    model = library.get_model(assignment.model_id)
    if model is None or not model.is_usable:
        logger.debug(f"Pump {assignment.pump_id}: no usable curve for '{assignment.model_id}'.")
        return PumpEvaluation(
            pump_id=assignment.pump_id,
            verdict=PumpVerdict.NO_CURVE,
            explanation=f"No usable curve for model '{assignment.model_id}'.",
            required_flow=required_flow,
            target_head=head,
        )

    capacities = tuple(line_capacities(model, head, _quantity(assignment)))

    max_head = model.max_head
    if head > max_head:
        return PumpEvaluation(
            pump_id=assignment.pump_id,
            verdict=PumpVerdict.FAIL,
            explanation=(
                f"FAIL: target head {head:g} ft exceeds the maximum rated head "
                f"{max_head:g} ft of {model.label}."
            ),
            required_flow=required_flow,
            target_head=head,
            line_capacities=capacities,
        )

    selected, meets_demand = select_line(list(capacities), required_flow)
    if meets_demand:
        verdict = PumpVerdict.PASS
        explanation = (
            f"PASS: {selected.capacity:.1f} GPM at {head:g} ft on {selected.line.label} "
            f"(needs {required_flow:.1f} GPM)."
        )
    else:
        verdict = PumpVerdict.CLOSE
        explanation = (
            f"CLOSE: best {selected.capacity:.1f} GPM at {head:g} ft on {selected.line.label}, "
            f"short by {required_flow - selected.capacity:.1f} GPM."
        )

    logger.debug(f"Pump {assignment.pump_id}: {explanation}")
    return PumpEvaluation(
        pump_id=assignment.pump_id,
        verdict=verdict,
        explanation=explanation,
        required_flow=required_flow,
        target_head=head,
        selected_line=selected.line,
        unit_flow=selected.unit_flow,
        total_capacity=selected.capacity,
        line_capacities=capacities,
    )


def capacity_at_head(
    assignment: PumpAssignment,
    library: CurveLibrary,
    head: float,
    required_flow: Optional[float] = None,
) -> float:
    """
    Capacity [GPM] of the assignment at an arbitrary head.

    With `required_flow` the line is chosen by `select_line`, so chart
    operating points sit on the same line as the verdict. Without it the
    strongest line is used.
    """
    model = library.get_model(assignment.model_id)
    head = _target_head(head)
    if model is None or not model.is_usable or head > model.max_head:
        return 0.0
    capacities = line_capacities(model, head, _quantity(assignment))
    if required_flow is None:
        return max(c.capacity for c in capacities)
    selected, _ = select_line(capacities, max(0.0, to_float(required_flow, 0.0)))
    return selected.capacity
