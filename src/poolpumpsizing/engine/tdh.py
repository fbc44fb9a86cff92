"""
Hydraulic TDH Estimation
========================
Estimates the total dynamic head a pump must overcome from the piping layout.

    L  = 2 * (one-way equipment distance) + extra fitting allowance
    hf = 4.52 * L * Q^1.85 / (C^1.85 * d^4.87)      (Hazen-Williams, GPM / in / ft)
    H  = hf + elevation change + fixed equipment head loss

The estimate is only written back onto pump assignments on request, and only
when it passes the guard rails. A guard-rail warning is logged once per set of
offending inputs; re-running with the same values stays quiet.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
import logging
import math
from typing import Hashable, Optional, Tuple

from poolpumpsizing import config
from poolpumpsizing.engine.flow import FlowRequirements, compute_flow_requirements
from poolpumpsizing.model.state import ApplyScope, EngineeringParams, ProjectState
from poolpumpsizing.utils import to_float

logger = logging.getLogger(__name__)


def equivalent_length(engineering: EngineeringParams) -> float:
    """Round trip to the equipment pad plus the fitting allowance [ft]."""
    distance = max(0.0, to_float(engineering.equipment_distance))
    fittings = max(0.0, to_float(engineering.extra_fittings))
    return 2.0 * distance + fittings


def hazen_williams_friction_loss(length: float, flow: float, c: float, diameter: float) -> float:
    """
    Friction head loss [ft] of water in a pipe.

    Args:
        length: Equivalent pipe length [ft].
        flow: Flow rate [GPM].
        c: Hazen-Williams roughness coefficient (PVC ~ 140-150).
        diameter: Internal diameter [in].

    Returns:
        Head loss in feet; NaN when `c` or `diameter` is not positive.
    """
    if c <= 0 or diameter <= 0:
        return float("nan")
    if length <= 0 or flow <= 0:
        return 0.0
    return (
        config.HAZEN_WILLIAMS_COEFFICIENT * length * flow ** config.HAZEN_WILLIAMS_FLOW_EXPONENT
        / (c ** config.HAZEN_WILLIAMS_FLOW_EXPONENT * diameter ** config.HAZEN_WILLIAMS_DIAMETER_EXPONENT)
    )


def scope_flow(flows: FlowRequirements, scope: ApplyScope) -> float:
    """Design flow for the estimate: the scope's system, or the largest one for ALL."""
    return max(flows.system_required_flow(system) for system in scope.systems)


@dataclass(frozen=True)
class TdhEstimate:
    scope: ApplyScope
    flow: float               # GPM
    equivalent_length: float  # ft
    friction_loss: float      # ft
    estimated_head: float     # ft
    warning: Optional[str] = None

    @property
    def applicable(self) -> bool:
        return self.warning is None


def _check_guard_rails(
    flow: float, head: float, engineering: EngineeringParams
) -> Tuple[Optional[str], Hashable]:
    """Return (warning text, signature of the offending inputs) or (None, None)."""
    if not math.isfinite(flow) or flow <= 0:
        return (
            "No design flow for the selected scope; the estimate is not applied.",
            ("flow", flow if math.isfinite(flow) else None),
        )
    if flow > config.MAX_SANE_FLOW_GPM:
        return (
            f"Design flow {flow:.0f} GPM exceeds {config.MAX_SANE_FLOW_GPM:.0f} GPM; "
            f"check the water feature widths and flow per foot. The estimate is not applied.",
            ("high-flow", round(flow, 3)),
        )
    c = to_float(engineering.roughness_c)
    diameter = to_float(engineering.pipe_diameter)
    if c <= 0 or diameter <= 0:
        return (
            "Pipe diameter and roughness coefficient C must be positive; the estimate is not applied.",
            ("pipe", c, diameter),
        )
    if not math.isfinite(head) or head <= 0:
        return (
            "Estimated head is not positive; the estimate is not applied.",
            ("head", round(head, 3) if math.isfinite(head) else None),
        )
    if head > config.MAX_SANE_HEAD_FT:
        return (
            f"Estimated head {head:.0f} ft exceeds {config.MAX_SANE_HEAD_FT:.0f} ft; "
            f"check the pipe size and distances. The estimate is not applied.",
            ("high-head", round(head, 3)),
        )
    return None, None


class TdhEstimator:
    """
    Holds the last estimate (for display and for the next apply action) and
    the signature of the last warning issued.
    """

    def __init__(self) -> None:
        self.last_estimate: Optional[TdhEstimate] = None
        self._last_warning_signature: Hashable = None

    def estimate(self, state: ProjectState, flows: Optional[FlowRequirements] = None) -> TdhEstimate:
        engineering = state.engineering
        flows = flows if flows is not None else compute_flow_requirements(state)

        scope = engineering.apply_scope
        flow = scope_flow(flows, scope)
        length = equivalent_length(engineering)
        friction = hazen_williams_friction_loss(
            length, flow, to_float(engineering.roughness_c), to_float(engineering.pipe_diameter)
        )
        head = friction + to_float(engineering.elevation_change) + to_float(engineering.equipment_head_loss)

        warning, signature = _check_guard_rails(flow, head, engineering)
        if warning is None:
            self._last_warning_signature = None
        elif signature != self._last_warning_signature:
            self._last_warning_signature = signature
            logger.warning(warning)

        self.last_estimate = TdhEstimate(
            scope=scope,
            flow=flow,
            equivalent_length=length,
            friction_loss=friction,
            estimated_head=head,
            warning=warning,
        )
        logger.debug(
            f"TDH estimate ({scope}): Q={flow:.1f} GPM, L={length:.0f} ft, "
            f"hf={friction:.2f} ft, H={head:.2f} ft"
        )
        return self.last_estimate

    def apply(self, state: ProjectState) -> ProjectState:
        """
        Write the estimated head onto every pump assignment in the apply scope.
        Returns the unchanged snapshot when a guard rail blocks the estimate.
        """
        estimate = self.estimate(state)
        if not estimate.applicable:
            logger.info("Estimated TDH not applied to pumps.")
            return state

        systems = estimate.scope.systems
        head = round(estimate.estimated_head, 1)
        targets = [p.pump_id for p in state.pumps if p.system in systems]
        if not targets:
            logger.info(f"No pumps in scope '{estimate.scope}'; nothing to apply.")
            return state

        pumps = [
            replace(p, target_head=head) if p.pump_id in targets else p
            for p in state.pumps
        ]
        logger.info(f"Applied estimated TDH {head:g} ft to {len(targets)} pump(s).")
        return state.update(pumps=pumps)
