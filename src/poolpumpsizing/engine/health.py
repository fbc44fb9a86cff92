"""
System Health Aggregation
=========================
Groups pump assignments by demand system and decides whether each system,
and the project as a whole, is served.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
import logging
from typing import Dict, List, Sequence, Tuple

from poolpumpsizing.engine.flow import FlowRequirements
from poolpumpsizing.engine.matcher import PumpEvaluation
from poolpumpsizing.model.state import DemandSystem, PumpAssignment

logger = logging.getLogger(__name__)


class SystemStatus(StrEnum):
    PASS = "PASS"
    FAIL = "FAIL"
    NOT_APPLICABLE = "N/A"


@dataclass(frozen=True)
class SystemHealth:
    system: DemandSystem
    status: SystemStatus
    required_flow: float
    capacity: float
    pump_ids: Tuple[str, ...] = field(default_factory=tuple)
    hard_failure: bool = False

    @property
    def has_assignments(self) -> bool:
        return bool(self.pump_ids)

    @property
    def shortfall(self) -> float:
        return max(0.0, self.required_flow - self.capacity)


def evaluate_system(
    system: DemandSystem,
    required_flow: float,
    group: Sequence[Tuple[PumpAssignment, PumpEvaluation]],
) -> SystemHealth:
    """
    Pass requires at least one assignment, no hard failure and enough capacity.
    A system that needs no flow is neutral regardless of its pumps.
    """
    hard_failure = any(evaluation.is_hard_failure for _, evaluation in group)
    capacity = sum(
        evaluation.total_capacity for _, evaluation in group if not evaluation.is_hard_failure
    )
    pump_ids = tuple(assignment.pump_id for assignment, _ in group)

    if required_flow <= 0:
        status = SystemStatus.NOT_APPLICABLE
    elif pump_ids and not hard_failure and capacity >= required_flow:
        status = SystemStatus.PASS
    else:
        status = SystemStatus.FAIL

    return SystemHealth(
        system=system,
        status=status,
        required_flow=required_flow,
        capacity=capacity,
        pump_ids=pump_ids,
        hard_failure=hard_failure,
    )


def aggregate_system_health(
    evaluations: Sequence[Tuple[PumpAssignment, PumpEvaluation]],
    flows: FlowRequirements,
) -> Dict[DemandSystem, SystemHealth]:
    groups: Dict[DemandSystem, List[Tuple[PumpAssignment, PumpEvaluation]]] = {
        system: [] for system in DemandSystem
    }
    for assignment, evaluation in evaluations:
        groups[assignment.system].append((assignment, evaluation))

    return {
        system: evaluate_system(system, flows.system_required_flow(system), group)
        for system, group in groups.items()
    }


def _carried_by_shared(system: DemandSystem, flows: FlowRequirements) -> bool:
    if system in (DemandSystem.POOL, DemandSystem.WATER_FEATURES):
        return True
    return system == DemandSystem.SPA and flows.spa_on_shared_pump


def overall_status(systems: Dict[DemandSystem, SystemHealth], flows: FlowRequirements) -> SystemStatus:
    """
    Roll-up of the per-system results.

    Every system with pumps assigned must pass. A system without pumps still
    reports FAIL on its own, but does not fail the project when its demand is
    carried by an assigned Shared pump (pool turnover, water features, and a
    spa plumbed to the shared pump).
    """
    applicable = [h for h in systems.values() if h.status != SystemStatus.NOT_APPLICABLE]
    if not applicable:
        return SystemStatus.NOT_APPLICABLE

    shared = systems.get(DemandSystem.SHARED)
    shared_in_use = shared is not None and shared.has_assignments

    for health in applicable:
        if health.has_assignments:
            if health.status != SystemStatus.PASS:
                return SystemStatus.FAIL
        elif not (shared_in_use and _carried_by_shared(health.system, flows)):
            return SystemStatus.FAIL

    return SystemStatus.PASS
