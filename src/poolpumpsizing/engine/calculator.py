"""
Sizing Calculator
=================
Runs the whole engine over one configuration snapshot.

Every edit produces a new ProjectState and a full, synchronous recomputation:
flows -> per-pump verdicts -> per-system health -> overall status, plus the TDH
estimate. The calculator keeps only the estimator (last estimate and last
warning signature) between calls.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Dict, List, Optional, Tuple

from poolpumpsizing.engine.flow import FlowRequirements, compute_flow_requirements
from poolpumpsizing.engine.health import (
    SystemHealth, SystemStatus, aggregate_system_health, overall_status
)
from poolpumpsizing.engine.matcher import PumpEvaluation, capacity_at_head, evaluate_pump
from poolpumpsizing.engine.tdh import TdhEstimate, TdhEstimator
from poolpumpsizing.model.state import DemandSystem, ProjectState, PumpAssignment

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SizingReport:
    """Return object with everything the presentation layer displays."""
    state_version: int
    flows: FlowRequirements
    pumps: Tuple[Tuple[PumpAssignment, PumpEvaluation], ...]
    systems: Dict[DemandSystem, SystemHealth]
    overall: SystemStatus
    tdh: TdhEstimate
    notes: List[str] = field(default_factory=list)

    def evaluation_for(self, pump_id: str) -> Optional[PumpEvaluation]:
        for assignment, evaluation in self.pumps:
            if assignment.pump_id == pump_id:
                return evaluation
        return None


class SizingCalculator:
    def __init__(self, estimator: Optional[TdhEstimator] = None) -> None:
        self.estimator = estimator or TdhEstimator()

    def calculate(self, state: ProjectState) -> SizingReport:
        flows = compute_flow_requirements(state)

        pumps = tuple(
            (assignment, evaluate_pump(assignment, state.curves, flows.system_required_flow(assignment.system)))
            for assignment in state.pumps
        )
        systems = aggregate_system_health(pumps, flows)
        overall = overall_status(systems, flows)
        tdh = self.estimator.estimate(state, flows)

        notes = []
        if flows.dedicated_water_features:
            notes.append("Water features have a dedicated pump; Shared covers pool turnover only.")
        if flows.spa_enabled and flows.spa_on_shared_pump:
            notes.append("Spa runs on the shared pump; Shared must also reach the spa flow.")
        if tdh.warning:
            notes.append(tdh.warning)

        logger.info(f"Project v{state.version}: {len(pumps)} pump(s), overall {overall}.")
        return SizingReport(
            state_version=state.version,
            flows=flows,
            pumps=pumps,
            systems=systems,
            overall=overall,
            tdh=tdh,
            notes=notes,
        )

    def apply_estimated_head(self, state: ProjectState) -> ProjectState:
        """Explicit user action: write the TDH estimate onto pumps in scope."""
        return self.estimator.apply(state)

    @staticmethod
    def capacity_at_head(state: ProjectState, pump_id: str, head: float) -> float:
        """
        Capacity [GPM] of pump `pump_id` at `head` [ft] (0 for unknown pumps),
        on the RPM line the matcher selects for its system's demand.
        """
        assignment = state.get_pump(pump_id)
        if assignment is None:
            return 0.0
        required = compute_flow_requirements(state).system_required_flow(assignment.system)
        return capacity_at_head(assignment, state.curves, head, required_flow=required)
