"""
Flow Requirement Aggregation
============================
Turns the pool/feature/spa configuration into required flows [GPM] per
demand system.

Allocation policy for the Shared system:
    Shared serves the pool turnover plus the water features. When a dedicated
    WaterFeatures pump exists the features are already covered, so Shared only
    carries the turnover. If the spa is enabled and circulated by the shared
    pump, Shared must also reach the spa flow (the larger of the two governs,
    because the spa and pool modes are valved alternately).
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from typing import Dict, Iterable

from poolpumpsizing.model.state import (
    DemandSystem, ProjectState, SpaConfig, SpaSetup, WaterFeatureRow
)
from poolpumpsizing.utils import to_float

logger = logging.getLogger(__name__)


def turnover_flow(volume: float, turnover_hours: float) -> float:
    """Flow [GPM] that circulates `volume` [gal] once every `turnover_hours`."""
    volume = to_float(volume)
    turnover_hours = to_float(turnover_hours)
    if volume <= 0 or turnover_hours <= 0:
        return 0.0
    return volume / (turnover_hours * 60.0)


def water_feature_flow(row: WaterFeatureRow) -> float:
    terms = (to_float(row.quantity), to_float(row.width), to_float(row.flow_per_width))
    if any(t <= 0 for t in terms):
        return 0.0
    flow = math.prod(terms)
    return flow if math.isfinite(flow) else 0.0


def water_features_flow(rows: Iterable[WaterFeatureRow]) -> float:
    return sum(water_feature_flow(row) for row in rows)


def spa_jets_flow(spa: SpaConfig) -> float:
    jets, per_jet = to_float(spa.jet_count), to_float(spa.flow_per_jet)
    if jets <= 0 or per_jet <= 0:
        return 0.0
    return jets * per_jet


def spa_required_flow(spa: SpaConfig) -> float:
    """Jets usually dominate; the spa turnover is the floor."""
    return max(spa_jets_flow(spa), turnover_flow(spa.volume, spa.turnover_hours))


@dataclass(frozen=True)
class FlowRequirements:
    """Summary flows [GPM] of one configuration snapshot."""
    pool_turnover_flow: float
    water_features_flow: float
    spa_jets_flow: float
    spa_turnover_flow: float
    spa_required_flow: float
    spa_enabled: bool
    spa_on_shared_pump: bool
    dedicated_water_features: bool

    @property
    def pool_required_flow(self) -> float:
        return self.pool_turnover_flow + self.water_features_flow

    def system_required_flow(self, system: DemandSystem) -> float:
        """Required flow for one demand system; total over every tag."""
        match system:
            case DemandSystem.POOL:
                return self.pool_turnover_flow
            case DemandSystem.WATER_FEATURES:
                return self.water_features_flow
            case DemandSystem.SPA:
                return self.spa_required_flow if self.spa_enabled else 0.0
            case DemandSystem.SHARED:
                shared = (
                    self.pool_turnover_flow
                    if self.dedicated_water_features
                    else self.pool_required_flow
                )
                if self.spa_enabled and self.spa_on_shared_pump:
                    shared = max(shared, self.spa_required_flow)
                return shared
        return 0.0

    def as_dict(self) -> Dict[DemandSystem, float]:
        return {system: self.system_required_flow(system) for system in DemandSystem}


def compute_flow_requirements(state: ProjectState) -> FlowRequirements:
    spa = state.spa
    requirements = FlowRequirements(
        pool_turnover_flow=turnover_flow(state.project.pool_volume, state.project.turnover_hours),
        water_features_flow=water_features_flow(state.water_features),
        spa_jets_flow=spa_jets_flow(spa),
        spa_turnover_flow=turnover_flow(spa.volume, spa.turnover_hours),
        spa_required_flow=spa_required_flow(spa),
        spa_enabled=bool(spa.enabled),
        spa_on_shared_pump=spa.setup == SpaSetup.SHARED,
        dedicated_water_features=state.has_dedicated_water_features,
    )
    logger.debug(
        f"Flows: turnover={requirements.pool_turnover_flow:.1f}, "
        f"features={requirements.water_features_flow:.1f}, "
        f"spa={requirements.spa_required_flow:.1f} GPM"
    )
    return requirements
