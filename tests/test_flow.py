import pytest

from poolpumpsizing.engine.flow import (
    compute_flow_requirements, spa_required_flow, turnover_flow, water_features_flow
)
from poolpumpsizing.model.state import (
    DemandSystem, ProjectSettings, ProjectState, PumpAssignment, SpaConfig, SpaSetup,
    WaterFeatureRow
)


def make_state(features=(), spa=None, pumps=(), volume=18000, hours=6):
    return ProjectState(
        project=ProjectSettings(pool_volume=volume, turnover_hours=hours),
        water_features=tuple(features),
        spa=spa or SpaConfig(),
        pumps=tuple(pumps),
    )


SHEER = WaterFeatureRow("Sheer", quantity=3, width=2, flow_per_width=15)


def test_pool_turnover_scenario():
    assert turnover_flow(18000, 6) == 50.0


@pytest.mark.parametrize("volume, hours", [(0, 6), (18000, 0), (-100, 6), (18000, -1)])
def test_turnover_guards(volume, hours):
    assert turnover_flow(volume, hours) == 0.0


def test_water_features_scenario():
    assert water_features_flow([SHEER]) == 90.0


def test_water_features_ignore_negative_terms():
    assert water_features_flow([WaterFeatureRow(quantity=-1, width=-2, flow_per_width=15), SHEER]) == 90.0


def test_spa_required_is_max_of_jets_and_turnover():
    jets_dominate = SpaConfig(enabled=True, jet_count=6, flow_per_jet=12, volume=500, turnover_hours=0.5)
    assert spa_required_flow(jets_dominate) == 72.0

    turnover_dominates = SpaConfig(enabled=True, jet_count=1, flow_per_jet=5, volume=1200, turnover_hours=0.25)
    assert spa_required_flow(turnover_dominates) == pytest.approx(80.0)


def test_pool_required_flow_adds_features():
    flows = compute_flow_requirements(make_state(features=[SHEER]))
    assert flows.pool_required_flow == 140.0
    assert flows.system_required_flow(DemandSystem.POOL) == 50.0
    assert flows.system_required_flow(DemandSystem.WATER_FEATURES) == 90.0


def test_shared_includes_features_without_dedicated_pump():
    flows = compute_flow_requirements(make_state(features=[SHEER]))
    assert flows.system_required_flow(DemandSystem.SHARED) == 140.0


def test_shared_excludes_features_with_dedicated_pump():
    pumps = [PumpAssignment(model_id="x", system=DemandSystem.WATER_FEATURES)]
    flows = compute_flow_requirements(make_state(features=[SHEER], pumps=pumps))
    assert flows.system_required_flow(DemandSystem.SHARED) == 50.0


def test_spa_disabled_requires_nothing():
    flows = compute_flow_requirements(make_state(spa=SpaConfig(enabled=False)))
    assert flows.system_required_flow(DemandSystem.SPA) == 0.0
    assert flows.system_required_flow(DemandSystem.SHARED) == 50.0


def test_shared_spa_raises_shared_flow():
    spa = SpaConfig(enabled=True, setup=SpaSetup.SHARED, jet_count=8, flow_per_jet=12)
    flows = compute_flow_requirements(make_state(spa=spa))
    assert flows.system_required_flow(DemandSystem.SPA) == 96.0
    assert flows.system_required_flow(DemandSystem.SHARED) == 96.0


def test_dedicated_spa_does_not_raise_shared_flow():
    spa = SpaConfig(enabled=True, setup=SpaSetup.DEDICATED, jet_count=8, flow_per_jet=12)
    flows = compute_flow_requirements(make_state(spa=spa))
    assert flows.system_required_flow(DemandSystem.SHARED) == 50.0


def test_every_system_has_a_required_flow():
    flows = compute_flow_requirements(make_state(features=[SHEER]))
    assert set(flows.as_dict()) == set(DemandSystem)


def test_pool_required_flow_is_monotonic():
    base = compute_flow_requirements(make_state(features=[SHEER])).pool_required_flow

    bigger_pool = compute_flow_requirements(make_state(features=[SHEER], volume=20000))
    more_features = compute_flow_requirements(
        make_state(features=[WaterFeatureRow("Sheer", quantity=4, width=2, flow_per_width=15)])
    )
    wider = compute_flow_requirements(
        make_state(features=[WaterFeatureRow("Sheer", quantity=3, width=2.5, flow_per_width=15)])
    )
    longer_turnover = compute_flow_requirements(make_state(features=[SHEER], hours=8))

    assert bigger_pool.pool_required_flow >= base
    assert more_features.pool_required_flow >= base
    assert wider.pool_required_flow >= base
    assert longer_turnover.pool_required_flow <= base
