import dataclasses

import pytest

from poolpumpsizing.model.curves import CurveLibrary, CurvePoint, PumpCurveModel, RpmLine
from poolpumpsizing.model.state import (
    ApplyScope, DemandSystem, ProjectState, PumpAssignment, SpaConfig, WaterFeatureRow
)


def test_default_project(default_state):
    assert default_state.version == 0
    assert len(default_state.pumps) == 1
    assert default_state.pumps[0].system == DemandSystem.SHARED
    assert default_state.curves.get_model(default_state.pumps[0].model_id) is not None


def test_update_returns_new_versioned_snapshot(default_state):
    updated = default_state.update_project(pool_volume=25000)

    assert updated is not default_state
    assert updated.version == 1
    assert updated.project.pool_volume == 25000
    assert default_state.project.pool_volume == 18000


def test_snapshots_are_frozen(default_state):
    with pytest.raises(dataclasses.FrozenInstanceError):
        default_state.version = 5
    with pytest.raises(dataclasses.FrozenInstanceError):
        default_state.pumps[0].target_head = 10.0


def test_lists_are_stored_as_tuples(default_state):
    updated = default_state.update(water_features=[WaterFeatureRow("Scupper", 2, 1.0, 10.0)])
    assert isinstance(updated.water_features, tuple)


def test_version_cannot_be_set_directly(default_state):
    assert default_state.update(version=42).version == 1


def test_pump_edits(default_state):
    pump = PumpAssignment(pump_id="wf", model_id="Pentair IntelliFlo VSF", system=DemandSystem.WATER_FEATURES)
    state = default_state.add_pump(pump)
    assert state.has_dedicated_water_features

    state = state.update_pump("wf", quantity=2, target_head=45.0)
    assert state.get_pump("wf").quantity == 2
    assert state.get_pump("wf").target_head == 45.0

    state = state.remove_pump("wf")
    assert state.get_pump("wf") is None
    assert not state.has_dedicated_water_features
    assert state.version == 3


def test_duplicate_or_missing_pump_raises(default_state):
    existing = default_state.pumps[0]
    with pytest.raises(ValueError):
        default_state.add_pump(existing)
    with pytest.raises(ValueError):
        default_state.update_pump("missing", quantity=2)
    with pytest.raises(ValueError):
        default_state.remove_pump("missing")


def test_water_feature_edits(default_state):
    state = default_state.add_water_feature(WaterFeatureRow("Sheer", 1, 2.0, 15.0))
    state = state.update_water_feature(0, quantity=3)
    assert state.water_features[0].quantity == 3

    state = state.remove_water_feature(0)
    assert state.water_features == ()


def test_pumps_for(default_state):
    assert len(default_state.pumps_for(DemandSystem.SHARED)) == 1
    assert default_state.pumps_for(DemandSystem.SPA) == ()


@pytest.mark.parametrize("scope, systems", [
    (ApplyScope.ALL, set(DemandSystem)),
    (ApplyScope.SHARED, {DemandSystem.SHARED}),
    (ApplyScope.POOL, {DemandSystem.POOL}),
    (ApplyScope.WATER_FEATURES, {DemandSystem.WATER_FEATURES}),
    (ApplyScope.SPA, {DemandSystem.SPA}),
])
def test_apply_scope_covers_systems(scope, systems):
    assert scope.systems == systems


def test_pump_from_dict_sanitizes_input():
    pump = PumpAssignment.from_dict({"id": "x", "model": "M", "qty": "0", "system": "Bogus", "tdh": "abc"})
    assert pump.quantity == 1
    assert pump.system == DemandSystem.SHARED
    assert pump.target_head == 50.0


def test_curve_edits_do_not_reach_earlier_snapshots(default_state):
    model = PumpCurveModel("Custom", rpm_lines=[RpmLine(3000, points=[CurvePoint(0, 50), CurvePoint(60, 20)])])
    updated = default_state.add_curve_model(model)

    assert updated.curves.get_model("Custom") is not None
    assert default_state.curves.get_model("Custom") is None

    library = CurveLibrary.with_defaults()
    snapshot = default_state.update(curves=library)
    library.add_model(model)
    assert snapshot.curves.get_model("Custom") is None


@pytest.mark.parametrize("raw, expected", [
    (True, True),
    (False, False),
    ("true", True),
    ("1", True),
    (1, True),
    ("false", False),
    ("0", False),
    ("no", False),
    (None, False),
])
def test_spa_enabled_flag_parsing(raw, expected):
    assert SpaConfig.from_dict({"enabled": raw}).enabled is expected
