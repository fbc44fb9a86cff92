import matplotlib
import pytest

# Charts are rendered off-screen in tests
matplotlib.use("Agg")

from poolpumpsizing.model.curves import CurveLibrary, CurvePoint, PumpCurveModel, RpmLine
from poolpumpsizing.model.state import DemandSystem, ProjectState, PumpAssignment


SCENARIO_POINTS = [(0, 95), (30, 92), (60, 86), (90, 75), (120, 55), (135, 44)]


def make_line(rpm, pairs):
    return RpmLine(rpm=rpm, points=[CurvePoint(q, h) for q, h in pairs])


@pytest.fixture
def sample_points():
    """The full-speed FloPro line."""
    return [CurvePoint(q, h) for q, h in SCENARIO_POINTS]


@pytest.fixture
def two_speed_model():
    """Only the 3000 RPM line reaches 50 GPM at 50 ft."""
    return PumpCurveModel(
        model_id="Two Speed",
        rpm_lines=[
            make_line(3000, [(0, 80), (40, 70), (80, 45), (100, 30)]),
            make_line(1500, [(0, 40), (20, 35), (40, 25), (50, 18)]),
        ],
    )


@pytest.fixture
def library(two_speed_model):
    lib = CurveLibrary.with_defaults()
    lib.add_model(two_speed_model)
    return lib


@pytest.fixture
def default_state():
    return ProjectState.default()


@pytest.fixture
def shared_pump():
    return PumpAssignment(
        pump_id="shared1",
        model_id="Jandy VS FloPro 2.7 HP",
        system=DemandSystem.SHARED,
        target_head=50.0,
    )
