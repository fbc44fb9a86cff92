import pytest

from poolpumpsizing.engine.matcher import PumpVerdict, capacity_at_head, evaluate_pump
from poolpumpsizing.model.curves import CurveLibrary, CurvePoint, PumpCurveModel, RpmLine
from poolpumpsizing.model.state import DemandSystem, PumpAssignment


def assignment(model_id="Two Speed", quantity=1, head=50.0):
    return PumpAssignment(pump_id="p1", model_id=model_id, quantity=quantity,
                          system=DemandSystem.POOL, target_head=head)


class TestEvaluatePump:

    def test_only_high_speed_line_meets_demand(self, library):
        result = evaluate_pump(assignment(), library, required_flow=50.0)

        assert result.verdict == PumpVerdict.PASS
        assert result.selected_line.rpm == 3000
        assert result.unit_flow == pytest.approx(72.0)
        assert result.total_capacity == pytest.approx(72.0)
        assert result.passed

    def test_lowest_qualifying_speed_is_selected(self, library):
        # At 20 ft every FloPro line qualifies for 30 GPM
        result = evaluate_pump(assignment("Jandy VS FloPro 2.7 HP", head=20.0), library, required_flow=30.0)

        assert result.verdict == PumpVerdict.PASS
        assert result.selected_line.rpm == 1750
        assert result.total_capacity == pytest.approx(30.4 + 0.75 * (45.7 - 30.4))

    def test_shortfall_reports_strongest_line(self, library):
        result = evaluate_pump(assignment(), library, required_flow=100.0)

        assert result.verdict == PumpVerdict.CLOSE
        assert result.selected_line.rpm == 3000
        assert result.total_capacity == pytest.approx(72.0)
        assert "short by 28.0 GPM" in result.explanation
        assert not result.is_hard_failure

    def test_head_above_max_rated_head_is_hard_failure(self, library):
        result = evaluate_pump(assignment(head=81.0), library, required_flow=10.0)

        assert result.verdict == PumpVerdict.FAIL
        assert result.is_hard_failure
        assert result.total_capacity == 0.0
        assert result.selected_line is None

    def test_quantity_scales_capacity(self, library):
        single = evaluate_pump(assignment(quantity=1), library, required_flow=100.0)
        triple = evaluate_pump(assignment(quantity=3), library, required_flow=100.0)

        assert triple.total_capacity == pytest.approx(3 * single.total_capacity)
        assert triple.unit_flow == pytest.approx(single.unit_flow)
        assert triple.verdict == PumpVerdict.PASS

    def test_missing_model(self, library):
        result = evaluate_pump(assignment("Unknown"), library, required_flow=10.0)
        assert result.verdict == PumpVerdict.NO_CURVE
        assert result.total_capacity == 0.0

    def test_model_without_usable_line(self):
        lib = CurveLibrary()
        lib.add_model(PumpCurveModel("Sparse", rpm_lines=[RpmLine(3450, points=[CurvePoint(0, 60)])]))
        result = evaluate_pump(assignment("Sparse"), lib, required_flow=10.0)
        assert result.verdict == PumpVerdict.NO_CURVE

    def test_zero_required_flow_passes_on_slowest_line(self, library):
        result = evaluate_pump(assignment("Jandy VS FloPro 2.7 HP", head=30.0), library, required_flow=0.0)
        assert result.verdict == PumpVerdict.PASS
        assert result.selected_line.rpm == 1750

    def test_malformed_quantity_and_head_fall_back(self, library):
        odd = PumpAssignment(pump_id="p1", model_id="Two Speed", quantity=0, target_head=float("nan"))
        result = evaluate_pump(odd, library, required_flow=10.0)
        # At 0 ft both lines run off the end of their curves; the slow one suffices
        assert result.target_head == 0.0
        assert result.selected_line.rpm == 1500
        assert result.total_capacity == pytest.approx(50.0)


class TestCapacityAtHead:

    def test_uses_strongest_line(self, library):
        assert capacity_at_head(assignment(quantity=2), library, 50.0) == pytest.approx(144.0)

    def test_zero_above_max_head(self, library):
        assert capacity_at_head(assignment(), library, 90.0) == 0.0

    def test_zero_for_unknown_model(self, library):
        assert capacity_at_head(assignment("Unknown"), library, 10.0) == 0.0

    def test_required_flow_selects_same_line_as_verdict(self, library):
        pump = assignment("Jandy VS FloPro 2.7 HP", head=20.0)
        result = evaluate_pump(pump, library, required_flow=50.0)

        assert result.selected_line.rpm == 2250
        assert capacity_at_head(pump, library, 20.0, required_flow=50.0) == pytest.approx(result.total_capacity)
        assert capacity_at_head(pump, library, 20.0) == pytest.approx(135.0)
