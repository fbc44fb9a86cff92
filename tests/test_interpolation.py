import math

import pytest

from poolpumpsizing.engine.interpolation import flow_at_head, head_at_flow
from poolpumpsizing.model.curves import CurvePoint


def pts(pairs):
    return [CurvePoint(q, h) for q, h in pairs]


class TestFlowAtHead:

    def test_scenario_point_is_exact(self, sample_points):
        assert flow_at_head(sample_points, 75.0) == 90.0

    def test_interpolates_inside_segment(self, sample_points):
        # (0,95)-(30,92): 94 ft is a third of the way
        assert flow_at_head(sample_points, 94.0) == pytest.approx(10.0)

    def test_head_above_curve_is_unreachable(self, sample_points):
        assert flow_at_head(sample_points, 95.1) == 0.0

    def test_head_below_curve_returns_max_flow(self, sample_points):
        assert flow_at_head(sample_points, 10.0) == 135.0

    @pytest.mark.parametrize("head", [44.5, 50.0, 60.0, 80.0, 90.0, 93.0, 94.9])
    def test_round_trip_with_forward_lookup(self, sample_points, head):
        flow = flow_at_head(sample_points, head)
        assert head_at_flow(sample_points, flow) == pytest.approx(head, abs=1e-9)

    def test_needs_two_points(self):
        assert flow_at_head([], 10.0) == 0.0
        assert flow_at_head(pts([(10, 50)]), 50.0) == 0.0

    @pytest.mark.parametrize("head", [math.nan, math.inf, -math.inf])
    def test_non_finite_head(self, sample_points, head):
        assert flow_at_head(sample_points, head) == 0.0

    def test_flat_segment_returns_segment_start(self):
        assert flow_at_head(pts([(10, 50), (30, 50)]), 50.0) == 10.0

    def test_rising_segment_is_accepted(self):
        assert flow_at_head(pts([(0, 10), (10, 20), (20, 5)]), 15.0) == pytest.approx(5.0)


class TestHeadAtFlow:

    def test_interpolates(self, sample_points):
        assert head_at_flow(sample_points, 45.0) == pytest.approx(89.0)

    def test_saturates_below_first_point(self, sample_points):
        assert head_at_flow(sample_points, -5.0) == 95.0

    def test_saturates_above_last_point(self, sample_points):
        assert head_at_flow(sample_points, 200.0) == 44.0

    def test_empty_curve(self):
        assert head_at_flow([], 10.0) == 0.0
