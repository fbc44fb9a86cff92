"""
Curve Interpolation
===================
Piecewise-linear lookups over a single RPM line.

Two directions are needed:
- forward (head at a given flow) for drawing and system-curve checks,
- inverse (flow at a given head) to find how much water a pump moves when it
  has to push against the target TDH.
"""
from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from poolpumpsizing import config
from poolpumpsizing.model.curves import CurvePoint
from poolpumpsizing.utils import clamp


def head_at_flow(points: Sequence[CurvePoint], flow: float) -> float:
    """
    Head [ft] produced at `flow` [GPM].

    Flow outside the curve is clamped to its first/last point, so the result
    saturates at both ends instead of extrapolating.
    """
    if not points or not math.isfinite(flow):
        return 0.0
    flows = [p.flow for p in points]
    heads = [p.head for p in points]
    return float(np.interp(flow, flows, heads, left=heads[0], right=heads[-1]))


def flow_at_head(points: Sequence[CurvePoint], target_head: float) -> float:
    """
    Flow [GPM] the curve delivers against `target_head` [ft].

    Returns:
        0 when the head is above the curve (no operating point), the flow of
        the maximum-flow point when the head is below the curve, otherwise the
        flow interpolated on the first segment that brackets the head.
    """
    if not points or len(points) < 2 or not math.isfinite(target_head):
        return 0.0

    heads = [p.head for p in points]
    if target_head > max(heads):
        return 0.0
    if target_head < min(heads):
        return points[-1].flow

    # Heads usually fall with flow, but either direction is accepted
    for a, b in zip(points, points[1:]):
        low, high = min(a.head, b.head), max(a.head, b.head)
        if not low <= target_head <= high:
            continue

        delta = b.head - a.head
        if abs(delta) < config.FLAT_SEGMENT_TOLERANCE:
            return a.flow

        u = (target_head - a.head) / delta
        flow = a.flow + u * (b.flow - a.flow)
        return clamp(flow, min(a.flow, b.flow), max(a.flow, b.flow))

    return 0.0
