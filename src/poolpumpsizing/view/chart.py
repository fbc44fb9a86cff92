"""
Pump Curve Chart
================
Draws the RPM lines of a pump model with matplotlib, together with the target
head, the required flow and the operating point of an assignment.

All values are per pump; for an assignment with several pumps the required
flow is divided by the quantity.
"""
from __future__ import annotations

import logging
from typing import Optional, TYPE_CHECKING

import numpy as np
import matplotlib.pyplot as plt

from poolpumpsizing.engine.calculator import SizingCalculator
from poolpumpsizing.engine.flow import compute_flow_requirements
from poolpumpsizing.model.curves import PumpCurveModel
from poolpumpsizing.model.state import ProjectState

if TYPE_CHECKING:
    from matplotlib.axes import Axes

logger = logging.getLogger(__name__)


def plot_pump_model(model: PumpCurveModel, ax: Optional[Axes] = None) -> Axes:
    """Plot every usable RPM line of `model` (flow [GPM] vs. head [ft])."""
    if ax is None:
        plt.rcParams["figure.constrained_layout.use"] = True
        _, ax = plt.subplots(figsize=(7, 5))

    for line in model.usable_lines:
        ax.plot(line.flows, line.heads, lw=2, marker="o", ms=3, label=line.label)

    ax.grid(visible=True, which='major', axis='both', linestyle='-', color='gray', lw=0.5)
    ax.minorticks_on()
    ax.grid(visible=True, which='minor', axis='both', linestyle=':', color='gray', lw=0.5)

    ax.set_title(model.label)
    ax.set_xlabel("Flow (GPM)")
    ax.set_ylabel("TDH (ft)")
    ax.set_xlim(left=0)
    ax.set_ylim(bottom=0)
    return ax


def plot_assignment(state: ProjectState, pump_id: str, ax: Optional[Axes] = None) -> Axes:
    """
    Plot the curves of a pump assignment and mark where it operates.

    Raises:
        ValueError: Unknown pump id or a model without curve data.
    """
    assignment = state.get_pump(pump_id)
    if assignment is None:
        raise ValueError(f"Pump with id '{pump_id}' not found.")
    model = state.curves.get_model(assignment.model_id)
    if model is None or not model.is_usable:
        raise ValueError(f"No usable curve for model '{assignment.model_id}'.")

    ax = plot_pump_model(model, ax=ax)
    quantity = max(1, assignment.quantity)

    head = assignment.target_head
    ax.axhline(head, color="k", ls="--", lw=1, label=f"Target TDH {head:g} ft")

    required = compute_flow_requirements(state).system_required_flow(assignment.system) / quantity
    if required > 0:
        ax.axvline(required, color="r", ls=":", lw=1, label=f"Required {required:.1f} GPM/pump")

    capacity = SizingCalculator.capacity_at_head(state, pump_id, head)
    if capacity > 0:
        unit_flow = capacity / quantity
        ax.plot([unit_flow], [head], "ks", ms=7, label=f"Operating point {unit_flow:.1f} GPM")
    else:
        logger.debug(f"Pump {pump_id} has no operating point at {head:g} ft.")

    top = max(model.max_head, head) * 1.1
    ax.set_ylim(0, float(np.ceil(top)))
    ax.legend(loc="upper right", fontsize="small")
    return ax
