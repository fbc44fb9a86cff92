"""
Command-Line Entry Point
========================
Loads a project, runs the sizing engine and prints the report.

Usage:
    $ poolpumpsizing project.json
    $ poolpumpsizing project.h5 --apply-tdh --save project.h5
    $ poolpumpsizing --new project.json
    $ poolpumpsizing project.json --plot a1b2c3d4 --plot-file pump.png
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, Optional

from poolpumpsizing.config import APP_VERSION
from poolpumpsizing.engine.calculator import SizingCalculator, SizingReport
from poolpumpsizing.logging_config import setup_logging
from poolpumpsizing.model.io import IOManager, ProjectFormatError
from poolpumpsizing.model.state import ProjectState

logger = logging.getLogger(__name__)

HDF5_EXTENSIONS = (".h5", ".hdf5")


def _is_hdf5_path(path: str) -> bool:
    return os.path.splitext(path)[1].lower() in HDF5_EXTENSIONS


def load_state(path: Optional[str]) -> ProjectState:
    if path is None:
        return ProjectState.default()
    if _is_hdf5_path(path):
        return IOManager.load_project(path)
    return IOManager.import_json(path)


def save_state(state: ProjectState, path: str) -> None:
    if _is_hdf5_path(path):
        IOManager.save_project(state, path)
    else:
        IOManager.export_json(state, path)


def format_report(state: ProjectState, report: SizingReport) -> str:
    flows = report.flows
    lines = [
        f"Project: {state.project.name} (v{state.version})",
        "",
        "Flows",
        f"  Pool turnover      {flows.pool_turnover_flow:8.1f} GPM",
        f"  Water features     {flows.water_features_flow:8.1f} GPM",
        f"  Pool required      {flows.pool_required_flow:8.1f} GPM",
    ]
    if flows.spa_enabled:
        lines += [
            f"  Spa jets           {flows.spa_jets_flow:8.1f} GPM",
            f"  Spa turnover       {flows.spa_turnover_flow:8.1f} GPM",
            f"  Spa required       {flows.spa_required_flow:8.1f} GPM",
        ]

    lines += ["", "Pumps"]
    if not report.pumps:
        lines.append("  (none)")
    for assignment, evaluation in report.pumps:
        lines.append(
            f"  [{assignment.pump_id}] {assignment.quantity} x {assignment.model_id} "
            f"({assignment.system}) -> {evaluation.explanation}"
        )

    lines += ["", "Systems"]
    for health in report.systems.values():
        lines.append(
            f"  {health.system:<14} {health.status:<5} "
            f"required {health.required_flow:6.1f} GPM, capacity {health.capacity:6.1f} GPM"
        )
    lines.append(f"  Overall        {report.overall}")

    tdh = report.tdh
    lines += [
        "",
        f"TDH estimate ({tdh.scope})",
        f"  Design flow        {tdh.flow:8.1f} GPM",
        f"  Equivalent length  {tdh.equivalent_length:8.1f} ft",
        f"  Friction loss      {tdh.friction_loss:8.2f} ft",
        f"  Estimated TDH      {tdh.estimated_head:8.2f} ft",
    ]

    if report.notes:
        lines += ["", "Notes"] + [f"  - {note}" for note in report.notes]
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="poolpumpsizing",
        description="Check pool, water feature and spa pumps against their pump curves.",
    )
    parser.add_argument("project", nargs="?", help="Project file (.json or .h5). Uses defaults when omitted.")
    parser.add_argument("--new", metavar="PATH", help="Write a default project to PATH and exit.")
    parser.add_argument("--apply-tdh", action="store_true",
                        help="Write the estimated TDH onto the pumps in the engineering apply scope.")
    parser.add_argument("--save", metavar="PATH", help="Save the (possibly updated) project.")
    parser.add_argument("--plot", metavar="PUMP_ID", help="Plot the curves and operating point of a pump.")
    parser.add_argument("--plot-file", metavar="PATH", help="Save the plot instead of showing it.")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--log-file", metavar="PATH")
    parser.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(level=getattr(logging, args.log_level), log_file=args.log_file)

    try:
        if args.new:
            save_state(ProjectState.default(), args.new)
            print(f"Default project written to {args.new}")
            return 0

        state = load_state(args.project)
        calculator = SizingCalculator()

        if args.apply_tdh:
            state = calculator.apply_estimated_head(state)

        report = calculator.calculate(state)
        print(format_report(state, report))

        if args.save:
            save_state(state, args.save)

    except (ProjectFormatError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    if args.plot:
        # Deferred so the report works without a display backend
        import matplotlib.pyplot as plt
        from poolpumpsizing.view.chart import plot_assignment

        try:
            ax = plot_assignment(state, args.plot)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 2
        if args.plot_file:
            ax.figure.savefig(args.plot_file)
        else:
            plt.show()

    return 0


if __name__ == "__main__":
    sys.exit(main())
