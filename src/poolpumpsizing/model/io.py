"""
Input/Output Manager
Handles the project document and saving/loading ProjectState to JSON and .h5 files.

Document shape::

    {project, waterFeatures[], spa, pumps[], engineering, curves}
"""
import json
import logging
from typing import Any, Dict

import h5py
import numpy as np

from poolpumpsizing.config import APP_VERSION
from poolpumpsizing.model.curves import CurveLibrary, CurvePoint, PumpCurveModel, RpmLine
from poolpumpsizing.model.state import (
    EngineeringParams, ProjectSettings, ProjectState, PumpAssignment, SpaConfig, WaterFeatureRow
)

logger = logging.getLogger(__name__)

DOCUMENT_KEYS = ("project", "waterFeatures", "spa", "pumps", "engineering", "curves")

# HDF5 attributes are limited to 64 KB
_MAX_ATTR_BYTES = 60000


class ProjectFormatError(ValueError):
    """The imported document does not have the expected shape."""


def _section(doc: Dict[str, Any], key: str, expected: type) -> Any:
    value = doc.get(key)
    if value is None:
        return expected()
    if not isinstance(value, expected):
        raise ProjectFormatError(f"'{key}' must be a {expected.__name__}, got {type(value).__name__}.")
    return value


def _rows(doc: Dict[str, Any], key: str) -> list:
    rows = _section(doc, key, list)
    for i, row in enumerate(rows):
        if not isinstance(row, dict):
            raise ProjectFormatError(f"'{key}[{i}]' must be an object.")
    return rows


def _attr_str(value: Any) -> str:
    return value.decode("utf-8") if isinstance(value, bytes) else str(value)


class IOManager:

    # --- DOCUMENT ---

    @staticmethod
    def to_document(state: ProjectState) -> Dict[str, Any]:
        return {
            "project": state.project.to_dict(),
            "waterFeatures": [row.to_dict() for row in state.water_features],
            "spa": state.spa.to_dict(),
            "pumps": [pump.to_dict() for pump in state.pumps],
            "engineering": state.engineering.to_dict(),
            "curves": state.curves.to_dict(),
        }

    @staticmethod
    def from_document(doc: Any) -> ProjectState:
        """
        Build a snapshot from a document. Missing sections fall back to
        defaults; sections of the wrong type raise ProjectFormatError.
        """
        if not isinstance(doc, dict):
            raise ProjectFormatError("Project document must be a JSON object.")
        if not any(key in doc for key in DOCUMENT_KEYS):
            raise ProjectFormatError(
                f"Project document has none of the expected sections: {', '.join(DOCUMENT_KEYS)}."
            )

        curves_data = doc.get("curves")
        curves = (
            CurveLibrary.with_defaults()
            if curves_data is None
            else CurveLibrary.from_dict(_section(doc, "curves", dict))
        )

        state = ProjectState(
            project=ProjectSettings.from_dict(_section(doc, "project", dict)),
            water_features=tuple(WaterFeatureRow.from_dict(r) for r in _rows(doc, "waterFeatures")),
            spa=SpaConfig.from_dict(_section(doc, "spa", dict)),
            pumps=tuple(PumpAssignment.from_dict(p) for p in _rows(doc, "pumps")),
            engineering=EngineeringParams.from_dict(_section(doc, "engineering", dict)),
            curves=curves,
        )
        logger.debug(
            f"Document parsed: {len(state.pumps)} pump(s), "
            f"{len(state.water_features)} water feature(s), {len(curves.models)} curve model(s)."
        )
        return state

    # --- JSON IMPORT / EXPORT ---

    @staticmethod
    def export_json(state: ProjectState, filepath: str) -> None:
        logger.info(f"Exporting project to: {filepath}")
        try:
            with open(filepath, "w", encoding="utf-8") as f:
                json.dump(IOManager.to_document(state), f, indent=2)
        except OSError as e:
            logger.exception(f"Failed to export project: {e}")
            raise

    @staticmethod
    def import_json(filepath: str) -> ProjectState:
        """
        Read a project document. On any error the caller's current snapshot is
        untouched, since a new one is only returned on success.
        """
        logger.info(f"Importing project from: {filepath}")
        try:
            with open(filepath, "r", encoding="utf-8") as f:
                doc = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in '{filepath}': {e}")
            raise ProjectFormatError(f"Invalid JSON: {e}") from e
        except OSError as e:
            logger.exception(f"Failed to import project: {e}")
            raise
        return IOManager.from_document(doc)

    # --- HDF5 PROJECT FILES ---

    @staticmethod
    def save_project(state: ProjectState, filepath: str) -> None:
        logger.info(f"Saving project to: {filepath}")
        try:
            with h5py.File(filepath, "w") as f:
                f.attrs["version"] = APP_VERSION
                f.attrs["project_name"] = state.project.name

                # --- 1. SAVE CONFIGURATION (everything except curves) ---
                doc = IOManager.to_document(state)
                doc.pop("curves")
                doc_json = json.dumps(doc)
                if len(doc_json) > _MAX_ATTR_BYTES:
                    logger.info(f"Project document is large ({len(doc_json)} bytes), using dataset")
                    f.create_dataset("document", data=np.void(doc_json.encode("utf-8")))
                else:
                    f.attrs["document_json"] = doc_json

                # --- 2. SAVE CURVES (one (N, 2) dataset per RPM line) ---
                grp_curves = f.create_group("curves")
                for i, model in enumerate(state.curves.models.values()):
                    # Model ids may contain '/', so groups are numbered
                    grp_model = grp_curves.create_group(f"model_{i}")
                    grp_model.attrs["model_id"] = model.model_id
                    grp_model.attrs["label"] = model.label
                    for j, line in enumerate(model.rpm_lines):
                        data = np.array([[p.flow, p.head] for p in line.points], dtype=np.float64)
                        dset = grp_model.create_dataset(f"line_{j}", data=data.reshape(-1, 2))
                        dset.attrs["rpm"] = line.rpm
                        dset.attrs["label"] = line.label
                    logger.debug(f"Saved {len(model.rpm_lines)} RPM line(s) for '{model.model_id}'.")

            logger.info(f"Project saved to: {filepath}")

        except Exception as e:
            logger.exception(f"Failed to save project: {e}")
            raise

    @staticmethod
    def load_project(filepath: str) -> ProjectState:
        logger.info(f"Loading project from: {filepath}")
        if not h5py.is_hdf5(filepath):
            msg = f"File '{filepath}' is not a valid HDF5 file."
            logger.error(msg)
            raise ProjectFormatError(msg)

        try:
            with h5py.File(filepath, "r") as f:
                # --- 1. LOAD CONFIGURATION ---
                if "document" in f:
                    doc_json = bytes(f["document"][()]).decode("utf-8")
                elif "document_json" in f.attrs:
                    doc_json = _attr_str(f.attrs["document_json"])
                else:
                    raise ProjectFormatError(f"File '{filepath}' contains no project document.")
                try:
                    doc = json.loads(doc_json)
                except json.JSONDecodeError as e:
                    raise ProjectFormatError(f"Corrupt project document in '{filepath}': {e}") from e
                if not isinstance(doc, dict):
                    raise ProjectFormatError("Project document must be a JSON object.")

                # --- 2. LOAD CURVES ---
                library = CurveLibrary()
                if "curves" in f:
                    # Keep the saved order (model_0, model_1, ..., model_10)
                    groups = sorted(f["curves"].items(), key=lambda kv: int(kv[0].split("_")[-1]))
                    for name, grp_model in groups:
                        if "model_id" not in grp_model.attrs:
                            raise ProjectFormatError(f"Curve group '{name}' has no model id.")
                        model_id = _attr_str(grp_model.attrs["model_id"])
                        lines = []
                        # Keep the saved order (line_0, line_1, ..., line_10)
                        for line_name in sorted(grp_model.keys(), key=lambda n: int(n.split("_")[-1])):
                            dset = grp_model[line_name]
                            data = dset[:]
                            lines.append(RpmLine(
                                rpm=float(dset.attrs["rpm"]),
                                label=_attr_str(dset.attrs.get("label", "")),
                                points=[CurvePoint(float(q), float(h)) for q, h in data],
                            ))
                        library.add_model(PumpCurveModel(
                            model_id=model_id,
                            label=_attr_str(grp_model.attrs.get("label", model_id)),
                            rpm_lines=lines,
                        ))
                doc["curves"] = library.to_dict()

            state = IOManager.from_document(doc)
            logger.info(f"Project loaded from: {filepath}")
            return state

        except ProjectFormatError:
            raise
        except Exception as e:
            logger.exception(f"Failed to load project: {e}")
            raise
