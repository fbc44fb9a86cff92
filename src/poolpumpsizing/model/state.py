"""
Project State (Data Model)
==========================
This module defines the configuration snapshot the engine evaluates.

Why is this file needed?
------------------------
1. State Management: It holds the pool, water features, spa, pump assignments,
   engineering parameters and pump curves in one place.
2. Persistence: This object is what gets serialized when saving a project.
3. Immutability: A snapshot never changes. Every edit goes through
   `ProjectState.update` (or a helper built on it) and returns a new snapshot
   with an incremented `version`, so calculations never observe half-applied
   edits.

Classes:
    DemandSystem, ApplyScope, SpaSetup: Enumerated tags.
    ProjectSettings, WaterFeatureRow, SpaConfig, PumpAssignment,
    EngineeringParams: Configuration records.
    ProjectState: The snapshot container.
"""
from __future__ import annotations

import copy
from dataclasses import dataclass, field, replace
from enum import StrEnum
import logging
import uuid
from typing import Any, Dict, FrozenSet, Optional, Tuple, Type, TypeVar

from poolpumpsizing import config
from poolpumpsizing.model.curves import CurveLibrary, PumpCurveModel
from poolpumpsizing.utils import to_bool, to_float, to_int

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=StrEnum)


# ------------------------------------------------------------------------------
# Enums
# ------------------------------------------------------------------------------
class DemandSystem(StrEnum):
    """Grouping used to allocate required flow across pump assignments."""
    POOL = "Pool"
    WATER_FEATURES = "WaterFeatures"
    SPA = "Spa"
    SHARED = "Shared"


class ApplyScope(StrEnum):
    """Which pump assignments receive the estimated head."""
    ALL = "all"
    SHARED = "shared"
    POOL = "pool"
    WATER_FEATURES = "waterFeatures"
    SPA = "spa"

    @property
    def systems(self) -> FrozenSet[DemandSystem]:
        if self is ApplyScope.ALL:
            return frozenset(DemandSystem)
        return frozenset({_SCOPE_TO_SYSTEM[self]})


_SCOPE_TO_SYSTEM: Dict[ApplyScope, DemandSystem] = {
    ApplyScope.SHARED: DemandSystem.SHARED,
    ApplyScope.POOL: DemandSystem.POOL,
    ApplyScope.WATER_FEATURES: DemandSystem.WATER_FEATURES,
    ApplyScope.SPA: DemandSystem.SPA,
}


class SpaSetup(StrEnum):
    SHARED = "shared"          # spa is circulated by the shared pump
    DEDICATED = "dedicated"    # spa has its own pump


def _enum_or(enum_cls: Type[E], value: Any, default: E) -> E:
    try:
        return enum_cls(value)
    except ValueError:
        return default


def new_pump_id() -> str:
    return uuid.uuid4().hex[:8]


# ------------------------------------------------------------------------------
# Configuration records
# ------------------------------------------------------------------------------
@dataclass(frozen=True)
class ProjectSettings:
    name: str = config.DEFAULT_PROJECT_NAME
    pool_volume: float = config.DEFAULT_POOL_VOLUME_GAL       # gal
    turnover_hours: float = config.DEFAULT_TURNOVER_HOURS     # h

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "poolVolume": self.pool_volume,
            "turnoverHours": self.turnover_hours,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> ProjectSettings:
        return ProjectSettings(
            name=str(data.get("name", config.DEFAULT_PROJECT_NAME)),
            pool_volume=to_float(data.get("poolVolume"), config.DEFAULT_POOL_VOLUME_GAL),
            turnover_hours=to_float(data.get("turnoverHours"), config.DEFAULT_TURNOVER_HOURS),
        )


@dataclass(frozen=True)
class WaterFeatureRow:
    feature_type: str = config.WATER_FEATURE_TYPES[0]
    quantity: int = 1
    width: float = 0.0            # ft
    flow_per_width: float = 0.0   # GPM per ft of width

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.feature_type,
            "qty": self.quantity,
            "width": self.width,
            "flowPerFt": self.flow_per_width,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> WaterFeatureRow:
        return WaterFeatureRow(
            feature_type=str(data.get("type", config.WATER_FEATURE_TYPES[0])),
            quantity=to_int(data.get("qty"), 0),
            width=to_float(data.get("width"), 0.0),
            flow_per_width=to_float(data.get("flowPerFt"), 0.0),
        )


@dataclass(frozen=True)
class SpaConfig:
    enabled: bool = False
    setup: SpaSetup = SpaSetup.DEDICATED
    volume: float = config.DEFAULT_SPA_VOLUME_GAL                   # gal
    turnover_hours: float = config.DEFAULT_SPA_TURNOVER_HOURS       # h
    jet_count: int = config.DEFAULT_SPA_JET_COUNT
    flow_per_jet: float = config.DEFAULT_SPA_FLOW_PER_JET_GPM       # GPM
    target_head: float = config.DEFAULT_SPA_TARGET_HEAD_FT          # ft

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "setup": self.setup.value,
            "volume": self.volume,
            "turnoverHours": self.turnover_hours,
            "jets": self.jet_count,
            "flowPerJet": self.flow_per_jet,
            "tdh": self.target_head,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> SpaConfig:
        return SpaConfig(
            enabled=to_bool(data.get("enabled"), False),
            setup=_enum_or(SpaSetup, data.get("setup"), SpaSetup.DEDICATED),
            volume=to_float(data.get("volume"), config.DEFAULT_SPA_VOLUME_GAL),
            turnover_hours=to_float(data.get("turnoverHours"), config.DEFAULT_SPA_TURNOVER_HOURS),
            jet_count=to_int(data.get("jets"), config.DEFAULT_SPA_JET_COUNT),
            flow_per_jet=to_float(data.get("flowPerJet"), config.DEFAULT_SPA_FLOW_PER_JET_GPM),
            target_head=to_float(data.get("tdh"), config.DEFAULT_SPA_TARGET_HEAD_FT),
        )


@dataclass(frozen=True)
class PumpAssignment:
    """A pump model installed `quantity` times to serve one demand system."""
    model_id: str
    quantity: int = 1
    system: DemandSystem = DemandSystem.SHARED
    target_head: float = config.DEFAULT_PUMP_TARGET_HEAD_FT   # ft
    pump_id: str = field(default_factory=new_pump_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.pump_id,
            "model": self.model_id,
            "qty": self.quantity,
            "system": self.system.value,
            "tdh": self.target_head,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> PumpAssignment:
        return PumpAssignment(
            pump_id=str(data.get("id") or new_pump_id()),
            model_id=str(data.get("model", "")),
            quantity=max(1, to_int(data.get("qty"), 1)),
            system=_enum_or(DemandSystem, data.get("system"), DemandSystem.SHARED),
            target_head=max(0.0, to_float(data.get("tdh"), config.DEFAULT_PUMP_TARGET_HEAD_FT)),
        )


@dataclass(frozen=True)
class EngineeringParams:
    equipment_distance: float = config.DEFAULT_EQUIPMENT_DISTANCE_FT     # one-way, ft
    extra_fittings: float = config.DEFAULT_EXTRA_FITTINGS_FT             # equivalent ft
    pipe_diameter: float = config.DEFAULT_PIPE_DIAMETER_IN               # internal, in
    elevation_change: float = config.DEFAULT_ELEVATION_CHANGE_FT         # ft
    equipment_head_loss: float = config.DEFAULT_EQUIPMENT_HEAD_LOSS_FT   # filter, heater, ... ft
    roughness_c: float = config.DEFAULT_HAZEN_C
    apply_scope: ApplyScope = ApplyScope.SHARED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "distanceOneWay": self.equipment_distance,
            "extraFittings": self.extra_fittings,
            "pipeId": self.pipe_diameter,
            "elevation": self.elevation_change,
            "equipmentHead": self.equipment_head_loss,
            "c": self.roughness_c,
            "applyScope": self.apply_scope.value,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> EngineeringParams:
        return EngineeringParams(
            equipment_distance=to_float(data.get("distanceOneWay"), config.DEFAULT_EQUIPMENT_DISTANCE_FT),
            extra_fittings=to_float(data.get("extraFittings"), config.DEFAULT_EXTRA_FITTINGS_FT),
            pipe_diameter=to_float(data.get("pipeId"), config.DEFAULT_PIPE_DIAMETER_IN),
            elevation_change=to_float(data.get("elevation"), config.DEFAULT_ELEVATION_CHANGE_FT),
            equipment_head_loss=to_float(data.get("equipmentHead"), config.DEFAULT_EQUIPMENT_HEAD_LOSS_FT),
            roughness_c=to_float(data.get("c"), config.DEFAULT_HAZEN_C),
            apply_scope=_enum_or(ApplyScope, data.get("applyScope"), ApplyScope.SHARED),
        )


# ------------------------------------------------------------------------------
# Snapshot
# ------------------------------------------------------------------------------
@dataclass(frozen=True)
class ProjectState:
    """
    Immutable snapshot of the whole project configuration.
    Pass this instance to the calculator; edit it only through `update`.

    Snapshots derived by `update` share one curve library. A library passed
    as `curves=` is copied, and `add_curve_model` builds a new one, so earlier
    snapshots never see later curve edits.
    """
    project: ProjectSettings = field(default_factory=ProjectSettings)
    water_features: Tuple[WaterFeatureRow, ...] = ()
    spa: SpaConfig = field(default_factory=SpaConfig)
    pumps: Tuple[PumpAssignment, ...] = ()
    engineering: EngineeringParams = field(default_factory=EngineeringParams)
    curves: CurveLibrary = field(default_factory=CurveLibrary.with_defaults)
    version: int = 0

    @classmethod
    def default(cls) -> ProjectState:
        """A fresh project: one shared pump on the first catalogue model."""
        curves = CurveLibrary.with_defaults()
        pump = PumpAssignment(model_id=curves.get_names()[0], system=DemandSystem.SHARED)
        return cls(pumps=(pump,), curves=curves)

    # --- single update entry point ---
    def update(self, **changes: Any) -> ProjectState:
        """Return a new snapshot with `changes` applied and the version bumped."""
        for key in ("water_features", "pumps"):
            if key in changes:
                changes[key] = tuple(changes[key])
        if "curves" in changes:
            changes["curves"] = copy.deepcopy(changes["curves"])
        changes.pop("version", None)
        snapshot = replace(self, version=self.version + 1, **changes)
        logger.debug(f"Project state updated to v{snapshot.version}: {sorted(changes)}")
        return snapshot

    # --- convenience edits (all routed through update) ---
    def update_project(self, **changes: Any) -> ProjectState:
        return self.update(project=replace(self.project, **changes))

    def update_spa(self, **changes: Any) -> ProjectState:
        return self.update(spa=replace(self.spa, **changes))

    def update_engineering(self, **changes: Any) -> ProjectState:
        return self.update(engineering=replace(self.engineering, **changes))

    def add_curve_model(self, model: PumpCurveModel) -> ProjectState:
        """Add or replace a curve model without touching this snapshot's library."""
        return self.update(curves=CurveLibrary(models={**self.curves.models, model.model_id: model}))

    def add_water_feature(self, row: WaterFeatureRow) -> ProjectState:
        return self.update(water_features=self.water_features + (row,))

    def update_water_feature(self, index: int, **changes: Any) -> ProjectState:
        rows = list(self.water_features)
        rows[index] = replace(rows[index], **changes)
        return self.update(water_features=rows)

    def remove_water_feature(self, index: int) -> ProjectState:
        rows = list(self.water_features)
        del rows[index]
        return self.update(water_features=rows)

    def get_pump(self, pump_id: str) -> Optional[PumpAssignment]:
        for pump in self.pumps:
            if pump.pump_id == pump_id:
                return pump
        return None

    def add_pump(self, pump: PumpAssignment) -> ProjectState:
        if self.get_pump(pump.pump_id) is not None:
            raise ValueError(f"Pump with id '{pump.pump_id}' already exists.")
        return self.update(pumps=self.pumps + (pump,))

    def update_pump(self, pump_id: str, **changes: Any) -> ProjectState:
        if self.get_pump(pump_id) is None:
            raise ValueError(f"Pump with id '{pump_id}' not found.")
        return self.update(pumps=[
            replace(p, **changes) if p.pump_id == pump_id else p for p in self.pumps
        ])

    def remove_pump(self, pump_id: str) -> ProjectState:
        if self.get_pump(pump_id) is None:
            raise ValueError(f"Pump with id '{pump_id}' not found.")
        return self.update(pumps=[p for p in self.pumps if p.pump_id != pump_id])

    def pumps_for(self, system: DemandSystem) -> Tuple[PumpAssignment, ...]:
        return tuple(p for p in self.pumps if p.system == system)

    @property
    def has_dedicated_water_features(self) -> bool:
        return bool(self.pumps_for(DemandSystem.WATER_FEATURES))
