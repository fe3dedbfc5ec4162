from __future__ import annotations

"""Read-only physical context for the edge evaluator.

Every config is a frozen dataclass validated in __post_init__.
Units: SI unless the field name says otherwise (_kmh, _Ah).
"""

import json
import logging
from dataclasses import asdict, dataclass, field
from typing import Any

import numpy as np

from .units import HR2SEC, KMH2MPS

logger = logging.getLogger(__name__)


def _read_json(path: str) -> dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _write_json(path: str, obj: Any) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(obj, f, ensure_ascii=False, indent=2)


def _check_unit_interval(name: str, value: float) -> None:
    if not (0.0 < value <= 1.0):
        raise ValueError(f"{name} must be in (0,1], got {value}")


@dataclass(frozen=True)
class CommonConfig:
    # physics constants
    g: float = 9.81

    # unit conversion
    kmh2mps: float = KMH2MPS
    hr2sec: float = HR2SEC


@dataclass(frozen=True)
class VehicleConfig:
    name: str = "EGV_dual_motor"
    m: float = 1200.0        # mass [kg]
    L: float = 2.6           # wheelbase [m]
    b: float = 0.55          # CG height factor [m]
    Ca: float = 0.35         # lumped drag coefficient [N/(m/s)^2]
    R_eff: float = 0.3       # effective wheel radius [m]
    mu: float = 0.8          # tire-road friction coefficient

    def __post_init__(self) -> None:
        for name in ("m", "L", "R_eff"):
            if getattr(self, name) <= 0.0:
                raise ValueError(f"{name} must be > 0, got {getattr(self, name)}")
        if self.Ca < 0.0:
            raise ValueError(f"Ca must be >= 0, got {self.Ca}")
        if self.mu <= 0.0:
            raise ValueError(f"mu must be > 0, got {self.mu}")


@dataclass(frozen=True)
class BatteryConfig:
    E_max_Ah: float = 60.0
    V_bat: float = 350.0
    soc_min: float = 0.2
    soc_max: float = 0.9

    def __post_init__(self) -> None:
        if self.E_max_Ah <= 0.0 or self.V_bat <= 0.0:
            raise ValueError(f"E_max_Ah and V_bat must be > 0, got {self.E_max_Ah}, {self.V_bat}")
        if not (0.0 <= self.soc_min < self.soc_max <= 1.0):
            raise ValueError(f"need 0 <= soc_min < soc_max <= 1, got {self.soc_min}, {self.soc_max}")


@dataclass(frozen=True)
class EfficiencyConfig:
    """Drivetrain efficiencies excluding the motor itself (motor comes from the map)."""

    drive_front: float = 0.95
    drive_rear: float = 0.95
    brake_front: float = 0.9
    brake_rear: float = 0.9

    def __post_init__(self) -> None:
        for name in ("drive_front", "drive_rear", "brake_front", "brake_rear"):
            _check_unit_interval(name, getattr(self, name))


@dataclass(frozen=True)
class LimitsConfig:
    acc_max: float = 1.5             # |a| bound [m/s^2]

    # rear motor electrical torque window [Nm]
    T_rear_min: float = -400.0
    T_rear_max: float = 400.0

    # front torque candidate grid [Nm]
    T_front_min: float = -400.0
    T_front_max: float = 400.0
    T_front_step: float = 10.0

    # (upper, lower) speed limits [km/h]
    speed_upper_kmh: float = 120.0
    speed_lower_kmh: float = 0.0

    def __post_init__(self) -> None:
        if self.acc_max < 0.0:
            raise ValueError(f"acc_max must be >= 0, got {self.acc_max}")
        if self.T_rear_min > self.T_rear_max:
            raise ValueError(f"T_rear_min > T_rear_max: {self.T_rear_min} > {self.T_rear_max}")
        if self.T_front_min > self.T_front_max:
            raise ValueError(f"T_front_min > T_front_max: {self.T_front_min} > {self.T_front_max}")
        if self.T_front_step <= 0.0:
            raise ValueError(f"T_front_step must be > 0, got {self.T_front_step}")
        if self.speed_lower_kmh > self.speed_upper_kmh:
            raise ValueError(
                f"speed_lower_kmh > speed_upper_kmh: {self.speed_lower_kmh} > {self.speed_upper_kmh}"
            )


@dataclass(frozen=True)
class EGVParams:
    common: CommonConfig = field(default_factory=CommonConfig)
    vehicle: VehicleConfig = field(default_factory=VehicleConfig)
    battery: BatteryConfig = field(default_factory=BatteryConfig)
    eff: EfficiencyConfig = field(default_factory=EfficiencyConfig)
    lim: LimitsConfig = field(default_factory=LimitsConfig)

    # energy charged on arrival at the destination [J]
    E_final_J: float = 0.0

    @property
    def speed_upper_mps(self) -> float:
        return float(self.lim.speed_upper_kmh * self.common.kmh2mps)

    @property
    def speed_lower_mps(self) -> float:
        return float(self.lim.speed_lower_kmh * self.common.kmh2mps)

    @property
    def soc_energy_J(self) -> float:
        """Energy of one full SOC unit: capacity [Ah] * voltage [V] * 3600 [s/h]."""
        return float(self.battery.E_max_Ah * self.battery.V_bat * self.common.hr2sec)

    def front_torque_grid(self) -> np.ndarray:
        """Front torque candidates from T_front_min to T_front_max (inclusive)."""
        lim = self.lim
        return np.arange(lim.T_front_min, lim.T_front_max + 1e-9, lim.T_front_step, dtype=float)


_SECTIONS = {
    "common": CommonConfig,
    "vehicle": VehicleConfig,
    "battery": BatteryConfig,
    "eff": EfficiencyConfig,
    "lim": LimitsConfig,
}


def load_or_default(path: str | None, default_obj):
    if path is None:
        return default_obj
    d = _read_json(path)
    cls = type(default_obj)
    return cls(**d)


def dump_config(path: str, cfg_obj) -> None:
    _write_json(path, asdict(cfg_obj))


def params_from_dict(d: dict[str, Any]) -> EGVParams:
    """Build EGVParams from a nested dict; missing sections fall back to defaults."""
    unknown = set(d) - set(_SECTIONS) - {"E_final_J"}
    if unknown:
        raise ValueError(f"Unknown parameter sections: {sorted(unknown)}")
    kwargs: dict[str, Any] = {k: cls(**d[k]) for k, cls in _SECTIONS.items() if k in d}
    if "E_final_J" in d:
        kwargs["E_final_J"] = float(d["E_final_J"])
    return EGVParams(**kwargs)


def load_params(path: str | None) -> EGVParams:
    if path is None:
        return EGVParams()
    params = params_from_dict(_read_json(path))
    logger.debug("Loaded EGV parameters from %s", path)
    return params


def dump_params(path: str, params: EGVParams) -> None:
    _write_json(path, asdict(params))
