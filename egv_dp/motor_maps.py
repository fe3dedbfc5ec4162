from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import numpy as np

from .units import radps_to_rpm, wheel_omega_radps

# (v_mps, T_Nm, R_eff_m) -> motor efficiency in (0,1]
MotorEffMap = Callable[[float, float, float], float]


def constant_motor_eff(_v_mps: float, _T_Nm: float, _R_eff_m: float) -> float:
    # placeholder until a measured map is injected
    return 0.92


@dataclass(frozen=True)
class MotorEffMap2D:
    """
    2D motor efficiency map with bilinear interpolation and clamp OOB policy.

    Axes are motor speed [rpm] and torque magnitude [Nm]; the same table
    serves motoring and regenerating operation.

    Callable signature matches MotorEffMap:
      motor_eff(v_mps, T_Nm, R_eff_m) -> eta
    """
    rpm_grid: np.ndarray
    tq_grid: np.ndarray
    eff: np.ndarray
    min_eff: float = 0.5
    max_eff: float = 1.0

    def __post_init__(self) -> None:
        rpm = np.asarray(self.rpm_grid, dtype=float)
        tq = np.asarray(self.tq_grid, dtype=float)
        z = np.asarray(self.eff, dtype=float)
        if rpm.size < 2 or tq.size < 2:
            raise ValueError(f"map axes need >= 2 points, got rpm={rpm.size}, tq={tq.size}")
        if z.shape != (rpm.size, tq.size):
            raise ValueError(f"eff grid shape mismatch: eff={z.shape}, rpm={rpm.size}, tq={tq.size}")
        if np.any(np.diff(rpm) <= 0) or np.any(np.diff(tq) <= 0):
            raise ValueError("map axes must be strictly increasing")
        if not (0.0 < self.min_eff <= self.max_eff <= 1.0):
            raise ValueError(f"need 0 < min_eff <= max_eff <= 1, got {self.min_eff}, {self.max_eff}")

    def lookup(self, motor_rpm: float, T_Nm: float) -> float:
        rpm = np.asarray(self.rpm_grid, dtype=float)
        tq = np.asarray(self.tq_grid, dtype=float)
        z = np.asarray(self.eff, dtype=float)

        # clamp OOB
        r = float(np.clip(abs(motor_rpm), rpm[0], rpm[-1]))
        t = float(np.clip(abs(T_Nm), tq[0], tq[-1]))

        # cell indices
        i = int(np.clip(np.searchsorted(rpm, r) - 1, 0, rpm.size - 2))
        j = int(np.clip(np.searchsorted(tq, t) - 1, 0, tq.size - 2))

        r0, r1 = float(rpm[i]), float(rpm[i + 1])
        t0, t1 = float(tq[j]), float(tq[j + 1])
        fr = (r - r0) / (r1 - r0)
        ft = (t - t0) / (t1 - t0)

        z0 = (1.0 - ft) * z[i, j] + ft * z[i, j + 1]
        z1 = (1.0 - ft) * z[i + 1, j] + ft * z[i + 1, j + 1]
        val = (1.0 - fr) * z0 + fr * z1

        return float(np.clip(val, self.min_eff, self.max_eff))

    def __call__(self, v_mps: float, T_Nm: float, R_eff_m: float) -> float:
        motor_rpm = radps_to_rpm(wheel_omega_radps(v_mps, R_eff_m))
        return self.lookup(motor_rpm, T_Nm)
