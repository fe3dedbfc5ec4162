from __future__ import annotations

"""Longitudinal force / power model of one DP edge.

Sign conventions:
- F_grade > 0 resists motion (uphill), < 0 assists (downhill)
- P_req > 0 traction demand, < 0 braking demand
"""

from dataclasses import dataclass

import numpy as np

from .configs import CommonConfig, VehicleConfig
from .slope import SlopeDescriptor


@dataclass(frozen=True)
class ForceBundle:
    F_n_front: float   # front axle normal force [N]
    F_n_rear: float    # rear axle normal force [N]
    F_grade: float     # gravity component along the road [N]
    F_drag: float      # aerodynamic drag [N]
    F_inertia: float   # m*a [N]
    P_req: float       # required propulsive power [W]


def normal_forces(
    slope: SlopeDescriptor,
    a: float,
    veh: VehicleConfig,
    common: CommonConfig,
) -> tuple[float, float, float]:
    """Axle normal forces and grade force for the slope class.

    Returns:
      (F_n_front, F_n_rear, F_grade)
    """
    m, g, L, b = veh.m, common.g, veh.L, veh.b
    transfer = m * b / L * a  # acceleration-induced load transfer front -> rear

    if slope.kind == "level":
        return m * g / 2.0 - transfer, m * g / 2.0 + transfer, 0.0

    ang = np.deg2rad(slope.angle_deg)
    c, s = float(np.cos(ang)), float(np.sin(ang))

    if slope.kind == "downhill":
        n1 = m * g / L * (0.5 * c + b * s) - transfer
        n2 = m * g / L * (0.5 * c - b * s) + transfer
        return n1, n2, -m * g * s

    # uphill
    n1 = m * g / L * (0.5 * c - b * s) - transfer
    n2 = m * g / L * (0.5 * c + b * s) + transfer
    return n1, n2, m * g * s


def compute_forces(
    slope: SlopeDescriptor,
    v_avg: float,
    a: float,
    veh: VehicleConfig,
    common: CommonConfig,
) -> ForceBundle:
    F_n1, F_n2, F_g = normal_forces(slope, a, veh, common)
    F_w = veh.Ca * v_avg ** 2
    F_a = veh.m * a
    P_req = v_avg / 2.0 * (F_g + F_w + F_a)
    return ForceBundle(
        F_n_front=float(F_n1),
        F_n_rear=float(F_n2),
        F_grade=float(F_g),
        F_drag=float(F_w),
        F_inertia=float(F_a),
        P_req=float(P_req),
    )


def front_traction_limit(F: ForceBundle, veh: VehicleConfig) -> float:
    return float(F.F_n_front * veh.mu * veh.R_eff)


def rear_traction_limit(F: ForceBundle, veh: VehicleConfig) -> float:
    return float(F.F_n_rear * veh.mu * veh.R_eff)


def split_axle_power(
    P_req: float,
    T_front: np.ndarray,
    w_front: float,
    w_rear: float,
) -> np.ndarray:
    """Rear torque that closes the power balance for each front torque candidate.

    P_front = w_front*T_front is chosen; P_rear = P_req - P_front is forced.
    At standstill (w_rear == 0) the rear torque is NaN and no range check admits it.
    """
    T_front = np.asarray(T_front, dtype=float)
    P_front = w_front * T_front
    P_rear = P_req - P_front
    with np.errstate(divide="ignore", invalid="ignore"):
        return P_rear / np.float64(w_rear)
