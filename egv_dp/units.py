from __future__ import annotations

"""Unit conversions & sign helpers.

Leaf dependency: no imports from other project modules.

Sign conventions (IMMUTABLE):
- Axle torque: T > 0 motoring (battery -> wheel), T < 0 regenerating
- Electrical power: P_total > 0 drawn from battery, < 0 returned to battery
"""

import math

KMH2MPS: float = 1.0 / 3.6
HR2SEC: float = 3600.0


def kmh_to_mps(v_kmh: float) -> float:
    """Convert km/h to m/s."""
    return float(v_kmh * KMH2MPS)


def mps_to_kmh(v_mps: float) -> float:
    """Convert m/s to km/h."""
    return float(v_mps / KMH2MPS)


def wheel_omega_radps(v_mps: float, R_eff_m: float) -> float:
    """Wheel angular speed from vehicle speed (no slip)."""
    return float(v_mps / max(R_eff_m, 1e-9))


def radps_to_rpm(radps: float) -> float:
    """Convert rad/s to rpm."""
    return float(radps * 60.0 / (2.0 * math.pi))
