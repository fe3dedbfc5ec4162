"""Shared fixtures for edge-evaluation tests.

Numbers are picked so the level-road cruise edge is exact in binary floating
point: v_avg = 10 m/s, R_eff = 0.5 m -> w = 20 rad/s,
P_req = 10/2 * (0.5 * 10^2) = 250 W, T_rear = 12.5 - T_front.
"""

from __future__ import annotations

import numpy as np

from egv_dp.configs import (
    BatteryConfig, CommonConfig, EfficiencyConfig, EGVParams, LimitsConfig, VehicleConfig,
)
from egv_dp.dp_tables import DPTableView, SweepPosition
from egv_dp.edge_eval import EdgeState

T_FRONT = np.array([-20.0, -10.0, 0.0, 10.0, 20.0])

SPEEDS_KMH = np.array([0.0, 18.0, 36.0, 54.0])
N_STEPS = 3


def make_params(**overrides) -> EGVParams:
    kw = dict(
        common=CommonConfig(g=9.81),
        vehicle=VehicleConfig(m=1000.0, L=2.5, b=0.5, Ca=0.5, R_eff=0.5, mu=0.9),
        battery=BatteryConfig(E_max_Ah=50.0, V_bat=300.0, soc_min=0.2, soc_max=0.9),
        eff=EfficiencyConfig(drive_front=0.8, drive_rear=0.8, brake_front=0.5, brake_rear=0.5),
        lim=LimitsConfig(
            acc_max=1.5,
            T_rear_min=-200.0, T_rear_max=200.0,
            T_front_min=-20.0, T_front_max=20.0, T_front_step=10.0,
            speed_upper_kmh=100.0, speed_lower_kmh=5.0,
        ),
        E_final_J=1234.0,
    )
    kw.update(overrides)
    return EGVParams(**kw)


def unit_motor_eff(_v: float, _T: float, _R: float) -> float:
    return 1.0


def cruise_edge() -> EdgeState:
    return EdgeState(v_curr=10.0, v_next=10.0, a=0.0, dt=2.0)


def make_tables(soc_values=(0.5, 0.6), E_next=(np.nan, 500.0, 1000.0, 1500.0)):
    E_tbl = np.full((SPEEDS_KMH.size, N_STEPS), np.nan)
    E_tbl[:, 1] = E_next
    SOE = np.full((SPEEDS_KMH.size, len(soc_values), N_STEPS), 0.5)
    SOE[2, :, 0] = soc_values
    return E_tbl, SOE


def position(k: int = 0, nextspd: int = 2) -> SweepPosition:
    return SweepPosition(k=k, n_steps=N_STEPS, currspd=2, nextspd=nextspd)


def view(k: int = 0, **kw) -> DPTableView:
    E_tbl, SOE = make_tables(**kw)
    return DPTableView.from_tables(SPEEDS_KMH, E_tbl, SOE, position(k))
