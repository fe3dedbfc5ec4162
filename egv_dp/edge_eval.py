from __future__ import annotations

"""Minimum-energy control of one DP edge (current speed -> next speed).

Pipeline (strictly linear, no stage runs after an empty one):
  prefilter -> forces -> torque range -> rear traction -> front traction
  -> efficiency -> SOC window -> argmin power -> energy accumulation

Sign conventions:
- T < 0 regenerating axle, T >= 0 motoring axle
- P_total > 0 drawn from battery, < 0 returned to battery
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Callable, Optional, Sequence

import numpy as np

from .candidates import RegenMode, TorqueCandidate, keep, pair_torques
from .configs import EGVParams
from .dp_tables import DPTableView, SweepPosition
from .forces import (
    ForceBundle,
    compute_forces,
    front_traction_limit,
    rear_traction_limit,
    split_axle_power,
)
from .motor_maps import MotorEffMap
from .slope import SlopeDescriptor
from .statevect import CellResult, StateVector
from .units import wheel_omega_radps

logger = logging.getLogger(__name__)

SocPredicate = Callable[[TorqueCandidate], bool]


@dataclass(frozen=True)
class EdgeState:
    v_curr: float   # [m/s]
    v_next: float   # [m/s]
    a: float        # [m/s^2]
    dt: float       # [s]

    @property
    def v_avg(self) -> float:
        return 0.5 * (self.v_curr + self.v_next)

    @classmethod
    def from_distance(cls, v_curr: float, v_next: float, ds: float) -> "EdgeState":
        """Edge over a distance step ds at constant acceleration."""
        v_avg = 0.5 * (v_curr + v_next)
        if v_avg <= 0.0:
            raise ValueError(f"edge needs a positive average speed, got v_curr={v_curr}, v_next={v_next}")
        if ds <= 0.0:
            raise ValueError(f"ds must be > 0, got {ds}")
        dt = ds / v_avg
        return cls(v_curr=float(v_curr), v_next=float(v_next), a=float((v_next - v_curr) / dt), dt=float(dt))


def _no_index() -> np.ndarray:
    return np.empty(0, dtype=np.intp)


@dataclass
class ConstraintRecord:
    """Survivors of each stage, as 0-based positions into that stage's input."""

    formed: bool = True   # False for slots the caller supplied no edge for
    prefilter_ok: bool = False
    T_range: np.ndarray = field(default_factory=_no_index)
    T_rearmax: np.ndarray = field(default_factory=_no_index)
    T_frontmax: np.ndarray = field(default_factory=_no_index)
    SOC: np.ndarray = field(default_factory=_no_index)

    STAGES = ("T_range", "T_rearmax", "T_frontmax", "SOC")

    def survivor_counts(self) -> dict[str, int]:
        return {s: int(getattr(self, s).size) for s in self.STAGES}


@dataclass(frozen=True)
class EdgeEvaluation:
    result: Optional[CellResult]
    constraints: ConstraintRecord
    forces: Optional[ForceBundle] = None


def passes_prefilter(edge: EdgeState, params: EGVParams) -> bool:
    if abs(edge.a) > params.lim.acc_max:
        return False
    if edge.v_next >= params.speed_upper_mps:
        return False
    if edge.v_next < params.speed_lower_mps:
        return False
    return True


def axle_eta(T: float, eta_motor: float, eff_drive: float, eff_brake: float) -> float:
    """Electrical/mechanical power factor of one axle.

    T < 0 : regenerating -> eff_brake*eta_motor (<= 1, recovered energy discounted)
    T >= 0: motoring     -> 1/(eff_drive*eta_motor) (>= 1, losses inflate demand)
    """
    if not (0.0 < eta_motor <= 1.0):
        raise ValueError(f"motor efficiency must be in (0,1], got {eta_motor}")
    if T < 0:
        return eff_brake * eta_motor
    return 1.0 / (eff_drive * eta_motor)


def evaluate_power(
    c: TorqueCandidate,
    *,
    v_avg: float,
    w_front: float,
    w_rear: float,
    params: EGVParams,
    motor_eff: MotorEffMap,
) -> TorqueCandidate:
    eff, R = params.eff, params.vehicle.R_eff
    eta_f = axle_eta(c.T_front, float(motor_eff(v_avg, c.T_front, R)), eff.drive_front, eff.brake_front)
    eta_r = axle_eta(c.T_rear, float(motor_eff(v_avg, c.T_rear, R)), eff.drive_rear, eff.brake_rear)
    P_total = w_front * c.T_front * eta_f + w_rear * c.T_rear * eta_r
    return replace(
        c,
        eta_front=float(eta_f),
        eta_rear=float(eta_r),
        P_total=float(P_total),
        mode=RegenMode.classify(c.T_front, c.T_rear),
    )


def soc_window(position: SweepPosition, tables: DPTableView, params: EGVParams) -> SocPredicate:
    """Admissible SOC change for the edge.

    Final step: |dSOC| must fit inside the whole SOC band.
    Otherwise a candidate is admitted when EITHER the cell minimum stays below
    soc_max OR the cell maximum stays above soc_min.
    """
    soc_min, soc_max = params.battery.soc_min, params.battery.soc_max
    if position.is_final:
        span = soc_max - soc_min
        return lambda c: abs(c.soc_delta) <= span

    ext = tables.soc_extrema()
    if ext is None:
        return lambda c: False
    cell_min, cell_max = ext
    return lambda c: (cell_min + c.soc_delta <= soc_max) or (cell_max + c.soc_delta >= soc_min)


def evaluate_edge(
    edge: EdgeState,
    *,
    slope: SlopeDescriptor,
    params: EGVParams,
    T_front: np.ndarray,
    motor_eff: MotorEffMap,
    tables: DPTableView,
    position: SweepPosition,
) -> EdgeEvaluation:
    """Minimum-power feasible control of one edge and its energy to destination.

    Returns:
      EdgeEvaluation with result=None when the edge is infeasible.

    Raises:
      TorqueAlignmentError: front/rear torque vectors lost correspondence.
    """
    cons = ConstraintRecord()
    veh = params.vehicle

    # limit acceleration and speed window
    if not passes_prefilter(edge, params):
        logger.debug("edge k=%d slot=%d rejected by prefilter (a=%.4g, v_next=%.4g)",
                     position.k, position.nextspd, edge.a, edge.v_next)
        return EdgeEvaluation(None, cons)
    cons.prefilter_ok = True

    # forces and power balance
    v_avg = edge.v_avg
    w_front = wheel_omega_radps(v_avg, veh.R_eff)
    w_rear = wheel_omega_radps(v_avg, veh.R_eff)
    F = compute_forces(slope, v_avg, edge.a, veh, params.common)
    T_rear = split_axle_power(F.P_req, T_front, w_front, w_rear)
    cands = pair_torques(T_front, T_rear)

    # 1: rear torque window
    lim = params.lim
    cands, cons.T_range = keep(cands, lambda c: lim.T_rear_min <= c.T_rear <= lim.T_rear_max)
    # 2: traction (normal force) limits
    T_rear_trac = rear_traction_limit(F, veh)
    cands, cons.T_rearmax = keep(cands, lambda c: c.T_rear <= T_rear_trac)
    T_front_trac = front_traction_limit(F, veh)
    cands, cons.T_frontmax = keep(cands, lambda c: c.T_front <= T_front_trac)

    if not cands:
        logger.debug("edge k=%d slot=%d: no torque pair within range/traction limits",
                     position.k, position.nextspd)
        return EdgeEvaluation(None, cons, F)

    # efficiency-weighted electrical power
    cands = [
        evaluate_power(c, v_avg=v_avg, w_front=w_front, w_rear=w_rear, params=params, motor_eff=motor_eff)
        for c in cands
    ]

    # 3: state of charge
    soc_energy = params.soc_energy_J
    cands = [replace(c, soc_delta=float(c.P_total * edge.dt / soc_energy)) for c in cands]
    cands, cons.SOC = keep(cands, soc_window(position, tables, params))

    if not cands:
        logger.debug("edge k=%d slot=%d: no torque pair within SOC window", position.k, position.nextspd)
        return EdgeEvaluation(None, cons, F)

    # minimum power (first occurrence wins ties)
    P_total = np.asarray([c.P_total for c in cands], dtype=float)
    best = cands[int(np.argmin(P_total))]

    # subtotal energy from this state to the destination
    E_sub = best.P_total * edge.dt
    if position.is_final:
        E_subtot: Optional[float] = E_sub + params.E_final_J
    else:
        E_next = tables.successor_subtotal(edge.v_next / params.common.kmh2mps)
        E_subtot = None if E_next is None else E_sub + E_next
        if E_subtot is None:
            logger.debug("edge k=%d slot=%d: no successor row for v_next=%.4g m/s",
                         position.k, position.nextspd, edge.v_next)

    result = CellResult(
        P_W=float(best.P_total),
        T_front_Nm=best.T_front,
        T_rear_Nm=best.T_rear,
        t_s=float(edge.dt),
        E_sub_J=float(E_sub),
        E_subtot_J=E_subtot,
        mode=best.mode,
        soc_delta=float(best.soc_delta),
    )
    return EdgeEvaluation(result, cons, F)


def evaluate_slots(
    edges: Sequence[Optional[EdgeState]],
    *,
    slope: SlopeDescriptor,
    params: EGVParams,
    T_front: np.ndarray,
    motor_eff: MotorEffMap,
    speeds_kmh: np.ndarray,
    E_tbl: Optional[np.ndarray],
    SOE: Optional[np.ndarray],
    k: int,
    n_steps: int,
    currspd: int,
) -> tuple[StateVector, list[ConstraintRecord]]:
    """Evaluate every next-speed slot of one (current speed, step) pair.

    edges[i] is the edge into next-speed slot i; None marks a slot the caller
    could not form (it stays infeasible).
    """
    statevect = StateVector(len(edges))
    records: list[ConstraintRecord] = []
    tables = None

    for nextspd, edge in enumerate(edges):
        position = SweepPosition(k=k, n_steps=n_steps, currspd=currspd, nextspd=nextspd)
        if tables is None:
            tables = DPTableView.from_tables(speeds_kmh, E_tbl, SOE, position)
        if edge is None:
            records.append(ConstraintRecord(formed=False))
            continue
        ev = evaluate_edge(
            edge,
            slope=slope,
            params=params,
            T_front=T_front,
            motor_eff=motor_eff,
            tables=tables,
            position=position,
        )
        statevect.store(nextspd, ev.result)
        records.append(ev.constraints)

    return statevect, records
