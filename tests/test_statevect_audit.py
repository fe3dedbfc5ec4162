import sys
from pathlib import Path
_root = Path(__file__).resolve().parent.parent
if str(_root) not in sys.path:
    sys.path.insert(0, str(_root))

import unittest

import numpy as np

from egv_dp.audit import constraint_survival_frame, feasibility_kpis, first_empty_stage
from egv_dp.candidates import RegenMode
from egv_dp.edge_eval import ConstraintRecord, EdgeState, evaluate_slots
from egv_dp.slope import SlopeDescriptor
from egv_dp.statevect import CellResult, StateVector

from tests.helpers import N_STEPS, SPEEDS_KMH, T_FRONT, make_params, make_tables, unit_motor_eff


def sweep_one_speed(params=None, E_next=(np.nan, 500.0, 1000.0, 1500.0)):
    E_tbl, SOE = make_tables(E_next=E_next)
    edges = [
        EdgeState(v_curr=10.0, v_next=5.0, a=-5.0, dt=1.0),   # too hard a brake
        EdgeState(v_curr=10.0, v_next=10.0, a=0.0, dt=2.0),   # cruise
        None,                                                  # not formed by the caller
        EdgeState(v_curr=10.0, v_next=15.0, a=0.1, dt=50.0),
    ]
    return evaluate_slots(
        edges,
        slope=SlopeDescriptor("level"),
        params=params if params is not None else make_params(),
        T_front=T_FRONT,
        motor_eff=unit_motor_eff,
        speeds_kmh=SPEEDS_KMH,
        E_tbl=E_tbl,
        SOE=SOE,
        k=0,
        n_steps=N_STEPS,
        currspd=2,
    )


class TestStateVector(unittest.TestCase):
    def test_slots_start_infeasible(self):
        sv = StateVector(3)
        self.assertEqual(len(sv), 3)
        self.assertFalse(sv.feasible().any())
        self.assertTrue(np.isnan(sv.as_arrays()["P"]).all())

    def test_store_and_arrays(self):
        sv = StateVector(2)
        sv.store(1, CellResult(
            P_W=100.0, T_front_Nm=1.0, T_rear_Nm=2.0, t_s=3.0,
            E_sub_J=300.0, E_subtot_J=None, mode=RegenMode.REGEN_NONE, soc_delta=0.0,
        ))
        arrs = sv.as_arrays()
        self.assertEqual(arrs["P"][1], 100.0)
        self.assertEqual(arrs["E_sub"][1], 300.0)
        self.assertTrue(np.isnan(arrs["E_subtot"][1]))
        self.assertTrue(np.isnan(arrs["t"][0]))

        df = sv.to_frame()
        self.assertEqual(list(df["feasible"]), [False, True])
        self.assertEqual(df.loc[1, "mode"], "regenNone")
        self.assertIsNone(df.loc[0, "mode"])


class TestEvaluateSlots(unittest.TestCase):
    def test_one_current_speed(self):
        sv, records = sweep_one_speed()
        self.assertEqual(list(sv.feasible()), [False, True, False, True])
        self.assertEqual(len(records), 4)

        cruise = sv[1]
        self.assertEqual(cruise.P_W, 312.5)
        self.assertEqual(cruise.E_subtot_J, 625.0 + 1000.0)

        # 15 m/s = 54 km/h successor row
        accel = sv[3]
        self.assertEqual(accel.E_subtot_J, accel.E_sub_J + 1500.0)

    def test_survival_frame(self):
        _, records = sweep_one_speed()
        df = constraint_survival_frame(records)
        self.assertEqual(list(df["first_empty_stage"]), ["prefilter", None, "unformed", None])
        self.assertEqual(list(df["formed"]), [True, True, False, True])
        self.assertEqual(df.loc[1, "n_SOC"], 5)
        self.assertEqual(df.loc[0, "n_T_range"], 0)

    def test_kpis(self):
        sv, records = sweep_one_speed(E_next=(0.0, 0.0, 1000.0, np.nan))
        kpis = feasibility_kpis(sv, records)
        self.assertEqual(kpis["n_slots"], 4)
        self.assertEqual(kpis["count_feasible"], 2)
        self.assertEqual(kpis["count_reject_prefilter"], 1)
        self.assertEqual(kpis["count_unformed"], 1)
        self.assertEqual(kpis["count_empty_torque"], 0)
        self.assertEqual(kpis["count_missing_successor"], 1)

    def test_kpis_length_mismatch(self):
        with self.assertRaises(ValueError):
            feasibility_kpis(StateVector(2), [ConstraintRecord()])

    def test_first_empty_stage(self):
        rec = ConstraintRecord(prefilter_ok=True, T_range=np.array([0, 1]))
        self.assertEqual(first_empty_stage(rec), "T_rearmax")

    def test_unformed_slot_is_not_a_prefilter_reject(self):
        self.assertEqual(first_empty_stage(ConstraintRecord(formed=False)), "unformed")
        self.assertEqual(first_empty_stage(ConstraintRecord()), "prefilter")


if __name__ == "__main__":
    unittest.main()
