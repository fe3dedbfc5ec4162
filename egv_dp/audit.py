from __future__ import annotations

from typing import Optional, Sequence

import pandas as pd

from .edge_eval import ConstraintRecord
from .statevect import StateVector


def first_empty_stage(rec: ConstraintRecord) -> Optional[str]:
    """Name of the stage that eliminated every candidate, or None if some survived."""
    if not rec.formed:
        return "unformed"
    if not rec.prefilter_ok:
        return "prefilter"
    for stage in ConstraintRecord.STAGES:
        if getattr(rec, stage).size == 0:
            return stage
    return None


def constraint_survival_frame(records: Sequence[ConstraintRecord]) -> pd.DataFrame:
    rows = []
    for i, rec in enumerate(records):
        row = {"nextspd": i, "formed": bool(rec.formed), "prefilter_ok": bool(rec.prefilter_ok)}
        row.update({f"n_{s}": n for s, n in rec.survivor_counts().items()})
        row["first_empty_stage"] = first_empty_stage(rec)
        rows.append(row)
    cols = ["nextspd", "formed", "prefilter_ok"] + [f"n_{s}" for s in ConstraintRecord.STAGES] + ["first_empty_stage"]
    return pd.DataFrame(rows, columns=cols)


def feasibility_kpis(statevect: StateVector, records: Sequence[ConstraintRecord]) -> dict:
    if len(statevect) != len(records):
        raise ValueError(f"statevect has {len(statevect)} slots but {len(records)} records were given")

    df = constraint_survival_frame(records)
    stage = df["first_empty_stage"]
    torque_stages = ["T_range", "T_rearmax", "T_frontmax"]

    return {
        "n_slots": int(len(statevect)),
        "count_feasible": int(statevect.feasible().sum()),
        "count_unformed": int((stage == "unformed").sum()),
        "count_reject_prefilter": int((stage == "prefilter").sum()),
        "count_empty_torque": int(stage.isin(torque_stages).sum()),
        "count_empty_soc": int((stage == "SOC").sum()),
        "count_missing_successor": int(
            sum(1 for s in statevect.slots if s is not None and s.E_subtot_J is None)
        ),
    }
