from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np
import pandas as pd

from .candidates import RegenMode


@dataclass(frozen=True)
class CellResult:
    """Minimum-power control of one feasible edge."""

    P_W: float                    # selected total electrical power
    T_front_Nm: float
    T_rear_Nm: float
    t_s: float                    # edge duration
    E_sub_J: float                # own-edge energy P*dt
    E_subtot_J: Optional[float]   # energy to destination; None if no successor matched
    mode: RegenMode
    soc_delta: float


class StateVector:
    """One optional result per next-speed slot for a (current speed, step) pair.

    Slots start empty (infeasible) and are overwritten by store().
    """

    _ARRAY_FIELDS = {
        "P": "P_W",
        "T_front": "T_front_Nm",
        "T_rear": "T_rear_Nm",
        "t": "t_s",
        "E_sub": "E_sub_J",
        "E_subtot": "E_subtot_J",
    }

    def __init__(self, n_slots: int):
        if n_slots < 0:
            raise ValueError(f"n_slots must be >= 0, got {n_slots}")
        self.slots: list[Optional[CellResult]] = [None] * n_slots

    def __len__(self) -> int:
        return len(self.slots)

    def __getitem__(self, nextspd: int) -> Optional[CellResult]:
        return self.slots[nextspd]

    def store(self, nextspd: int, result: Optional[CellResult]) -> None:
        self.slots[nextspd] = result

    def feasible(self) -> np.ndarray:
        return np.asarray([s is not None for s in self.slots], dtype=bool)

    def as_arrays(self) -> dict[str, np.ndarray]:
        """NaN-filled arrays for the caller's numeric DP tables."""
        out = {k: np.full(len(self.slots), np.nan) for k in self._ARRAY_FIELDS}
        for i, s in enumerate(self.slots):
            if s is None:
                continue
            for k, attr in self._ARRAY_FIELDS.items():
                val = getattr(s, attr)
                if val is not None:
                    out[k][i] = float(val)
        return out

    def to_frame(self) -> pd.DataFrame:
        arrs = self.as_arrays()
        return pd.DataFrame({
            "nextspd": np.arange(len(self.slots)),
            "feasible": self.feasible(),
            "P_W": arrs["P"],
            "T_front_Nm": arrs["T_front"],
            "T_rear_Nm": arrs["T_rear"],
            "t_s": arrs["t"],
            "E_sub_J": arrs["E_sub"],
            "E_subtot_J": arrs["E_subtot"],
            "mode": [s.mode.value if s is not None else None for s in self.slots],
        })
