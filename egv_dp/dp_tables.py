from __future__ import annotations

"""Read-only views into the DP tables owned by the enclosing sweep.

The sweep fills tables in strictly backward time order; a view handed to the
edge evaluator for step k assumes step k+1 is already complete.

Table layout (0-based):
  speeds_kmh: (n_speed,)                  all valid target speeds
  E_tbl:      (n_speed, n_steps)          subtotal energy to destination [J]
  SOE:        (n_speed, n_succ, n_steps)  SOC of the states reachable from each speed
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np


@dataclass(frozen=True)
class SweepPosition:
    k: int          # time-step index
    n_steps: int    # number of time-steps in the sweep
    currspd: int    # index of the current speed in speeds_kmh
    nextspd: int    # slot index of the next speed being evaluated

    def __post_init__(self) -> None:
        if not (0 <= self.k < self.n_steps):
            raise ValueError(f"k must be in [0, {self.n_steps}), got {self.k}")

    @property
    def is_final(self) -> bool:
        return self.k == self.n_steps - 1


def _readonly(x) -> np.ndarray:
    v = np.asarray(x, dtype=float).view()
    v.setflags(write=False)
    return v


@dataclass(frozen=True)
class DPTableView:
    speeds_kmh: np.ndarray
    E_subtot_next: Optional[np.ndarray]   # E_tbl[:, k+1]; None on the final step
    soc_cell: Optional[np.ndarray]        # SOE[currspd, :, k]

    @classmethod
    def from_tables(
        cls,
        speeds_kmh: np.ndarray,
        E_tbl: Optional[np.ndarray],
        SOE: Optional[np.ndarray],
        position: SweepPosition,
    ) -> "DPTableView":
        k = position.k
        E_next = None
        if E_tbl is not None and not position.is_final:
            E_next = _readonly(np.asarray(E_tbl)[:, k + 1])
        soc_cell = None
        if SOE is not None:
            soc_cell = _readonly(np.asarray(SOE)[position.currspd, :, k])
        return cls(speeds_kmh=_readonly(speeds_kmh), E_subtot_next=E_next, soc_cell=soc_cell)

    def successor_subtotal(self, v_next_kmh: float, tol: float = 1e-3) -> Optional[float]:
        """Subtotal energy of the next speed at step k+1, or None if no row matches."""
        if self.E_subtot_next is None:
            return None
        rows = np.flatnonzero(np.abs(self.speeds_kmh - v_next_kmh) <= tol)
        if rows.size == 0:
            return None
        E = float(self.E_subtot_next[rows[0]])
        if not np.isfinite(E):
            return None
        return E

    def soc_extrema(self) -> Optional[tuple[float, float]]:
        """(min, max) SOC over the finite entries of the current cell."""
        if self.soc_cell is None:
            return None
        vals = self.soc_cell[np.isfinite(self.soc_cell)]
        if vals.size == 0:
            return None
        return float(np.min(vals)), float(np.max(vals))
