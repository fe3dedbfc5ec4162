from __future__ import annotations

"""Front/rear torque candidates.

Each candidate is one record carrying both axle torques and everything
derived from them, so filtering a stage can never separate a front torque
from its rear partner.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Sequence

import numpy as np


class TorqueAlignmentError(RuntimeError):
    """Front and rear torque vectors lost index correspondence (programming bug)."""


class RegenMode(Enum):
    REGEN_BOTH = "regenBoth"
    REGEN_FRONT = "regenFront"
    REGEN_REAR = "regenRear"
    REGEN_NONE = "regenNone"

    @classmethod
    def classify(cls, T_front: float, T_rear: float) -> "RegenMode":
        """Negative torque = regenerating axle."""
        if T_front < 0:
            return cls.REGEN_BOTH if T_rear < 0 else cls.REGEN_FRONT
        return cls.REGEN_REAR if T_rear < 0 else cls.REGEN_NONE


@dataclass(frozen=True)
class TorqueCandidate:
    index: int          # position in the raw front-torque vector
    T_front: float
    T_rear: float

    # filled by the efficiency / SOC stages
    eta_front: Optional[float] = None
    eta_rear: Optional[float] = None
    P_total: Optional[float] = None
    soc_delta: Optional[float] = None
    mode: Optional[RegenMode] = None


def pair_torques(T_front: np.ndarray, T_rear: np.ndarray) -> list[TorqueCandidate]:
    """Zip parallel torque vectors into candidate records.

    Raises:
        TorqueAlignmentError: if the vectors have different lengths.
    """
    T_front = np.atleast_1d(np.asarray(T_front, dtype=float))
    T_rear = np.atleast_1d(np.asarray(T_rear, dtype=float))
    if T_front.shape != T_rear.shape:
        raise TorqueAlignmentError(
            f"T_front and T_rear have different dimensions: {T_front.shape} vs {T_rear.shape}"
        )
    return [
        TorqueCandidate(index=i, T_front=float(tf), T_rear=float(tr))
        for i, (tf, tr) in enumerate(zip(T_front, T_rear))
    ]


def keep(
    candidates: Sequence[TorqueCandidate],
    predicate: Callable[[TorqueCandidate], bool],
) -> tuple[list[TorqueCandidate], np.ndarray]:
    """Retain the candidates matching predicate.

    Returns:
      survivors: candidates in their input order
      kept: 0-based positions of the survivors in `candidates`
    """
    kept = [i for i, c in enumerate(candidates) if predicate(c)]
    return [candidates[i] for i in kept], np.asarray(kept, dtype=np.intp)
