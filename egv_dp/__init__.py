"""Per-edge evaluator of a backward DP energy optimisation for a dual-motor EGV."""

from .candidates import RegenMode, TorqueAlignmentError, TorqueCandidate
from .configs import EGVParams
from .dp_tables import DPTableView, SweepPosition
from .edge_eval import ConstraintRecord, EdgeEvaluation, EdgeState, evaluate_edge, evaluate_slots
from .slope import SlopeDescriptor
from .statevect import CellResult, StateVector

__all__ = [
    "CellResult",
    "ConstraintRecord",
    "DPTableView",
    "EGVParams",
    "EdgeEvaluation",
    "EdgeState",
    "RegenMode",
    "SlopeDescriptor",
    "StateVector",
    "SweepPosition",
    "TorqueAlignmentError",
    "TorqueCandidate",
    "evaluate_edge",
    "evaluate_slots",
]
