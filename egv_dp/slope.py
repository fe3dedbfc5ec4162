from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

SlopeKind = Literal["downhill", "level", "uphill"]

SLOPE_KINDS: tuple[str, ...] = ("downhill", "level", "uphill")


@dataclass(frozen=True)
class SlopeDescriptor:
    """Road segment slope.

    angle_deg is the unsigned magnitude of the grade angle; the direction is
    carried by `kind`. For "level" the angle is ignored.
    """

    kind: SlopeKind = "level"
    angle_deg: float = 0.0

    def __post_init__(self) -> None:
        if self.kind not in SLOPE_KINDS:
            raise ValueError(f"Unknown slope kind: {self.kind!r} (expected one of {SLOPE_KINDS})")
        if self.angle_deg < 0.0:
            raise ValueError(f"angle_deg is a magnitude and must be >= 0, got {self.angle_deg}")

    @classmethod
    def from_grade_deg(cls, angle_deg: float) -> "SlopeDescriptor":
        """Classify a signed grade angle: < 0 downhill, 0 level, > 0 uphill."""
        if angle_deg < 0.0:
            return cls("downhill", float(-angle_deg))
        if angle_deg > 0.0:
            return cls("uphill", float(angle_deg))
        return cls("level", 0.0)
