from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class LabColor:
    """CIE L*a*b* triplet. L in [0, 100], a/b roughly in [-128, 127]."""
    L: float
    a: float
    b: float

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.L, self.a, self.b)


@dataclass(frozen=True)
class BorderProfile:
    """
    Color statistics of the image border, used as the "not leaf" reference.
    Built once per image and only read afterwards.
    """
    mean_lab: LabColor
    mean_distance: float    # mean deltaE of border samples to mean_lab
    std_distance: float     # population std-dev of the same distances
    sample_count: int
