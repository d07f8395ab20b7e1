from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict

CATEGORIES = ("green", "red", "purple", "yellow", "brown", "other")
HEALTHY_CATEGORIES = ("green", "red", "purple")
UNHEALTHY_CATEGORIES = ("yellow", "brown", "other")

VERDICT_NO_LEAF = "No leaf detected"
VERDICT_HEALTHY = "Healthy"
VERDICT_MODERATE = "Moderately healthy"
VERDICT_UNHEALTHY = "Unhealthy"


@dataclass(frozen=True)
class ClassificationCounts:
    """Pixel count per pigment category. `total` is always the sum of the six."""
    green: int = 0
    red: int = 0
    purple: int = 0
    yellow: int = 0
    brown: int = 0
    other: int = 0

    @property
    def total(self) -> int:
        return self.green + self.red + self.purple + self.yellow + self.brown + self.other

    @property
    def healthy(self) -> int:
        return self.green + self.red + self.purple

    @property
    def unhealthy(self) -> int:
        return self.yellow + self.brown + self.other

    def as_dict(self) -> Dict[str, int]:
        return {name: getattr(self, name) for name in CATEGORIES}


@dataclass(frozen=True)
class AnalysisResult:
    """
    Outcome of pigment classification for one image.

    percents holds one entry per category plus "healthy" and "unhealthy",
    each as count / total * 100 (0 when nothing was classified).
    """
    counts: ClassificationCounts
    percents: Dict[str, float] = field(default_factory=dict)
    verdict: str = VERDICT_NO_LEAF

    @property
    def total(self) -> int:
        return self.counts.total

    def to_dict(self) -> dict:
        return {
            "counts": {**self.counts.as_dict(), "total": self.counts.total},
            "percents": dict(self.percents),
            "verdict": self.verdict,
        }
