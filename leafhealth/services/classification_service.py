from __future__ import annotations
from typing import Dict
import logging
import os
import numpy as np
from dotenv import load_dotenv

from ..models.image import Image
from ..models.analysis_result import (
    AnalysisResult,
    ClassificationCounts,
    CATEGORIES,
    VERDICT_HEALTHY,
    VERDICT_MODERATE,
    VERDICT_NO_LEAF,
    VERDICT_UNHEALTHY,
)
from ..repositories.segmentation_repository import ALPHA_FLOOR
from .color_space_service import ColorSpaceService

logger = logging.getLogger(__name__)

# env‑vars
load_dotenv()

# Verdict thresholds (percent of classified pixels). Empirical, not derived.
HEALTHY_PCT_MIN = float(os.getenv("HEALTHY_PCT_MIN", "60"))
HEALTHY_UNHEALTHY_PCT_MAX = float(os.getenv("HEALTHY_UNHEALTHY_PCT_MAX", "20"))
MODERATE_HEALTHY_PCT_MIN = float(os.getenv("MODERATE_HEALTHY_PCT_MIN", "35"))
MODERATE_UNHEALTHY_PCT_MIN = float(os.getenv("MODERATE_UNHEALTHY_PCT_MIN", "20"))
MODERATE_UNHEALTHY_PCT_MAX = float(os.getenv("MODERATE_UNHEALTHY_PCT_MAX", "40"))
MIN_CLASSIFIED_PIXELS = int(os.getenv("MIN_CLASSIFIED_PIXELS", "50"))

# Pixel bucketing rules (hue in degrees, sat/val in [0, 1]).
BROWN_SAT_MAX = 0.18
BROWN_VAL_MAX = 0.45
GREEN_HUE = (60.0, 180.0)
GREEN_SAT_MIN = 0.2
RED_HUE_LOW_MAX = 30.0
RED_HUE_HIGH_MIN = 330.0
RED_SAT_MIN = 0.18
PURPLE_HUE = (260.0, 320.0)
PURPLE_SAT_MIN = 0.15
YELLOW_HUE = (30.0, 60.0)   # upper bound exclusive
YELLOW_SAT_MIN = 0.18


class ClassificationService:
    """
    Buckets every opaque leaf pixel into a pigment category and turns the
    category shares into a health verdict.
    """

    def __init__(self):
        self.color_space_service = ColorSpaceService()

    # ── per pixel ────────────────────────────────────────────────────
    @staticmethod
    def category_for_hsv(hue: float, sat: float, val: float) -> str:
        """Ordered rules, first match wins."""
        if sat < BROWN_SAT_MAX and val < BROWN_VAL_MAX:
            return "brown"
        if GREEN_HUE[0] <= hue <= GREEN_HUE[1] and sat >= GREEN_SAT_MIN:
            return "green"
        if (hue <= RED_HUE_LOW_MAX or hue >= RED_HUE_HIGH_MIN) and sat >= RED_SAT_MIN:
            return "red"
        if PURPLE_HUE[0] <= hue <= PURPLE_HUE[1] and sat >= PURPLE_SAT_MIN:
            return "purple"
        if YELLOW_HUE[0] <= hue < YELLOW_HUE[1] and sat >= YELLOW_SAT_MIN:
            return "yellow"
        return "other"

    def classify_pixel(self, r: int, g: int, b: int) -> str:
        return self.category_for_hsv(*self.color_space_service.rgb_to_hsv(r, g, b))

    # ── whole image ──────────────────────────────────────────────────
    @staticmethod
    def categorize(hsv: np.ndarray) -> np.ndarray:
        """
        Vectorized category_for_hsv.

        Args:
            hsv: (N, 3) float array
        Returns:
            (N,) int array of indices into CATEGORIES
        """
        hue, sat, val = hsv[:, 0], hsv[:, 1], hsv[:, 2]
        rules = [
            (sat < BROWN_SAT_MAX) & (val < BROWN_VAL_MAX),
            (hue >= GREEN_HUE[0]) & (hue <= GREEN_HUE[1]) & (sat >= GREEN_SAT_MIN),
            ((hue <= RED_HUE_LOW_MAX) | (hue >= RED_HUE_HIGH_MIN)) & (sat >= RED_SAT_MIN),
            (hue >= PURPLE_HUE[0]) & (hue <= PURPLE_HUE[1]) & (sat >= PURPLE_SAT_MIN),
            (hue >= YELLOW_HUE[0]) & (hue < YELLOW_HUE[1]) & (sat >= YELLOW_SAT_MIN),
        ]
        # np.select picks the first true condition, matching the rule order
        return np.select(rules, [
            CATEGORIES.index("brown"),
            CATEGORIES.index("green"),
            CATEGORIES.index("red"),
            CATEGORIES.index("purple"),
            CATEGORIES.index("yellow"),
        ], default=CATEGORIES.index("other"))

    def count(self, img: Image) -> ClassificationCounts:
        pixels = img.pixels.reshape(-1, 4)
        leaf = pixels[pixels[:, 3] >= ALPHA_FLOOR]
        if not len(leaf):
            return ClassificationCounts()

        hsv = self.color_space_service.image_to_hsv(leaf[:, :3])
        bins = np.bincount(self.categorize(hsv), minlength=len(CATEGORIES))
        return ClassificationCounts(**{name: int(bins[i]) for i, name in enumerate(CATEGORIES)})

    @staticmethod
    def percentages(counts: ClassificationCounts) -> Dict[str, float]:
        total = counts.total
        values = {**counts.as_dict(), "healthy": counts.healthy, "unhealthy": counts.unhealthy}
        if total == 0:
            return {name: 0.0 for name in values}
        return {name: 100.0 * value / total for name, value in values.items()}

    @staticmethod
    def verdict(counts: ClassificationCounts, percents: Dict[str, float]) -> str:
        if counts.total < MIN_CLASSIFIED_PIXELS:
            return VERDICT_NO_LEAF

        healthy_pct = percents["healthy"]
        unhealthy_pct = percents["unhealthy"]
        if healthy_pct >= HEALTHY_PCT_MIN and unhealthy_pct < HEALTHY_UNHEALTHY_PCT_MAX:
            return VERDICT_HEALTHY
        if healthy_pct >= MODERATE_HEALTHY_PCT_MIN or (
            MODERATE_UNHEALTHY_PCT_MIN <= unhealthy_pct < MODERATE_UNHEALTHY_PCT_MAX
        ):
            return VERDICT_MODERATE
        return VERDICT_UNHEALTHY

    def classify(self, img: Image) -> AnalysisResult:
        """
        Args:
            img (Image): RGBA image whose alpha marks the leaf.
        Returns:
            AnalysisResult with counts, percents and verdict.
        """
        counts = self.count(img)
        percents = self.percentages(counts)
        verdict = self.verdict(counts, percents)
        logger.info("Classified %d leaf px -> %s (healthy %.1f%%, unhealthy %.1f%%)",
                    counts.total, verdict, percents["healthy"], percents["unhealthy"])
        return AnalysisResult(counts=counts, percents=percents, verdict=verdict)
