from __future__ import annotations

import numpy as np
import pytest

from leafhealth.models.analysis_result import (
    CATEGORIES,
    ClassificationCounts,
    VERDICT_HEALTHY,
    VERDICT_MODERATE,
    VERDICT_NO_LEAF,
    VERDICT_UNHEALTHY,
)
from leafhealth.models.image import Image
from leafhealth.services.classification_service import ClassificationService

from conftest import BROWN, FOREST_GREEN, YELLOW, solid


@pytest.fixture
def service() -> ClassificationService:
    return ClassificationService()


@pytest.mark.parametrize(
    "rgb, category",
    [
        (FOREST_GREEN, "green"),
        ((200, 30, 30), "red"),
        ((128, 0, 128), "purple"),
        (YELLOW, "yellow"),
        (BROWN, "brown"),
        ((0, 0, 0), "brown"),
        ((255, 255, 255), "other"),
        ((30, 60, 200), "other"),
    ],
)
def test_classify_pixel(service: ClassificationService, rgb, category) -> None:
    assert service.classify_pixel(*rgb) == category


@pytest.mark.parametrize(
    "hsv, category",
    [
        ((60.0, 0.5, 0.8), "green"),     # green wins the 60 deg boundary
        ((59.9, 0.5, 0.8), "yellow"),
        ((30.0, 0.5, 0.8), "red"),       # red rule is checked before yellow
        ((30.0, 0.17, 0.8), "other"),
        ((45.0, 0.1, 0.3), "brown"),     # dull beats any hue
        ((180.0, 0.2, 0.8), "green"),
        ((181.0, 0.9, 0.8), "other"),
        ((330.0, 0.18, 0.8), "red"),
        ((320.0, 0.15, 0.8), "purple"),
        ((100.0, 0.19, 0.8), "other"),
    ],
)
def test_rule_order_and_boundaries(hsv, category) -> None:
    assert ClassificationService.category_for_hsv(*hsv) == category


def test_vectorized_counts_match_per_pixel_rules(service: ClassificationService) -> None:
    rng = np.random.default_rng(5)
    pixels = np.empty((24, 24, 4), dtype=np.uint8)
    pixels[..., :3] = rng.integers(0, 256, size=(24, 24, 3), dtype=np.uint8)
    pixels[..., 3] = 255

    counts = service.count(Image(pixels=pixels))

    expected = {name: 0 for name in CATEGORIES}
    for r, g, b in pixels[..., :3].reshape(-1, 3).tolist():
        expected[service.classify_pixel(r, g, b)] += 1
    assert counts.as_dict() == expected


def test_total_and_percents_are_consistent(service: ClassificationService) -> None:
    pixels = solid(10, 10, FOREST_GREEN)
    pixels[:3, :, :3] = YELLOW
    pixels[3:4, :, :3] = BROWN
    result = service.classify(Image(pixels=pixels))

    counts = result.counts
    assert counts.total == sum(counts.as_dict().values()) == 100
    for name, value in counts.as_dict().items():
        assert result.percents[name] == pytest.approx(100.0 * value / counts.total)
    assert result.percents["healthy"] == pytest.approx(60.0)
    assert result.percents["unhealthy"] == pytest.approx(40.0)


def test_alpha_floor_skips_background(service: ClassificationService) -> None:
    pixels = solid(10, 10, FOREST_GREEN, alpha=0)
    pixels[0, :5, 3] = 15
    pixels[1, :7, 3] = 16

    assert service.count(Image(pixels=pixels)).total == 7


def test_transparent_image_has_no_leaf(service: ClassificationService) -> None:
    result = service.classify(Image(pixels=solid(20, 20, FOREST_GREEN, alpha=0)))

    assert result.total == 0
    assert result.verdict == VERDICT_NO_LEAF
    assert all(value == 0.0 for value in result.percents.values())


def test_half_yellow_half_brown_is_unhealthy(service: ClassificationService) -> None:
    pixels = solid(20, 20, YELLOW)
    pixels[:, 10:, :3] = BROWN
    result = service.classify(Image(pixels=pixels))

    assert result.percents["yellow"] == pytest.approx(50.0)
    assert result.percents["brown"] == pytest.approx(50.0)
    assert result.percents["healthy"] == 0.0
    assert result.verdict == VERDICT_UNHEALTHY


@pytest.mark.parametrize(
    "counts, verdict",
    [
        (ClassificationCounts(green=49), VERDICT_NO_LEAF),
        (ClassificationCounts(green=50), VERDICT_HEALTHY),
        (ClassificationCounts(green=81, yellow=19), VERDICT_HEALTHY),
        (ClassificationCounts(green=40, red=20, purple=21, brown=19), VERDICT_HEALTHY),
        (ClassificationCounts(green=80, yellow=20), VERDICT_MODERATE),
        (ClassificationCounts(green=60, other=40), VERDICT_MODERATE),
        (ClassificationCounts(green=35, brown=65), VERDICT_MODERATE),
        (ClassificationCounts(green=34, yellow=66), VERDICT_UNHEALTHY),
        (ClassificationCounts(other=100), VERDICT_UNHEALTHY),
    ],
)
def test_verdict_thresholds(counts: ClassificationCounts, verdict: str) -> None:
    percents = ClassificationService.percentages(counts)
    assert ClassificationService.verdict(counts, percents) == verdict
