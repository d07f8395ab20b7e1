from __future__ import annotations

import numpy as np
import pytest

from leafhealth.models.image import Image
from leafhealth.services.border_statistics_service import BorderStatisticsService
from leafhealth.services.color_space_service import ColorSpaceService

from conftest import FOREST_GREEN, WHITE, framed, solid


def test_uniform_border_has_zero_spread() -> None:
    img = Image(pixels=framed(30, 40, FOREST_GREEN, frame=WHITE))
    profile = BorderStatisticsService().profile(img, step=6)

    white_lab = ColorSpaceService.rgb_to_lab(*WHITE)
    assert profile.mean_lab.as_tuple() == pytest.approx(white_lab.as_tuple(), abs=1e-6)
    assert profile.mean_distance == pytest.approx(0.0, abs=1e-6)
    assert profile.std_distance == pytest.approx(0.0, abs=1e-6)


def test_sample_count_follows_stride() -> None:
    pixels = solid(10, 20, WHITE)
    samples = BorderStatisticsService.sample_border(pixels, step=6)
    # 4 columns on each of 2 rows + 2 rows on each of 2 columns
    assert samples.shape == (12, 3)


def test_stride_larger_than_image_still_samples_every_side() -> None:
    pixels = solid(3, 3, WHITE)
    pixels[0, 0, :3] = (10, 20, 30)
    samples = BorderStatisticsService.sample_border(pixels, step=50)

    assert samples.shape == (4, 3)
    assert (samples == np.array([10, 20, 30])).all(axis=1).sum() == 2


def test_mixed_border_has_positive_spread() -> None:
    pixels = solid(20, 20, WHITE)
    pixels[0, :, :3] = (200, 30, 30)
    profile = BorderStatisticsService().profile(Image(pixels=pixels), step=1)

    assert profile.sample_count == 80
    assert profile.mean_distance > 0
    assert profile.std_distance > 0
