from __future__ import annotations

from pathlib import Path
import sys
from typing import Tuple

import numpy as np
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from leafhealth.models.image import Image

WHITE = (255, 255, 255)
FOREST_GREEN = (34, 139, 34)
LEAF_GREEN = (60, 130, 50)
YELLOW = (230, 200, 40)     # hue ~50 deg, saturated
BROWN = (80, 72, 68)        # sat ~0.15, val ~0.31


def solid(h: int, w: int, rgb: Tuple[int, int, int], alpha: int = 255) -> np.ndarray:
    pixels = np.empty((h, w, 4), dtype=np.uint8)
    pixels[..., :3] = rgb
    pixels[..., 3] = alpha
    return pixels


def framed(h: int, w: int, interior: Tuple[int, int, int],
           frame: Tuple[int, int, int] = WHITE, width: int = 1) -> np.ndarray:
    """Solid `interior` color surrounded by a `width`-pixel frame."""
    pixels = solid(h, w, frame)
    pixels[width:h - width, width:w - width, :3] = interior
    return pixels


@pytest.fixture
def framed_green() -> Image:
    """100x100 forest green leaf inside a 1 px white border."""
    return Image(pixels=framed(100, 100, FOREST_GREEN))


@pytest.fixture
def flat_green() -> Image:
    """A single flat color, border identical to interior."""
    return Image(pixels=solid(40, 40, LEAF_GREEN))


@pytest.fixture
def transparent() -> Image:
    """Every pixel fully transparent."""
    return Image(pixels=solid(30, 30, FOREST_GREEN, alpha=0))


@pytest.fixture
def yellow_brown() -> Image:
    """20x20, 1 px white frame, interior half yellow / half brown."""
    pixels = framed(20, 20, YELLOW)
    pixels[1:19, 10:19, :3] = BROWN
    return Image(pixels=pixels)
