from __future__ import annotations
from dataclasses import dataclass
import numpy as np

from .image import Image
from .color import BorderProfile


@dataclass
class SegmentationResult:
    """
    Output of local segmentation.

    image   : new Image, same size as the input, alpha replaced by `alpha`
    alpha   : (H, W) uint8 feathered opacity
    labels  : (H, W) int32 component ids, None when no component was found
    degraded: True when the largest component was too small to trust and a
              conservative fallback mask was used instead
    """
    image: Image
    alpha: np.ndarray
    labels: np.ndarray | None
    largest_label: int
    largest_size: int
    threshold: float
    profile: BorderProfile
    degraded: bool = False
