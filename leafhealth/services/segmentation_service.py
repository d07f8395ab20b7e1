from __future__ import annotations
import logging
import numpy as np

from ..models.image import Image
from ..models.segmentation_config import SegmentationConfig
from ..models.segmentation_result import SegmentationResult
from ..repositories.segmentation_repository import SegmentationRepository
from .border_statistics_service import BorderStatisticsService
from .color_space_service import ColorSpaceService

logger = logging.getLogger(__name__)


class SegmentationService:
    """
    Local leaf / background separation.

    *   No I/O here; works only with Image objects (RGBA numpy arrays).
    *   Never raises for a valid buffer: an unreliable mask is reported via
        SegmentationResult.degraded, not as an exception.
    """

    def __init__(self):
        self.repo = SegmentationRepository()
        self.border_service = BorderStatisticsService()
        self.color_space_service = ColorSpaceService()

    @staticmethod
    def adaptive_threshold(mean_distance: float, std_distance: float,
                           config: SegmentationConfig) -> float:
        raw = mean_distance + config.tolerance_multiplier * std_distance
        return float(min(max(raw, config.min_threshold), config.max_threshold))

    def segment(self, img: Image, config: SegmentationConfig | None = None) -> SegmentationResult:
        """
        Args:
            img (Image): RGBA image, left untouched.
            config (SegmentationConfig): tuning knobs, defaults from the env.

        Returns:
            SegmentationResult whose image is a copy of `img` with the alpha
            channel replaced by the feathered leaf mask.
        """
        config = config or SegmentationConfig.from_env()
        pixels = img.pixels
        alpha_in = pixels[..., 3]

        # 1-2. border profile -> adaptive cutoff
        profile = self.border_service.profile(img, step=config.sample_stride)
        threshold = self.adaptive_threshold(profile.mean_distance, profile.std_distance, config)

        # 3. initial mask
        hsv = self.color_space_service.image_to_hsv(pixels[..., :3])
        lab = self.color_space_service.image_to_lab(pixels[..., :3])
        distance = self.color_space_service.image_delta_e(lab, profile.mean_lab)
        mask = self.repo.threshold_mask(alpha_in, hsv, distance, threshold)

        # 4. opening
        cleaned = self.repo.open(mask, config.morph_iterations)
        cleaned_count = int(cleaned.sum())

        # 5. components
        labels, sizes, largest = self.repo.label_components(cleaned)
        largest_size = sizes[largest - 1] if largest else 0

        # 6. keep the leaf, or fall back conservatively
        degraded = largest == 0 or largest_size < config.min_component_pixels
        if not degraded:
            final = (labels == largest).astype(np.uint8)
        elif cleaned_count >= config.min_component_pixels:
            logger.warning(
                "Largest component has %d px (< %d); keeping all %d cleaned mask px",
                largest_size, config.min_component_pixels, cleaned_count,
            )
            final = cleaned
        else:
            # nothing stands out from the border (flat close-up): keep every
            # opaque pixel that could be leaf at all
            final = self.repo.plausible_leaf_mask(alpha_in, hsv)
            logger.warning(
                "Cleaned mask has %d px (< %d); falling back to %d plausible leaf px",
                cleaned_count, config.min_component_pixels, int(final.sum()),
            )

        # 7. feather
        alpha = self.repo.feather(final)
        out = pixels.copy()
        out[..., 3] = alpha

        logger.info(
            "Segmented %dx%d: threshold=%.2f (border mean dE=%.2f, std=%.2f), "
            "%d components, largest=%d px, kept=%d px, degraded=%s",
            img.width, img.height, threshold, profile.mean_distance, profile.std_distance,
            len(sizes), largest_size, int(final.sum()), degraded,
        )

        segmented = Image(pixels=out, path=img.path,
                          original_pixels=img.original_pixels if img.original_pixels is not None
                          else pixels.copy())
        return SegmentationResult(
            image=segmented,
            alpha=alpha,
            labels=labels if sizes else None,
            largest_label=largest,
            largest_size=largest_size,
            threshold=threshold,
            profile=profile,
            degraded=degraded,
        )
