# pipeline/leaf_analyzer.py
from __future__ import annotations
import logging

from ..models.image import Image
from ..models.leaf_analysis import LeafAnalysis
from ..models.segmentation_config import SegmentationConfig
from ..exceptions import NetworkError, UpstreamFormatError
from ..services.image_service import ImageService
from ..services.segmentation_service import SegmentationService
from ..services.classification_service import ClassificationService
from ..services.remote_background_service import RemoteBackgroundService

logger = logging.getLogger(__name__)


def analyze_leaf(
    img: Image,
    *,
    config: SegmentationConfig | None = None,
    image_bytes: bytes | None = None,
    use_remote: bool = False,
    image_service: ImageService = ImageService(),
    segmentation_service: SegmentationService = SegmentationService(),
    classification_service: ClassificationService = ClassificationService(),
    remote_service: RemoteBackgroundService | None = None,
) -> LeafAnalysis:
    """
    Segment one leaf photo and classify its pigments.

        • validate the buffer (the only fatal check)
        • remote cutout first when asked and encoded bytes are available,
          local segmentation when it fails or was not requested
        • classify whichever buffer came out

    Returns a LeafAnalysis; a weak segmentation shows up as `degraded`
    and too few leaf pixels as the "No leaf detected" verdict.
    """
    image_service.validate(img)
    image_service.preserve_original_state(img)

    if use_remote and image_bytes:
        remote_service = remote_service or RemoteBackgroundService()
        try:
            cutout = remote_service.remove_background(image_bytes)
            cutout.original_pixels = img.original_pixels
            result = classification_service.classify(cutout)
            return LeafAnalysis(image=cutout, result=result, source="remote")
        except (NetworkError, UpstreamFormatError) as err:
            logger.warning("Remote background removal failed, using local segmentation: %s", err)
    elif use_remote:
        logger.warning("Remote background removal requested without encoded bytes; using local segmentation")

    segmentation = segmentation_service.segment(img, config)
    result = classification_service.classify(segmentation.image)
    return LeafAnalysis(
        image=segmentation.image,
        result=result,
        source="local",
        segmentation=segmentation,
        degraded=segmentation.degraded,
    )
