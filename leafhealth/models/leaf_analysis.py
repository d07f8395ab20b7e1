from __future__ import annotations
from dataclasses import dataclass

from .image import Image
from .analysis_result import AnalysisResult
from .segmentation_result import SegmentationResult


@dataclass
class LeafAnalysis:
    """
    Data object returned by the pipeline driver: the segmented image, its
    classification, and where the segmentation came from.
    """
    image: Image
    result: AnalysisResult
    source: str                                  # "local" or "remote"
    segmentation: SegmentationResult | None = None  # None on the remote path
    degraded: bool = False

    def to_dict(self) -> dict:
        return {
            **self.result.to_dict(),
            "source": self.source,
            "degraded": self.degraded,
        }
