from .exceptions import (
    InvalidBufferError,
    LeafHealthError,
    NetworkError,
    RemoteBackgroundError,
    UpstreamFormatError,
)
from .models.analysis_result import AnalysisResult, ClassificationCounts
from .models.image import Image
from .models.segmentation_config import SegmentationConfig
from .pipeline.leaf_analyzer import analyze_leaf

__version__ = "1.0.0"

__all__ = [
    "analyze_leaf",
    "AnalysisResult",
    "ClassificationCounts",
    "Image",
    "SegmentationConfig",
    "LeafHealthError",
    "InvalidBufferError",
    "RemoteBackgroundError",
    "NetworkError",
    "UpstreamFormatError",
]
