from __future__ import annotations
import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Sequence

from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

from ..exceptions import LeafHealthError
from ..models.segmentation_config import SegmentationConfig
from ..pipeline.leaf_analyzer import analyze_leaf
from ..services.image_service import ImageService

logger = logging.getLogger(__name__)


def positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Segment a leaf photo and report its pigment-based health verdict."
    )
    parser.add_argument("image", help="Path to the leaf photo.")
    parser.add_argument("--cutout", default=None, help="Write the segmented RGBA image to this PNG path.")
    parser.add_argument("--remote", action="store_true",
                        help="Try the remote background remover first (falls back to local).")
    parser.add_argument("--max-dim", type=positive_int, default=None,
                        help="Downscale so the longest side is at most this many pixels.")
    parser.add_argument("--tolerance-multiplier", type=float, default=None)
    parser.add_argument("--min-threshold", type=float, default=None)
    parser.add_argument("--max-threshold", type=float, default=None)
    parser.add_argument("--sample-stride", type=int, default=None)
    parser.add_argument("--morph-iterations", type=int, default=None)
    parser.add_argument("--min-component-pixels", type=int, default=None)
    parser.add_argument("--verbose", action="store_true", help="Log at DEBUG level.")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    # --- Centralized Logging Configuration ---
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else os.getenv("LOG_LEVEL", "INFO"),
        format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
        datefmt='%H:%M:%S',
        stream=sys.stderr,
    )

    image_service = ImageService()
    path = Path(args.image).expanduser()
    try:
        config = SegmentationConfig.from_mapping({
            "tolerance_multiplier": args.tolerance_multiplier,
            "min_threshold": args.min_threshold,
            "max_threshold": args.max_threshold,
            "sample_stride": args.sample_stride,
            "morph_iterations": args.morph_iterations,
            "min_component_pixels": args.min_component_pixels,
        })
        img = image_service.fit_to_max_dim(image_service.load(path), args.max_dim)
        image_bytes = path.read_bytes() if args.remote else None
        analysis = analyze_leaf(img, config=config, image_bytes=image_bytes,
                                use_remote=args.remote, image_service=image_service)
        if args.cutout:
            analysis.image.path = Path(args.cutout).expanduser()
            image_service.save(analysis.image)
            logger.info("Cutout written to %s", analysis.image.path)
    except (OSError, LeafHealthError, ValueError) as err:
        logger.error("Could not analyze %s: %s", path, err)
        return 1

    print(json.dumps(analysis.to_dict(), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
