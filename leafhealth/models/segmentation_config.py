from __future__ import annotations
from dataclasses import dataclass, fields, replace
from typing import Any, Mapping
import os

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


@dataclass(frozen=True)
class SegmentationConfig:
    """
    Value-object holding the local segmentation knobs.

    Every field is optional; defaults are the tuned values and can be
    overridden per deployment through the SEG_* environment variables.
    """
    tolerance_multiplier: float = 1.1   # scales the std-dev part of the threshold
    min_threshold: float = 8.0          # deltaE clamp floor
    max_threshold: float = 60.0         # deltaE clamp ceiling
    sample_stride: int = 6              # border sampling step in pixels
    morph_iterations: int = 2           # erosion rounds == dilation rounds
    min_component_pixels: int = 25      # smallest component trusted as "the leaf"

    def __post_init__(self):
        if self.tolerance_multiplier < 0:
            raise ValueError(f"tolerance_multiplier must be >= 0, got {self.tolerance_multiplier}")
        if self.min_threshold < 0:
            raise ValueError(f"min_threshold must be >= 0, got {self.min_threshold}")
        if self.max_threshold < self.min_threshold:
            raise ValueError(
                f"max_threshold ({self.max_threshold}) must be >= min_threshold ({self.min_threshold})"
            )
        if self.sample_stride < 1:
            raise ValueError(f"sample_stride must be >= 1, got {self.sample_stride}")
        if self.morph_iterations < 0:
            raise ValueError(f"morph_iterations must be >= 0, got {self.morph_iterations}")
        if self.min_component_pixels < 0:
            raise ValueError(f"min_component_pixels must be >= 0, got {self.min_component_pixels}")

    @classmethod
    def from_env(cls) -> "SegmentationConfig":
        """Build a config from SEG_* environment variables (falling back to defaults)."""
        return cls(
            tolerance_multiplier=float(os.getenv("SEG_TOLERANCE_MULTIPLIER", "1.1")),
            min_threshold=float(os.getenv("SEG_MIN_THRESHOLD", "8")),
            max_threshold=float(os.getenv("SEG_MAX_THRESHOLD", "60")),
            sample_stride=int(os.getenv("SEG_SAMPLE_STRIDE", "6")),
            morph_iterations=int(os.getenv("SEG_MORPH_ITERATIONS", "2")),
            min_component_pixels=int(os.getenv("SEG_MIN_COMPONENT_PIXELS", "25")),
        )

    def with_overrides(self, overrides: Mapping[str, Any]) -> "SegmentationConfig":
        """
        Return a copy with the given fields replaced.

        Unknown keys and empty values are ignored, so raw request form data
        can be passed straight through. Values are coerced to the field type;
        bad values raise ValueError.
        """
        types = {f.name: f.type for f in fields(self)}
        changes: dict[str, Any] = {}
        for name, value in overrides.items():
            if name not in types or value is None or value == "":
                continue
            cast = int if types[name] in (int, "int") else float
            try:
                changes[name] = cast(value)
            except (TypeError, ValueError):
                raise ValueError(f"Invalid value for {name}: {value!r}") from None
        return replace(self, **changes)

    @classmethod
    def from_mapping(cls, overrides: Mapping[str, Any]) -> "SegmentationConfig":
        return cls.from_env().with_overrides(overrides)
