"""
Blank-line image splitting.

Cuts tall images into shorter segments at uniformly light rows, so that
no cut goes through content when a blank row is available nearby.
"""

from .base import (
    ImageChunk,
    InvalidImage,
    InvalidParameter,
    Segment,
    SplitConfig,
    SplitError,
    SplitPlan,
    SplitResult,
)
from .sampler import PixelSampler
from .segmenter import BlankLineSegmenter, segment, segment_pixels
from .splitter import (
    BlankLineSplitter,
    create_splitter,
    load_rgba,
    split_image,
    to_rgba,
)

__all__ = [
    "ImageChunk",
    "InvalidImage",
    "InvalidParameter",
    "Segment",
    "SplitConfig",
    "SplitError",
    "SplitPlan",
    "SplitResult",
    "PixelSampler",
    "BlankLineSegmenter",
    "segment",
    "segment_pixels",
    "BlankLineSplitter",
    "create_splitter",
    "load_rgba",
    "split_image",
    "to_rgba",
]
