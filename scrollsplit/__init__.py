"""
scrollsplit - split long images into shorter ones at blank rows.
"""

from scrollsplit.splitting import (
    BlankLineSplitter,
    InvalidImage,
    InvalidParameter,
    Segment,
    SplitConfig,
    SplitError,
    create_splitter,
    segment,
    segment_pixels,
    split_image,
)

__version__ = "1.0.0"

__all__ = [
    "BlankLineSplitter",
    "InvalidImage",
    "InvalidParameter",
    "Segment",
    "SplitConfig",
    "SplitError",
    "create_splitter",
    "segment",
    "segment_pixels",
    "split_image",
]
