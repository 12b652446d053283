"""
Blank-line segmenter.

Walks an image top to bottom and picks cut rows so that each segment is at
most ``desired_height`` rows tall and, where possible, ends just above a run
of blank rows.
"""

import logging
from typing import Optional, Union
import numpy as np

from .base import (
    CUT_BLANK,
    CUT_END,
    CUT_FALLBACK,
    Segment,
    SplitConfig,
)
from .sampler import PixelBuffer, PixelSampler


logger = logging.getLogger(__name__)


class BlankLineSegmenter:
    """
    Greedy single-pass segmenter.

    For each window ``[start, start + desired_height]`` the candidate cut
    rows are scanned from the bottom of the window upwards, and the first
    row that ends a blank run of ``blank_run_length`` rows is used. If the
    window has no such row the cut is forced at the window end.
    """

    def __init__(self, config: Optional[SplitConfig] = None):
        """
        Initialize the segmenter.

        Args:
            config: Split parameters. Validated on construction.

        Raises:
            InvalidParameter: If the configuration is out of range.
        """
        self.config = config or SplitConfig()
        self.config.validate()

    def find_cut(self, sampler: PixelSampler, start_y: int) -> tuple[int, str]:
        """
        Find the end row of the segment starting at ``start_y``.

        Args:
            sampler: Sampler over the image.
            start_y: First row of the segment.

        Returns:
            Tuple of (end_row, cut_kind).
        """
        desired_height = int(self.config.desired_height)
        tolerance = int(self.config.tolerance)
        run_length = int(self.config.blank_run_length)

        window_end = min(start_y + desired_height, sampler.height)

        # The bottom edge is always a boundary
        if window_end == sampler.height:
            return window_end, CUT_END

        for y in range(window_end, start_y, -1):
            if sampler.is_blank_run(y, tolerance, run_length):
                return y, CUT_BLANK

        return window_end, CUT_FALLBACK

    def plan(self, sampler: PixelSampler) -> tuple[list[Segment], list[str]]:
        """
        Compute all segments of the image.

        Args:
            sampler: Sampler over the image.

        Returns:
            Tuple of (segments, cut kinds), both in top-to-bottom order.
        """
        segments: list[Segment] = []
        cut_kinds: list[str] = []
        start_y = 0

        while start_y < sampler.height:
            end_y, cut_kind = self.find_cut(sampler, start_y)
            segment_height = end_y - start_y

            if segment_height <= 0:
                logger.warning(f"Empty segment at row {start_y}, stopping")
                break

            logger.debug(f"Segment: {start_y} - {end_y} ({segment_height}, {cut_kind})")

            segments.append(Segment(index=len(segments), start_row=start_y, end_row=end_y))
            cut_kinds.append(cut_kind)
            start_y = end_y

        return segments, cut_kinds


def segment(
    image: Union[np.ndarray, PixelSampler],
    desired_height: int,
    tolerance: int,
    blank_run_length: int = 1,
) -> list[Segment]:
    """
    Divide an RGBA image into row segments cut at blank rows.

    Args:
        image: RGBA uint8 array of shape (height, width, 4), or a sampler.
        desired_height: Maximum segment height in rows.
        tolerance: Rows with mean luminance above this are blank (0-255).
        blank_run_length: Consecutive blank rows required at a cut.

    Returns:
        Segments covering every row exactly once, top to bottom.

    Raises:
        InvalidImage: If the image is malformed.
        InvalidParameter: If a parameter is out of range.
    """
    sampler = image if isinstance(image, PixelSampler) else PixelSampler(image)
    segmenter = BlankLineSegmenter(
        SplitConfig(
            desired_height=desired_height,
            tolerance=tolerance,
            blank_run_length=blank_run_length,
        )
    )
    segments, _ = segmenter.plan(sampler)
    return segments


def segment_pixels(
    pixels: PixelBuffer,
    width: int,
    height: int,
    desired_segment_height: int,
    tolerance: int,
    blank_run_length: int = 1,
) -> list[Segment]:
    """
    Divide a flat row-major RGBA buffer into row segments.

    Args:
        pixels: Raw bytes, 4 per pixel (red, green, blue, alpha).
        width: Image width in pixels.
        height: Image height in pixels.
        desired_segment_height: Maximum segment height in rows.
        tolerance: Rows with mean luminance above this are blank (0-255).
        blank_run_length: Consecutive blank rows required at a cut.

    Returns:
        Segments covering ``[0, height)`` exactly once, top to bottom.

    Raises:
        InvalidImage: If the buffer does not match the dimensions.
        InvalidParameter: If a parameter is out of range.
    """
    sampler = PixelSampler.from_buffer(pixels, width, height)
    return segment(sampler, desired_segment_height, tolerance, blank_run_length)
