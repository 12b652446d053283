"""
Long image splitter.

Decodes an image to RGBA, plans blank-line cuts and extracts each
segment as its own image.
"""

import io
import logging
from pathlib import Path
from typing import Optional, Union
import numpy as np
import cv2
from PIL import Image

from .base import (
    CUT_BLANK,
    CUT_FALLBACK,
    ImageChunk,
    InvalidImage,
    SplitConfig,
    SplitPlan,
    SplitResult,
)
from .sampler import PixelSampler
from .segmenter import BlankLineSegmenter


logger = logging.getLogger(__name__)

ImageSource = Union[np.ndarray, Image.Image, Path, str, bytes]


def to_rgba(image: np.ndarray) -> np.ndarray:
    """
    Normalize a grayscale, RGB or RGBA array to RGBA.

    Args:
        image: uint8 array of shape (H, W), (H, W, 1), (H, W, 3) or (H, W, 4).

    Returns:
        Contiguous uint8 array of shape (H, W, 4). Missing alpha is opaque.

    Raises:
        InvalidImage: If the array shape or dtype is not supported.
    """
    if image.dtype != np.uint8:
        raise InvalidImage(f"Expected uint8 pixels, got {image.dtype}")

    if image.ndim not in (2, 3) or image.shape[0] == 0 or image.shape[1] == 0:
        raise InvalidImage(f"Unsupported image shape: {image.shape}")

    if image.ndim == 3 and image.shape[2] == 1:
        image = image[:, :, 0]

    if image.ndim == 2:
        return cv2.cvtColor(np.ascontiguousarray(image), cv2.COLOR_GRAY2RGBA)

    channels = image.shape[2]
    if channels == 3:
        return cv2.cvtColor(np.ascontiguousarray(image), cv2.COLOR_RGB2RGBA)
    if channels == 4:
        return np.ascontiguousarray(image)

    raise InvalidImage(f"Unsupported number of channels: {channels}")


def load_rgba(image: ImageSource) -> np.ndarray:
    """
    Decode an image into an RGBA array.

    Args:
        image: Numpy array, PIL Image, path, or encoded image bytes.

    Returns:
        uint8 array of shape (height, width, 4).

    Raises:
        InvalidImage: If the image cannot be decoded.
        FileNotFoundError: If a path does not exist.
    """
    if isinstance(image, np.ndarray):
        return to_rgba(image)

    if isinstance(image, Image.Image):
        return np.array(image.convert("RGBA"))

    if isinstance(image, (bytes, bytearray)):
        source = io.BytesIO(image)
    elif isinstance(image, (str, Path)):
        source = Path(image)
    else:
        raise TypeError(f"Unsupported image type: {type(image)}")

    try:
        with Image.open(source) as img:
            img.load()
            return np.array(img.convert("RGBA"))
    except FileNotFoundError:
        raise
    except Image.DecompressionBombError as e:
        raise InvalidImage(
            f"Image exceeds the pixel limit ({Image.MAX_IMAGE_PIXELS} pixels): {e}"
        ) from e
    except OSError as e:
        raise InvalidImage(f"Failed to decode image: {e}") from e


class BlankLineSplitter:
    """
    Splits tall images into segments at blank rows.

    Segment heights never exceed ``desired_height``. Each cut is placed at
    the lowest blank row in the window; when the window has none, the cut
    goes straight through at the window end.
    """

    def __init__(self, config: Optional[SplitConfig] = None):
        """
        Initialize the splitter.

        Args:
            config: Split parameters.

        Raises:
            InvalidParameter: If the configuration is out of range.
        """
        self.config = config or SplitConfig()
        self.segmenter = BlankLineSegmenter(self.config)

    @property
    def name(self) -> str:
        return "blank_line"

    def plan(self, image: ImageSource) -> SplitPlan:
        """
        Compute cut boundaries without extracting pixels.

        Args:
            image: Image to plan, in any supported form.

        Returns:
            SplitPlan with segments and cut kinds.
        """
        sampler = PixelSampler(load_rgba(image))
        return self._plan(sampler)

    def split(self, image: ImageSource) -> SplitResult:
        """
        Split an image into segment chunks.

        Args:
            image: Image to split, in any supported form.

        Returns:
            SplitResult with one chunk per segment.
        """
        rgba = load_rgba(image)
        sampler = PixelSampler(rgba)
        plan = self._plan(sampler)
        chunks = self._create_chunks(rgba, plan)

        return SplitResult(
            chunks=chunks,
            plan=plan,
            metadata={
                "split_method": self.name,
                "blank_cuts": plan.cut_kinds.count(CUT_BLANK),
                "fallback_cuts": plan.fallback_cuts,
            },
        )

    def analyze(self, image: ImageSource) -> dict:
        """
        Analyze an image and return splitting statistics.

        Args:
            image: Image to analyze.

        Returns:
            Dictionary with size, blank row counts and the planned cuts.
        """
        sampler = PixelSampler(load_rgba(image))
        blank = sampler.blank_mask(self.config.tolerance)
        plan = self._plan(sampler)

        return {
            "width": sampler.width,
            "height": sampler.height,
            "needs_splitting": sampler.height > self.config.desired_height,
            "blank_rows": int(blank.sum()),
            "blank_ratio": float(blank.mean()),
            "desired_height": self.config.desired_height,
            "tolerance": self.config.tolerance,
            "blank_run_length": self.config.blank_run_length,
            "segments": [s.as_tuple() for s in plan.segments],
            "fallback_cuts": plan.fallback_cuts,
        }

    def _plan(self, sampler: PixelSampler) -> SplitPlan:
        logger.info(f"Image size: {sampler.width}x{sampler.height}")

        segments, cut_kinds = self.segmenter.plan(sampler)

        fallback_cuts = cut_kinds.count(CUT_FALLBACK)
        if fallback_cuts:
            logger.info(f"{fallback_cuts} cut(s) forced through content, no blank row in window")

        return SplitPlan(
            segments=segments,
            width=sampler.width,
            height=sampler.height,
            config=self.config,
            cut_kinds=cut_kinds,
        )

    def _create_chunks(self, rgba: np.ndarray, plan: SplitPlan) -> list[ImageChunk]:
        """
        Create image chunks from planned segments.

        Args:
            rgba: Source RGBA image.
            plan: Planned segments.

        Returns:
            List of ImageChunk objects in segment order.
        """
        chunks = []

        for segment in plan.segments:
            chunk = ImageChunk(
                image=rgba[segment.start_row:segment.end_row].copy(),
                index=segment.index,
                y_offset=segment.start_row,
                width=plan.width,
                height=segment.height,
            )
            chunks.append(chunk)

        return chunks


def create_splitter(
    desired_height: int = 2000,
    tolerance: int = 80,
    blank_run_length: int = 1,
) -> BlankLineSplitter:
    """
    Factory function to create a configured BlankLineSplitter.

    Args:
        desired_height: Maximum segment height in pixels.
        tolerance: Blank row luminance threshold (0-255).
        blank_run_length: Consecutive blank rows required at a cut.

    Returns:
        Configured BlankLineSplitter.
    """
    config = SplitConfig(
        desired_height=desired_height,
        tolerance=tolerance,
        blank_run_length=blank_run_length,
    )
    return BlankLineSplitter(config)


def split_image(
    image: ImageSource,
    segment_height: int = 2000,
    tolerance: int = 80,
    blank_run_length: int = 1,
) -> list[bytes]:
    """
    Split an image and return each segment encoded as PNG.

    Args:
        image: Image path, bytes, PIL Image or numpy array.
        segment_height: Maximum segment height in pixels.
        tolerance: Blank row luminance threshold (0-255).
        blank_run_length: Consecutive blank rows required at a cut.

    Returns:
        PNG bytes of each segment, top to bottom.
    """
    splitter = create_splitter(segment_height, tolerance, blank_run_length)
    result = splitter.split(image)
    return [chunk.to_bytes("png") for chunk in result.chunks]
