"""
Base classes for blank-line image splitting.
"""

import io
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import numpy as np
from PIL import Image


# Cut kinds recorded for each segment end
CUT_BLANK = "blank"
CUT_FALLBACK = "fallback"
CUT_END = "end"

# Pillow format names for supported output formats
IMAGE_FORMATS = {
    "png": "PNG",
    "jpeg": "JPEG",
    "webp": "WEBP",
}


class SplitError(Exception):
    """Base class for splitting failures."""

    pass


class InvalidImage(SplitError):
    """Raised when the pixel data or its dimensions are malformed."""

    pass


class InvalidParameter(SplitError):
    """Raised when a segmentation parameter is out of range."""

    pass


def _is_int(value) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, bool)


@dataclass(frozen=True)
class Segment:
    """A contiguous row range ``[start_row, end_row)`` of the source image."""

    index: int
    """Sequential index of this segment (top to bottom)."""

    start_row: int
    """First row of the segment (inclusive)."""

    end_row: int
    """Row after the last row of the segment (exclusive)."""

    @property
    def height(self) -> int:
        """Number of rows in the segment."""
        return self.end_row - self.start_row

    def as_tuple(self) -> tuple[int, int]:
        """Return the ``(start_row, end_row)`` pair."""
        return (self.start_row, self.end_row)


@dataclass
class SplitConfig:
    """Configuration for blank-line splitting."""

    desired_height: int = 2000
    """Preferred maximum height of each segment in pixels."""

    tolerance: int = 80
    """Mean luminance a row must exceed to count as blank (0-255)."""

    blank_run_length: int = 1
    """Number of consecutive blank rows required at a cut."""

    def validate(self) -> None:
        """
        Check that all parameters are in range.

        Raises:
            InvalidParameter: If any parameter is invalid.
        """
        if not _is_int(self.desired_height) or self.desired_height <= 0:
            raise InvalidParameter(
                f"desired_height must be a positive integer, got {self.desired_height!r}"
            )

        if not _is_int(self.tolerance) or not 0 <= self.tolerance <= 255:
            raise InvalidParameter(
                f"tolerance must be an integer in [0, 255], got {self.tolerance!r}"
            )

        if not _is_int(self.blank_run_length) or self.blank_run_length < 1:
            raise InvalidParameter(
                f"blank_run_length must be an integer >= 1, got {self.blank_run_length!r}"
            )


@dataclass
class SplitPlan:
    """Cut boundaries computed for an image, before any pixels are extracted."""

    segments: list[Segment]
    """Segments in top-to-bottom order."""

    width: int
    """Source image width."""

    height: int
    """Source image height."""

    config: SplitConfig
    """Configuration the plan was computed with."""

    cut_kinds: list[str] = field(default_factory=list)
    """How each segment's end was chosen ('blank', 'fallback' or 'end')."""

    @property
    def num_segments(self) -> int:
        """Total number of segments."""
        return len(self.segments)

    @property
    def boundaries(self) -> list[int]:
        """Strictly increasing boundary rows, from 0 to the image height."""
        if not self.segments:
            return []
        return [0] + [segment.end_row for segment in self.segments]

    @property
    def fallback_cuts(self) -> int:
        """Number of cuts forced through content because no blank row was found."""
        return self.cut_kinds.count(CUT_FALLBACK)


@dataclass
class ImageChunk:
    """Pixels of a single segment."""

    image: np.ndarray
    """RGBA pixel rows of the segment, shape (height, width, 4)."""

    index: int
    """Sequential index of this chunk."""

    y_offset: int
    """Y offset from original image origin."""

    width: int
    """Width of the chunk."""

    height: int
    """Height of the chunk."""

    @property
    def bounds(self) -> tuple[int, int, int, int]:
        """Return (x, y, width, height) bounds in original image."""
        return (0, self.y_offset, self.width, self.height)

    def to_pil(self) -> Image.Image:
        """Convert chunk to PIL Image."""
        return Image.fromarray(self.image)

    def to_bytes(self, image_format: str = "png") -> bytes:
        """Encode chunk in the given format."""
        buffer = io.BytesIO()
        self._encode(buffer, image_format)
        return buffer.getvalue()

    def save(self, path: Path, image_format: Optional[str] = None) -> Path:
        """Save chunk to file."""
        image_format = image_format or Path(path).suffix.lstrip(".").lower() or "png"
        if image_format == "jpg":
            image_format = "jpeg"
        self._encode(path, image_format)
        return path

    def _encode(self, target, image_format: str) -> None:
        pil_format = IMAGE_FORMATS.get(image_format)
        if pil_format is None:
            raise ValueError(
                f"Unsupported image format: {image_format}. "
                f"Available: {list(IMAGE_FORMATS)}"
            )

        img = self.to_pil()
        # JPEG has no alpha channel
        if pil_format == "JPEG":
            img = img.convert("RGB")
        img.save(target, format=pil_format)


@dataclass
class SplitResult:
    """Result of splitting an image."""

    chunks: list[ImageChunk]
    """List of image chunks."""

    plan: SplitPlan
    """Boundaries the chunks were extracted from."""

    metadata: dict = field(default_factory=dict)
    """Additional metadata about the split."""

    @property
    def num_chunks(self) -> int:
        """Total number of chunks."""
        return len(self.chunks)

    @property
    def was_split(self) -> bool:
        """Whether the image was actually split."""
        return len(self.chunks) > 1

    @property
    def segments(self) -> list[Segment]:
        """Segments the chunks correspond to."""
        return self.plan.segments

    @property
    def original_size(self) -> tuple[int, int]:
        """Original image size (width, height)."""
        return (self.plan.width, self.plan.height)
