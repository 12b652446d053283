"""
Row blankness sampling.

A row's blankness is the mean perceptual luminance of its pixels
(Rec. 709 weights, alpha ignored). Luminance is accumulated with integer
weights so comparisons against an integer tolerance are exact.
"""

from typing import Union
import numpy as np

from .base import InvalidImage


# Rec. 709 luma weights scaled to integers (0.2126, 0.7152, 0.0722)
LUMA_WEIGHTS = np.array([2126, 7152, 722], dtype=np.int64)
LUMA_SCALE = 10_000

# Rows per block when computing a full profile
PROFILE_BLOCK_ROWS = 512

PixelBuffer = Union[bytes, bytearray, memoryview, np.ndarray]


class PixelSampler:
    """
    Computes per-row blankness over an RGBA pixel buffer.

    The buffer is never modified. Row luminance sums are memoized, so a
    sampler should be owned by a single segmentation call.
    """

    def __init__(self, pixels: np.ndarray):
        """
        Initialize the sampler.

        Args:
            pixels: RGBA image as uint8 array of shape (height, width, 4).

        Raises:
            InvalidImage: If the array is not a non-empty RGBA uint8 image.
        """
        if not isinstance(pixels, np.ndarray):
            raise InvalidImage(f"Expected numpy array, got {type(pixels).__name__}")

        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise InvalidImage(
                f"Expected RGBA array of shape (height, width, 4), got {pixels.shape}"
            )

        if pixels.dtype != np.uint8:
            raise InvalidImage(f"Expected uint8 pixels, got {pixels.dtype}")

        height, width = pixels.shape[:2]
        if width <= 0 or height <= 0:
            raise InvalidImage(f"Image dimensions must be positive, got {width}x{height}")

        self._pixels = pixels
        self.width = width
        self.height = height
        self._row_sums: dict[int, int] = {}

    @classmethod
    def from_buffer(cls, pixels: PixelBuffer, width: int, height: int) -> "PixelSampler":
        """
        Create a sampler over a flat row-major RGBA buffer.

        Args:
            pixels: Raw bytes, 4 per pixel (red, green, blue, alpha).
            width: Image width in pixels.
            height: Image height in pixels.

        Returns:
            Sampler viewing the buffer without copying it.

        Raises:
            InvalidImage: If dimensions are non-positive or the buffer size
                does not equal width * height * 4.
        """
        for name, value in (("width", width), ("height", height)):
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value <= 0:
                raise InvalidImage(f"{name} must be a positive integer, got {value!r}")

        if isinstance(pixels, np.ndarray):
            flat = pixels.reshape(-1)
            if flat.dtype != np.uint8:
                raise InvalidImage(f"Expected uint8 pixels, got {flat.dtype}")
        else:
            flat = np.frombuffer(pixels, dtype=np.uint8)

        expected = width * height * 4
        if flat.size != expected:
            raise InvalidImage(
                f"Pixel buffer has {flat.size} bytes, expected {expected} "
                f"for {width}x{height} RGBA"
            )

        return cls(flat.reshape(height, width, 4))

    @property
    def pixels(self) -> np.ndarray:
        """The underlying RGBA array."""
        return self._pixels

    def _weighted_row_sum(self, y: int) -> int:
        """Sum of integer-weighted luminance over row ``y``."""
        if not 0 <= y < self.height:
            raise IndexError(f"Row {y} out of range [0, {self.height})")

        total = self._row_sums.get(y)
        if total is None:
            rgb = self._pixels[y, :, :3].astype(np.int64)
            total = int((rgb @ LUMA_WEIGHTS).sum())
            self._row_sums[y] = total
        return total

    def row_blankness(self, y: int) -> float:
        """
        Mean luminance of row ``y``.

        Args:
            y: Row index in [0, height).

        Returns:
            Mean luminance in [0, 255].

        Raises:
            IndexError: If ``y`` is outside the image.
        """
        return self._weighted_row_sum(y) / (LUMA_SCALE * self.width)

    def is_blank(self, y: int, tolerance: int) -> bool:
        """Whether row ``y`` is strictly brighter than ``tolerance``."""
        return self._weighted_row_sum(y) > int(tolerance) * LUMA_SCALE * self.width

    def is_blank_run(self, y_end: int, tolerance: int, run_length: int = 1) -> bool:
        """
        Whether rows ``[y_end - run_length + 1, y_end]`` are all blank.

        A run that would start above the first row, or that ends outside the
        image, is never blank.
        """
        y_start = y_end - run_length + 1
        if y_start < 0 or y_end >= self.height:
            return False

        for y in range(y_end, y_start - 1, -1):
            if not self.is_blank(y, tolerance):
                return False
        return True

    def _weighted_profile_sums(self) -> np.ndarray:
        sums = np.empty(self.height, dtype=np.int64)

        # Convert in blocks to bound the int64 working copy
        for start in range(0, self.height, PROFILE_BLOCK_ROWS):
            stop = min(start + PROFILE_BLOCK_ROWS, self.height)
            rgb = self._pixels[start:stop, :, :3].astype(np.int64)
            sums[start:stop] = (rgb @ LUMA_WEIGHTS).sum(axis=1)

        return sums

    def blankness_profile(self) -> np.ndarray:
        """
        Mean luminance of every row.

        Returns:
            1D float array of length ``height``.
        """
        return self._weighted_profile_sums() / (LUMA_SCALE * self.width)

    def blank_mask(self, tolerance: int) -> np.ndarray:
        """Boolean array marking rows brighter than ``tolerance``."""
        return self._weighted_profile_sums() > int(tolerance) * LUMA_SCALE * self.width
