import struct
import zlib
from pathlib import Path

import numpy as np
import pytest
from PIL import Image


def gray_rows(levels, width: int = 10) -> np.ndarray:
    """
    Build an RGBA image where every pixel of row ``y`` has gray value ``levels[y]``.

    Gray pixels have luminance equal to their gray value.
    """
    levels = np.asarray(levels, dtype=np.uint8)
    image = np.empty((len(levels), width, 4), dtype=np.uint8)
    image[:, :, :3] = levels[:, None, None]
    image[:, :, 3] = 255
    return image


def banded(height: int, content_rows, width: int = 10, blank: int = 255, content: int = 0) -> np.ndarray:
    """Blank image with the given rows filled with content."""
    levels = np.full(height, blank, dtype=np.uint8)
    levels[list(content_rows)] = content
    return gray_rows(levels, width)


def declared_png(width: int, height: int) -> bytes:
    """
    A tiny PNG whose header declares ``width`` x ``height`` 1-bit pixels.

    Pillow reads the size from the header, so this trips the pixel limit
    without allocating the image.
    """
    def chunk(tag: bytes, data: bytes) -> bytes:
        return struct.pack(">I", len(data)) + tag + data + struct.pack(">I", zlib.crc32(tag + data))

    header = struct.pack(">IIBBBBB", width, height, 1, 0, 0, 0, 0)
    return (
        b"\x89PNG\r\n\x1a\n"
        + chunk(b"IHDR", header)
        + chunk(b"IDAT", zlib.compress(b""))
        + chunk(b"IEND", b"")
    )


@pytest.fixture
def long_screenshot() -> np.ndarray:
    """300 rows: text bands separated by white gaps, 24 px wide."""
    content = list(range(10, 40)) + list(range(55, 140)) + list(range(150, 260)) + list(range(270, 295))
    return banded(300, content, width=24)


@pytest.fixture
def screenshot_file(tmp_path: Path, long_screenshot: np.ndarray) -> Path:
    path = tmp_path / "screenshot.png"
    Image.fromarray(long_screenshot).save(path)
    return path
