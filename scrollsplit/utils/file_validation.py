"""
Input file validation.

Checks that a file is a real image before it is decoded:
1. Size limits
2. Magic byte detection (file signature)
3. Pillow verification
"""

import logging
from pathlib import Path
from typing import BinaryIO

from PIL import Image

logger = logging.getLogger(__name__)


# Magic byte signatures of supported image formats
MAGIC_BYTES = {
    b"\xff\xd8\xff": "jpeg",
    b"\x89PNG\r\n\x1a\n": "png",
    b"GIF87a": "gif",
    b"GIF89a": "gif",
    b"BM": "bmp",
    b"II*\x00": "tiff",  # little-endian
    b"MM\x00*": "tiff",  # big-endian
    b"RIFF": "webp",  # needs further validation
}


class ValidationError(Exception):
    """Raised when file validation fails."""

    pass


def detect_image_format(file_content: bytes) -> str | None:
    """
    Detect image format from magic bytes.

    Args:
        file_content: First few bytes of the file.

    Returns:
        Format name, or None if the signature is not recognized.
    """
    for signature, image_format in MAGIC_BYTES.items():
        if file_content.startswith(signature):
            # RIFF could be WebP or other formats
            if signature == b"RIFF":
                if len(file_content) >= 12 and file_content[8:12] == b"WEBP":
                    return image_format
                continue
            return image_format

    return None


def validate_image_with_pil(file_obj: BinaryIO) -> bool:
    """
    Validate that a file is a decodable image using Pillow.

    Args:
        file_obj: File object to validate (will be seeked to start).

    Returns:
        True if valid image, False otherwise.

    Raises:
        ValidationError: If the image is larger than Pillow's pixel limit.
    """
    try:
        file_obj.seek(0)
        with Image.open(file_obj) as img:
            img.verify()
        file_obj.seek(0)
        return True
    except Image.DecompressionBombError as e:
        raise ValidationError(
            f"Image exceeds the pixel limit ({Image.MAX_IMAGE_PIXELS} pixels): {e}"
        ) from e
    except (OSError, SyntaxError) as e:
        logger.debug(f"PIL validation failed: {e}")
        return False


def validate_image_file(file_obj: BinaryIO, max_size_mb: int = 200) -> str:
    """
    Validate an image file object.

    Args:
        file_obj: File object to validate (should be at start).
        max_size_mb: Maximum file size in MB.

    Returns:
        Detected image format.

    Raises:
        ValidationError: If the file fails any check.
    """
    # Layer 1: Size check
    file_obj.seek(0, 2)
    file_size = file_obj.tell()
    file_obj.seek(0)

    if file_size == 0:
        raise ValidationError("File is empty")

    max_size_bytes = max_size_mb * 1024 * 1024
    if file_size > max_size_bytes:
        raise ValidationError(
            f"File too large: {file_size / 1024 / 1024:.1f}MB "
            f"(max {max_size_mb}MB)"
        )

    # Layer 2: Magic bytes detection
    header = file_obj.read(32)
    file_obj.seek(0)

    image_format = detect_image_format(header)
    if image_format is None:
        raise ValidationError("Unknown or unsupported file type")

    # Layer 3: Pillow validation
    if not validate_image_with_pil(file_obj):
        raise ValidationError("File is not a valid image")

    logger.info(f"File validated successfully: {image_format}, {file_size / 1024:.1f}KB")
    return image_format


def validate_input_file(path: Path, max_size_mb: int = 200) -> str:
    """
    Validate an image file on disk.

    Args:
        path: Path to the input image.
        max_size_mb: Maximum file size in MB.

    Returns:
        Detected image format.

    Raises:
        ValidationError: If the file is missing or fails validation.
    """
    path = Path(path)
    if not path.is_file():
        raise ValidationError(f"Input file not found: {path}")

    with open(path, "rb") as f:
        return validate_image_file(f, max_size_mb=max_size_mb)


def validate_stem(stem: str) -> str:
    """
    Validate the base name used for output files.

    Args:
        stem: File name stem, without extension.

    Returns:
        The stem, unchanged.

    Raises:
        ValidationError: If the stem is blank or could escape the output directory.
    """
    if not stem or not stem.strip():
        raise ValidationError("Output name cannot be empty")

    if "/" in stem or "\\" in stem or stem in (".", ".."):
        raise ValidationError("Invalid output name pattern")

    if len(stem) > 200:
        raise ValidationError("Output name too long (max 200 characters)")

    return stem
