"""
Export service for writing split segments to disk.

This service handles:
- Output file naming
- Output directory creation
- Cleanup of partial output after a failed export
- Opening written segments in the system image viewer
"""

import logging
from pathlib import Path

from PIL import Image

from scrollsplit.splitting import SplitResult
from scrollsplit.utils.file_validation import validate_stem

logger = logging.getLogger(__name__)

FILE_EXTENSIONS = {
    "png": "png",
    "jpeg": "jpg",
    "webp": "webp",
}


class ExportError(Exception):
    """Raised when writing segments fails."""

    pass


def segment_filename(stem: str, index: int, image_format: str = "png") -> str:
    """
    Build the file name of a segment.

    Args:
        stem: Base name, usually the input file's stem.
        index: Segment index (0-indexed).
        image_format: Output image format.

    Returns:
        File name numbered from 1, e.g. ``page_1.png``.
    """
    extension = FILE_EXTENSIONS.get(image_format)
    if extension is None:
        raise ExportError(
            f"Unsupported image format: {image_format}. "
            f"Available: {list(FILE_EXTENSIONS)}"
        )
    return f"{stem}_{index + 1}.{extension}"


def export_segments(
    result: SplitResult,
    output_dir: Path,
    stem: str,
    image_format: str = "png",
) -> list[Path]:
    """
    Write every chunk of a split result to its own file.

    Args:
        result: Split result to write.
        output_dir: Directory to write into. Created if missing.
        stem: Base name for the output files.
        image_format: Output image format.

    Returns:
        Paths of the written files, in segment order.

    Raises:
        ValidationError: If the stem is not a safe file name.
        ExportError: If any file cannot be written. Files written by this
            call are removed first.
    """
    stem = validate_stem(stem)
    output_dir = Path(output_dir)
    written: list[Path] = []

    try:
        output_dir.mkdir(parents=True, exist_ok=True)

        for chunk in result.chunks:
            path = output_dir / segment_filename(stem, chunk.index, image_format)
            chunk.save(path, image_format=image_format)
            written.append(path)

            logger.debug(
                f"Wrote segment {chunk.index + 1}/{result.num_chunks}: "
                f"{path} ({chunk.width}x{chunk.height}px)"
            )

    except ExportError:
        _cleanup_partial_files(written)
        raise
    except (OSError, ValueError) as e:
        _cleanup_partial_files(written)
        raise ExportError(f"Failed to write segments to {output_dir}: {e}") from e

    logger.info(f"Wrote {len(written)} segment(s) to {output_dir}")
    return written


def _cleanup_partial_files(paths: list[Path]) -> None:
    """
    Remove segment files that were written before an error.

    Args:
        paths: Paths to delete.
    """
    for path in paths:
        try:
            path.unlink(missing_ok=True)
            logger.debug(f"Cleaned up partial segment: {path}")
        except OSError as e:
            logger.warning(f"Failed to clean up segment {path}: {e}")


def preview(paths: list[Path]) -> None:
    """
    Open written segments in the platform image viewer.

    Args:
        paths: Segment files to open.
    """
    for path in paths:
        with Image.open(path) as img:
            img.show(title=path.name)
