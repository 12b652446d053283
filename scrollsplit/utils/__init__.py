"""Utility modules for scrollsplit."""

from scrollsplit.utils.file_validation import (
    ValidationError,
    detect_image_format,
    validate_image_file,
    validate_input_file,
    validate_stem,
)

__all__ = [
    "ValidationError",
    "detect_image_format",
    "validate_image_file",
    "validate_input_file",
    "validate_stem",
]
