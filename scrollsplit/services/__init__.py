"""Services built on the splitting core."""

from scrollsplit.services.export_service import (
    ExportError,
    export_segments,
    preview,
    segment_filename,
)

__all__ = [
    "ExportError",
    "export_segments",
    "preview",
    "segment_filename",
]
