"""
Evidence export loader.

Reading and parsing are separate steps so callers can report load failures
and parse failures distinctly.
"""

import logging
from pathlib import Path

from pydantic import ValidationError

from ..config import get_settings
from ..errors import ExportLoadError, ExportParseError
from .schemas import EvidenceExport

logger = logging.getLogger(__name__)


def read_export_bytes(path: Path | str, max_bytes: int | None = None) -> bytes:
    """
    Read the raw export document from disk.

    Args:
        path: Path to the export file
        max_bytes: Size ceiling (default: settings.max_export_bytes)

    Returns:
        File contents

    Raises:
        ExportLoadError: If the file is missing, unreadable or too large
    """
    path = Path(path)
    limit = max_bytes if max_bytes is not None else get_settings().max_export_bytes

    try:
        size = path.stat().st_size
        if size > limit:
            raise ExportLoadError(path, f"file is {size} bytes, limit is {limit}")
        data = path.read_bytes()
    except OSError as e:
        logger.error(
            "Failed to read export file",
            extra={"action": "load_export", "path": str(path), "error": str(e)},
        )
        raise ExportLoadError(path, e.strerror or str(e)) from e

    logger.info(
        "Export file loaded",
        extra={"action": "load_export", "path": str(path), "size_bytes": len(data)},
    )
    return data


def parse_export(data: bytes | str) -> EvidenceExport:
    """
    Parse an export document.

    Args:
        data: Raw JSON bytes or text

    Returns:
        Parsed EvidenceExport

    Raises:
        ExportParseError: If the document is malformed or does not match the schema
    """
    try:
        export = EvidenceExport.model_validate_json(data)
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(loc) for loc in err['loc']) or '<root>'}: {err['msg']}"
            for err in e.errors()
        ]
        logger.error(
            "Failed to parse export",
            extra={"action": "parse_export", "error": errors[:5]},
        )
        raise ExportParseError(
            f"Failed to parse JSON: {e.error_count()} validation error(s)",
            errors=errors,
        ) from e

    logger.info(
        "Export parsed",
        extra={"action": "parse_export", "blob_count": len(export.blobs)},
    )
    return export


def load_export(path: Path | str) -> EvidenceExport:
    """Read and parse an export file in one step."""
    return parse_export(read_export_bytes(path))
