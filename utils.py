"""Utility helpers shared across server modules."""

import os
from pathlib import Path
from urllib.parse import unquote_to_bytes

from config import FILES_DIRECTORY


def resolve_served_file(name: bytes | str, files_directory: str = FILES_DIRECTORY) -> Path | None:
    """Resolve a raw file name under the serving directory or return None for traversal attempts.

    Percent escapes in ``name`` are decoded; the resulting bytes are mapped to a
    file system path with ``os.fsdecode``.
    """
    served_root = Path(files_directory).resolve()
    candidate = (served_root / os.fsdecode(unquote_to_bytes(name))).resolve()

    try:
        candidate.relative_to(served_root)
    except ValueError:
        return None

    return candidate
