"""Common IO helpers for plugins."""

from __future__ import annotations

import os
import time
from pathlib import Path
from typing import Callable

SAFE_FILENAME_CHARS = {"-", "_", "."}


def ensure_directory(path: Path) -> Path:
    path = Path(path).expanduser()
    path.mkdir(parents=True, exist_ok=True)
    return path


def timestamped_filename(suffix: str, *, clock: Callable[[], float] = time.time) -> str:
    """Return ``<epoch-millis>_<suffix>``, e.g. ``1700000000000_merged.pdf``."""

    return f"{int(clock() * 1000)}_{suffix}"


def write_new_file(directory: Path, filename: str, data: bytes) -> Path:
    """Write ``data`` to a file that must not exist yet."""

    target = ensure_directory(directory) / filename
    with target.open("xb") as handle:
        handle.write(data)
    return target


def secure_filename(filename: str, *, fallback: str = "upload") -> str:
    """Sanitize filenames without relying on Werkzeug internals."""

    if not filename:
        return fallback
    name, ext = os.path.splitext(filename)
    safe_name = "".join(
        ch if ch.isalnum() or ch in SAFE_FILENAME_CHARS else "_" for ch in name
    )
    safe_ext = "".join(ch for ch in ext if ch.isalnum() or ch in SAFE_FILENAME_CHARS)
    safe_name = safe_name.strip("._") or fallback
    safe_ext = safe_ext.strip("._")
    return f"{safe_name}{f'.{safe_ext}' if safe_ext else ''}"


__all__ = [
    "ensure_directory",
    "timestamped_filename",
    "write_new_file",
    "secure_filename",
]
