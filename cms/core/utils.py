"""
Filesystem helpers shared across stores/routers.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

from .errors import ForbiddenPathError


def atomic_write_text(target: Path, content: str) -> None:
    """
    Write content to a temp file beside target and rename it over target.

    Readers see either the old file or the new one, never a truncated file.
    The temp file is removed when anything before the rename fails.
    """
    target = Path(target)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=str(target.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, target)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


def resolve_inside(root: Path, relative: str) -> Path:
    """
    Resolve a request path under root, rejecting anything that escapes it.
    """
    base = Path(root).resolve()
    candidate = (base / relative.lstrip("/\\")).resolve()
    if candidate == base or not candidate.is_relative_to(base):
        raise ForbiddenPathError()
    return candidate
