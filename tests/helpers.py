"""Helpers for building source and destination trees in tests."""

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

OLD = datetime(2020, 1, 2, 15, 4, 5, tzinfo=timezone.utc)
NEW = datetime(2024, 6, 7, 8, 9, 10, tzinfo=timezone.utc)


def set_mtime(path: Path, when: datetime) -> int:
    """Set a file's access and modification time; return the mtime in ns."""
    ns = int(when.timestamp()) * 1_000_000_000
    os.utime(path, ns=(ns, ns))
    return ns


def write_file(path: Path, content: str, when: Optional[datetime] = None) -> Path:
    """Write a text file, optionally with a fixed modification time."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    if when is not None:
        set_mtime(path, when)
    return path
