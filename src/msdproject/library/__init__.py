from __future__ import annotations

from .dependencies import find_dependencies
from .manifest import LibraryStatusRow, library_status, read_lock, snapshot_library

__all__ = ["LibraryStatusRow", "find_dependencies", "library_status", "read_lock", "snapshot_library"]
