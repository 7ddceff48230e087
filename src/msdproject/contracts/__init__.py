from __future__ import annotations

from .validate import schema_path_for, validate

__all__ = ["CHECK_REPORT", "LIBRARY_LOCK", "PROJECT_CONFIG", "schema_path_for", "validate"]

CHECK_REPORT = "msdproject.check-report.v1"
LIBRARY_LOCK = "msdproject.library-lock.v1"
PROJECT_CONFIG = "msdproject.config.v1"
