from __future__ import annotations

from .base import CheckResult, Outcome
from .fields import field_val_test, get_script_field
from .registry import CheckReport, do_test
from .session import check_session

__all__ = [
    "CheckReport",
    "CheckResult",
    "Outcome",
    "check_session",
    "do_test",
    "field_val_test",
    "get_script_field",
]
