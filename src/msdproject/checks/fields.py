from __future__ import annotations

import re
from itertools import islice
from pathlib import Path
from typing import Iterable

from ..errors import ScriptError
from ..exit_codes import ERR_ARTIFACT
from ..layout import list_files
from .base import Outcome


def _field_pattern(field_name: str) -> re.Pattern[str]:
    return re.compile(rf"^.*{re.escape(field_name)}s*:\s*(.*)$", re.IGNORECASE)


def get_script_field(file_name: str | Path, field_name: str, n: int = 10) -> str:
    """Value of ``field_name`` from the first ``n`` lines of a file, or ``""``.

    The label match ignores case and tolerates a plural ``s`` before the
    colon. Only the first matching line is used.
    """
    path = Path(file_name)
    if not path.is_file():
        raise ScriptError(f"file not found: {path}", ERR_ARTIFACT, kind="file_not_found")
    pattern = _field_pattern(field_name)
    with path.open(encoding="utf-8", errors="replace") as handle:
        for line in islice(handle, n):
            match = pattern.match(line.rstrip("\r\n"))
            if match:
                return match.group(1)
    return ""


def missing_field_files(field_name: str, directory: str | Path, extension: str | Iterable[str] = "R") -> list[str]:
    return [path.name for path in list_files(directory, extension) if get_script_field(path, field_name) == ""]


def field_val_test(field_name: str, directory: str | Path, extension: str | Iterable[str] = "R") -> Outcome:
    empty = missing_field_files(field_name, directory, extension)
    if empty:
        return Outcome.failed(",".join(empty))
    return Outcome.passed()
