from __future__ import annotations

import sys
from collections.abc import Iterable, Mapping, Sized
from dataclasses import dataclass, field
from typing import Any, TextIO

from ..contracts import CHECK_REPORT, validate
from ..errors import ScriptError
from ..exit_codes import ERR_CONFIG
from .base import CheckResult, CheckThunk, Outcome

PROGRESS_WIDTH = 50
PROGRESS_FILLER = "."

_NON_SCALAR = object()


@dataclass
class CheckReport:
    rows: list[CheckResult] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self):
        return iter(self.rows)

    def __getitem__(self, name: str) -> CheckResult:
        for row in self.rows:
            if row.name == name:
                return row
        raise KeyError(name)

    @property
    def names(self) -> list[str]:
        return [row.name for row in self.rows]

    @property
    def failures(self) -> list[CheckResult]:
        return [row for row in self.rows if row.failed]

    @property
    def passed(self) -> bool:
        return not self.failures

    def extend(self, other: CheckReport) -> CheckReport:
        return CheckReport([*self.rows, *other.rows])

    def as_rows(self) -> list[dict[str, object]]:
        return [row.as_row() for row in self.rows]

    def to_payload(self, project: str | None = None) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "schema_version": 1,
            "tool": "msdproject",
            "kind": "check-report",
            "status": "pass" if self.passed else "fail",
            "failed_count": len(self.failures),
            "total_count": len(self.rows),
            "checks": self.as_rows(),
        }
        if project is not None:
            payload["project"] = project
        validate(CHECK_REPORT, payload)
        return payload

    def render_table(self) -> str:
        if not self.rows:
            return ""
        width = max(len("test"), *(len(row.name) for row in self.rows))
        lines = [f"{'test'.ljust(width)}  result"]
        for row in self.rows:
            lines.append(f"{row.name.ljust(width)}  {row.result_text}")
        return "\n".join(lines)


def progress_line(name: str, text: str) -> str:
    label = f"{name} {PROGRESS_FILLER * 600}"[:PROGRESS_WIDTH]
    return f"{label}{text}"


def _scalar(value: object) -> object:
    if isinstance(value, (str, bytes, Outcome)) or not isinstance(value, Sized):
        return value
    if len(value) != 1:
        return _NON_SCALAR
    return next(iter(value))


def _to_result(name: str, value: object) -> CheckResult:
    if isinstance(value, Outcome):
        return CheckResult(name, value.text, value.ok)
    if isinstance(value, bool):
        return CheckResult(name, Outcome(value).text, value)
    if value is None:
        return CheckResult(name, "NA", None)
    text = value.decode() if isinstance(value, bytes) else str(value)
    return CheckResult(name, text, Outcome.from_text(text).ok)


def _as_pairs(checks: Mapping[str, CheckThunk] | Iterable[tuple[str, CheckThunk]]) -> list[tuple[str, CheckThunk]]:
    pairs = list(checks.items()) if isinstance(checks, Mapping) else list(checks)
    seen: set[str] = set()
    duplicates = []
    for name, _ in pairs:
        if name in seen:
            duplicates.append(name)
        seen.add(name)
    if duplicates:
        raise ScriptError(
            f"duplicate check names: {', '.join(duplicates)}",
            ERR_CONFIG,
            kind="check_config",
        )
    return pairs


def do_test(
    checks: Mapping[str, CheckThunk] | Iterable[tuple[str, CheckThunk]],
    *,
    silent: bool = False,
    append: CheckReport | None = None,
    stream: TextIO | None = None,
) -> CheckReport:
    """Evaluate named checks in order and collect one report row per check.

    Every check must produce a single value: a bool, an ``Outcome`` or a short
    diagnostic string. Progress lines are written as the report is built,
    unless ``silent``. Rows of ``append`` come first in the returned report.
    """
    pairs = _as_pairs(checks)
    evaluated = [(name, _scalar(thunk())) for name, thunk in pairs]

    bad = [name for name, value in evaluated if value is _NON_SCALAR]
    if bad:
        raise ScriptError(
            "following checks did not return a single value: " + ", ".join(bad),
            ERR_CONFIG,
            kind="check_config",
        )

    out = stream if stream is not None else sys.stderr
    rows: list[CheckResult] = []
    for name, value in evaluated:
        result = _to_result(name, value)
        if not silent:
            out.write(progress_line(name, result.result_text) + "\n")
            out.flush()
        rows.append(result)

    report = CheckReport(rows)
    return append.extend(report) if append is not None else report
