from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

TRUE_TEXT = "TRUE"
FALSE_TEXT = "FALSE"


@dataclass(frozen=True)
class Outcome:
    """Tagged check outcome.

    ``ok`` is ``True`` for a pass, ``False`` for a failure and ``None`` for an
    informational, not-applicable state that does not count as a failure.
    """

    ok: bool | None
    detail: str | None = None

    @classmethod
    def passed(cls, detail: str | None = None) -> Outcome:
        return cls(True, detail)

    @classmethod
    def failed(cls, detail: str) -> Outcome:
        return cls(False, detail)

    @classmethod
    def info(cls, detail: str) -> Outcome:
        return cls(None, detail)

    @property
    def text(self) -> str:
        if self.ok is None:
            return self.detail or ""
        token = TRUE_TEXT if self.ok else FALSE_TEXT
        return f"{token}: {self.detail}" if self.detail else token

    @classmethod
    def from_text(cls, text: str) -> Outcome:
        """Classify legacy diagnostic text by its leading TRUE/FALSE token."""
        head, sep, rest = text.partition(":")
        token = head.strip().upper()
        detail = rest.strip() if sep else None
        if token == TRUE_TEXT:
            return cls(True, detail or None)
        if token == FALSE_TEXT:
            return cls(False, detail or None)
        return cls(None, text)


CheckThunk = Callable[[], object]


@dataclass(frozen=True)
class CheckResult:
    name: str
    result_text: str
    result_bool: bool | None

    @property
    def failed(self) -> bool:
        return self.result_bool is False

    def as_row(self) -> dict[str, object]:
        return {"test": self.name, "result_text": self.result_text, "result_bool": self.result_bool}
