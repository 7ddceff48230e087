from __future__ import annotations

import re
from dataclasses import dataclass
from itertools import islice
from pathlib import Path
from typing import Iterable

from .checks.fields import get_script_field
from .config import ProjectConfig
from .errors import ScriptError
from .exit_codes import ERR_ARTIFACT, ERR_USAGE
from .layout import is_full_path, list_files


@dataclass(frozen=True)
class LibraryEntry:
    name: str
    path: Path
    description: str
    author: str

    def as_row(self) -> dict[str, str]:
        return {"name": self.name, "path": str(self.path), "description": self.description, "author": self.author}


@dataclass(frozen=True)
class SearchHit:
    path: Path
    line_no: int
    line: str


def library_files(config: ProjectConfig, extension: str | Iterable[str] | None = None) -> list[Path]:
    wanted = config.script_extension if extension is None else extension
    files: list[Path] = []
    for raw in config.code_library_paths:
        files.extend(list_files(Path(raw).expanduser(), wanted))
    return files


def code_library(config: ProjectConfig, extension: str | Iterable[str] | None = None) -> list[LibraryEntry]:
    return [
        LibraryEntry(
            name=path.name,
            path=path,
            description=get_script_field(path, "Description"),
            author=get_script_field(path, "Author"),
        )
        for path in library_files(config, extension)
    ]


def locate(name: str | Path, config: ProjectConfig) -> Path:
    """Resolve a full or relative path, or a bare file name from the code library."""
    raw = str(name)
    candidate = Path(raw).expanduser()
    if is_full_path(raw) or candidate.exists():
        if not candidate.is_file():
            raise ScriptError(f"file not found: {candidate}", ERR_ARTIFACT, kind="file_not_found")
        return candidate
    matches = [path for path in library_files(config, extension=_any_extension(candidate)) if path.name == candidate.name]
    if not matches:
        raise ScriptError(f"`{raw}` not found in code library", ERR_USAGE, kind="library_lookup")
    if len(matches) > 1:
        listing = ", ".join(str(path) for path in matches)
        raise ScriptError(f"`{raw}` is ambiguous in code library: {listing}", ERR_USAGE, kind="library_lookup")
    return matches[0]


def _any_extension(path: Path) -> tuple[str, ...]:
    return (path.suffix[1:],) if path.suffix else ("",)


def preview(name: str | Path, config: ProjectConfig, n: int | None = None) -> str:
    path = locate(name, config)
    with path.open(encoding="utf-8", errors="replace") as handle:
        lines = list(islice(handle, n)) if n is not None else handle.readlines()
    return "".join(lines)


def search_code_library(
    pattern: str,
    config: ProjectConfig,
    ignore_case: bool = True,
    extension: str | Iterable[str] | None = None,
) -> list[SearchHit]:
    try:
        regex = re.compile(pattern, re.IGNORECASE if ignore_case else 0)
    except re.error as exc:
        raise ScriptError(f"invalid search pattern {pattern!r}: {exc}", ERR_USAGE, kind="invalid_pattern") from exc
    hits: list[SearchHit] = []
    for path in library_files(config, extension):
        text = path.read_text(encoding="utf-8", errors="replace")
        for line_no, line in enumerate(text.splitlines(), start=1):
            if regex.search(line):
                hits.append(SearchHit(path, line_no, line))
    return hits
