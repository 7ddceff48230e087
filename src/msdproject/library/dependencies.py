from __future__ import annotations

import ast
import re
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from ..errors import ScriptError
from ..exit_codes import ERR_VALIDATION

R_CALL_RE = re.compile(
    r"""\b(?:library|require|requireNamespace|loadNamespace)\s*\(\s*(?:package\s*=\s*)?["']?([A-Za-z][A-Za-z0-9._]*)"""
)
R_NAMESPACE_RE = re.compile(r"\b([A-Za-z][A-Za-z0-9._]*):::?(?=[A-Za-z._`])")
R_COMMENT_RE = re.compile(r"#.*$")

PYTHON_SUFFIXES = {".py"}
R_SUFFIXES = {".r"}
R_BASE_PACKAGES = frozenset(
    {
        "base",
        "compiler",
        "datasets",
        "grDevices",
        "graphics",
        "grid",
        "methods",
        "parallel",
        "splines",
        "stats",
        "stats4",
        "tcltk",
        "tools",
        "utils",
    }
)


@dataclass(frozen=True, order=True)
class Dependency:
    name: str
    source: str


def _r_dependencies(text: str) -> set[str]:
    found: set[str] = set()
    for line in text.splitlines():
        code = R_COMMENT_RE.sub("", line)
        found.update(R_CALL_RE.findall(code))
        found.update(R_NAMESPACE_RE.findall(code))
    return found - R_BASE_PACKAGES


def _python_dependencies(text: str, filename: str) -> set[str]:
    try:
        tree = ast.parse(text, filename=filename)
    except SyntaxError as exc:
        raise ScriptError(f"cannot parse {filename}: {exc.msg} (line {exc.lineno})", ERR_VALIDATION, kind="script_parse") from exc
    found: set[str] = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            found.update(alias.name.split(".")[0] for alias in node.names)
        elif isinstance(node, ast.ImportFrom) and node.level == 0 and node.module:
            found.add(node.module.split(".")[0])
    stdlib = set(sys.stdlib_module_names) | set(sys.builtin_module_names)
    return {name for name in found if name not in stdlib and name != "__future__"}


def script_dependencies(path: Path) -> list[Dependency]:
    text = path.read_text(encoding="utf-8", errors="replace")
    suffix = path.suffix.lower()
    if suffix in PYTHON_SUFFIXES:
        return sorted(Dependency(name, "python") for name in _python_dependencies(text, str(path)))
    if suffix in R_SUFFIXES:
        return sorted(Dependency(name, "r") for name in _r_dependencies(text))
    return []


def find_dependencies(paths: Iterable[Path]) -> list[Dependency]:
    """Packages referenced by the given scripts, sorted and de-duplicated."""
    found: set[Dependency] = set()
    for path in paths:
        found.update(script_dependencies(path))
    return sorted(found)
