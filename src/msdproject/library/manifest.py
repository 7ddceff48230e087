from __future__ import annotations

import json
import shutil
from dataclasses import dataclass
from importlib import metadata
from pathlib import Path
from typing import Any, Iterable

from ..config import ProjectConfig
from ..contracts import LIBRARY_LOCK, validate
from ..core.process import run_command
from ..errors import ScriptError
from ..exit_codes import ERR_ARTIFACT
from ..layout import check_if_project, ls_scripts, scripts_dir
from ..logging import log_event, utc_now_iso
from .dependencies import Dependency, find_dependencies

LOCK_FILE_NAME = "packages.lock.json"


@dataclass(frozen=True)
class LibraryStatusRow:
    package: str
    source: str
    locked_version: str | None
    library_version: str | None
    used: bool

    @property
    def unresolved(self) -> bool:
        return self.locked_version is None or self.library_version is None

    def as_row(self) -> dict[str, object]:
        return {
            "package": self.package,
            "source": self.source,
            "locked_version": self.locked_version,
            "library_version": self.library_version,
            "used": self.used,
        }


def _root(proj_name: str | Path | None) -> Path:
    return Path(proj_name) if proj_name is not None else Path.cwd()


def library_path(proj_name: str | Path | None, config: ProjectConfig) -> Path:
    return _root(proj_name) / config.library_dir


def lock_path(proj_name: str | Path | None, config: ProjectConfig) -> Path:
    return library_path(proj_name, config) / LOCK_FILE_NAME


def _python_version(name: str) -> str | None:
    for dist in metadata.packages_distributions().get(name, []):
        try:
            return metadata.version(dist)
        except metadata.PackageNotFoundError:
            continue
    try:
        return metadata.version(name)
    except metadata.PackageNotFoundError:
        return None


def r_available() -> bool:
    return shutil.which("Rscript") is not None


def _r_version(name: str, cwd: Path, config: ProjectConfig) -> str | None:
    if not r_available():
        return None
    expr = f'cat(as.character(utils::packageVersion("{name}")))'
    res = run_command(["Rscript", "--vanilla", "-e", expr], cwd, timeout_seconds=60, config=config)
    version = res.stdout.strip()
    return version if res.code == 0 and version else None


def resolve_version(dep: Dependency, config: ProjectConfig, cwd: Path | None = None) -> str | None:
    if dep.source == "python":
        return _python_version(dep.name)
    if dep.source == "r":
        return _r_version(dep.name, cwd or Path.cwd(), config)
    return None


def project_dependencies(proj_name: str | Path | None, config: ProjectConfig) -> list[Dependency]:
    return find_dependencies(ls_scripts(scripts_dir(proj_name, config), config))


def read_lock(proj_name: str | Path | None, config: ProjectConfig) -> dict[str, Any]:
    library = library_path(proj_name, config)
    if not library.is_dir():
        raise ScriptError(f"no project library at {library}", ERR_ARTIFACT, kind="no_project_library")
    path = library / LOCK_FILE_NAME
    if not path.is_file():
        return {"schema_version": 1, "created": "", "packages": []}
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ScriptError(f"invalid lock file {path}: {exc}", ERR_ARTIFACT, kind="invalid_lock") from exc
    validate(LIBRARY_LOCK, payload)
    return payload


def snapshot_library(proj_name: str | Path | None, config: ProjectConfig) -> Path:
    """Lock every package the project scripts reference at its resolved version."""
    root = _root(proj_name)
    check_if_project(root, config)
    deps = project_dependencies(root, config)
    payload = {
        "schema_version": 1,
        "created": utc_now_iso(),
        "packages": [
            {"name": dep.name, "version": resolve_version(dep, config, root), "source": dep.source} for dep in deps
        ],
    }
    validate(LIBRARY_LOCK, payload)
    out = lock_path(root, config)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(json.dumps(payload, indent=2, sort_keys=True) + "\n", encoding="utf-8")
    log_event(config, "info", "library", "snapshot", path=str(out), packages=len(deps))
    return out


def library_status(
    proj_name: str | Path | None,
    config: ProjectConfig,
    exclude: Iterable[str] | None = None,
) -> list[LibraryStatusRow]:
    root = _root(proj_name)
    skip = set(config.library_exclude if exclude is None else exclude)
    lock = read_lock(root, config)
    locked = {Dependency(str(row["name"]), str(row["source"])): row["version"] for row in lock["packages"]}
    used = set(project_dependencies(root, config))
    rows: list[LibraryStatusRow] = []
    for dep in sorted(set(locked) | used):
        if dep.name in skip:
            continue
        rows.append(
            LibraryStatusRow(
                package=dep.name,
                source=dep.source,
                locked_version=locked.get(dep),
                library_version=resolve_version(dep, config, root),
                used=dep in used,
            )
        )
    return rows
