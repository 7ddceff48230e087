from __future__ import annotations

import json
import os
import shutil
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Mapping

from .contracts import PROJECT_CONFIG, validate
from .errors import ScriptError
from .exit_codes import ERR_CONFIG

CONFIG_FILE_NAME = "msdproject.json"

_TUPLE_KEYS = {"script_extension", "code_library_paths", "git_ignore_files", "library_exclude"}
_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


def _git_available() -> bool:
    return shutil.which("git") is not None


@dataclass(frozen=True)
class ProjectConfig:
    """Directory names and feature flags shared by every project operation."""

    scripts_dir: str = "Scripts"
    models_dir: str = "Models"
    environment_file: str = "environment_info.txt"
    library_dir: str = "project_library"
    script_extension: tuple[str, ...] = ("R", "py")
    field_extension: str = "R"
    code_library_paths: tuple[str, ...] = ()
    git_enabled: bool = field(default_factory=_git_available)
    git_ignore_files: tuple[str, ...] = ()
    user_email: str = "user@example.org"
    library_exclude: tuple[str, ...] = ("msdproject",)
    ide_project_dir_env: str = "MSDPROJECT_IDE_PROJECT_DIR"
    log_json: bool = False
    quiet: bool = False
    verbose: bool = False

    def with_overrides(self, **overrides: Any) -> ProjectConfig:
        return replace(self, **overrides)


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ScriptError(f"invalid boolean for {name}: {raw!r}", ERR_CONFIG, kind="invalid_config")


def _env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    if environ.get("MSDPROJECT_SCRIPTS_DIR"):
        out["scripts_dir"] = environ["MSDPROJECT_SCRIPTS_DIR"]
    if environ.get("MSDPROJECT_MODELS_DIR"):
        out["models_dir"] = environ["MSDPROJECT_MODELS_DIR"]
    if environ.get("MSDPROJECT_CODE_LIBRARY"):
        out["code_library_paths"] = tuple(p for p in environ["MSDPROJECT_CODE_LIBRARY"].split(os.pathsep) if p)
    if "MSDPROJECT_GIT" in environ:
        out["git_enabled"] = _parse_bool("MSDPROJECT_GIT", environ["MSDPROJECT_GIT"])
    if "MSDPROJECT_LOG_JSON" in environ:
        out["log_json"] = _parse_bool("MSDPROJECT_LOG_JSON", environ["MSDPROJECT_LOG_JSON"])
    return out


def _file_overrides(path: Path) -> dict[str, Any]:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ScriptError(f"invalid config file {path}: {exc}", ERR_CONFIG, kind="invalid_config") from exc
    try:
        validate(PROJECT_CONFIG, payload)
    except ScriptError as exc:
        raise ScriptError(f"invalid config file {path}: {exc.message}", ERR_CONFIG, kind="invalid_config") from exc
    known = {f.name for f in fields(ProjectConfig)}
    return {key: (tuple(value) if key in _TUPLE_KEYS else value) for key, value in payload.items() if key in known}


def load_config(
    proj_name: str | Path | None = None,
    path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> ProjectConfig:
    """Build the configuration: defaults, then the JSON file, then environment overrides.

    The file is ``path`` if given, else ``$MSDPROJECT_CONFIG``, else
    ``msdproject.json`` in the project root when present.
    """
    env = os.environ if environ is None else environ
    overrides: dict[str, Any] = {}
    config_path: Path | None = None
    if path is not None:
        config_path = Path(path)
    elif env.get("MSDPROJECT_CONFIG"):
        config_path = Path(env["MSDPROJECT_CONFIG"])
    else:
        candidate = Path(proj_name or Path.cwd()) / CONFIG_FILE_NAME
        if candidate.is_file():
            config_path = candidate
    if config_path is not None:
        if not config_path.is_file():
            raise ScriptError(f"config file not found: {config_path}", ERR_CONFIG, kind="invalid_config")
        overrides.update(_file_overrides(config_path))
    overrides.update(_env_overrides(env))
    return ProjectConfig(**overrides)
