from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable

from .adapters.git import commit_file, init_repo
from .config import ProjectConfig
from .errors import ScriptError
from .exit_codes import ERR_ARTIFACT, ERR_CONTEXT
from .logging import log_event

_FULL_PATH_RE = re.compile(r"^(~|/|\\|([a-zA-Z]:))")
_KEEP_FILE = ".gitkeep"


def _root(proj_name: str | Path | None) -> Path:
    return Path(proj_name) if proj_name is not None else Path.cwd()


def scripts_dir(proj_name: str | Path | None = None, config: ProjectConfig | None = None) -> Path:
    cfg = config or ProjectConfig()
    return (_root(proj_name) / cfg.scripts_dir).resolve()


def models_dir(proj_name: str | Path | None = None, config: ProjectConfig | None = None) -> Path:
    cfg = config or ProjectConfig()
    return (_root(proj_name) / cfg.models_dir).resolve()


def is_project(directory: str | Path | None = None, config: ProjectConfig | None = None) -> bool:
    return scripts_dir(directory, config).is_dir() and models_dir(directory, config).is_dir()


def check_if_project(
    directory: str | Path | None = None,
    config: ProjectConfig | None = None,
    return_logical: bool = False,
) -> bool:
    test = is_project(directory, config)
    if not test and not return_logical:
        raise ScriptError(
            f"{_root(directory)} is not a project base directory",
            ERR_CONTEXT,
            kind="not_a_project",
        )
    return test


def is_full_path(x: str) -> bool:
    """True when ``x`` starts with ``~``, ``/``, ``\\`` or a drive letter."""
    return bool(_FULL_PATH_RE.match(x))


def _extensions(extension: str | Iterable[str]) -> set[str]:
    if isinstance(extension, str):
        return {extension.lstrip(".")}
    return {ext.lstrip(".") for ext in extension}


def list_files(directory: str | Path, extension: str | Iterable[str]) -> list[Path]:
    root = Path(directory)
    if not root.is_dir():
        return []
    wanted = _extensions(extension)
    return sorted(p for p in root.iterdir() if p.is_file() and p.suffix[1:] in wanted)


def ls_scripts(directory: str | Path, config: ProjectConfig | None = None) -> list[Path]:
    cfg = config or ProjectConfig()
    return list_files(directory, cfg.script_extension)


def setup_file(
    file_name: str | Path,
    config: ProjectConfig,
    proj_name: str | Path | None = None,
    version_control: bool | None = None,
) -> str | None:
    root = _root(proj_name)
    check_if_project(root, config)
    use_git = config.git_enabled if version_control is None else version_control
    path = Path(file_name)
    if use_git:
        rel = path.resolve().relative_to(root.resolve()) if path.is_absolute() else path
        return commit_file(rel.as_posix(), root, config)
    log_event(config, "info", "project", "created", file=str(file_name))
    return None


def make_project(
    path: str | Path,
    config: ProjectConfig,
    version_control: bool | None = None,
    force: bool = False,
) -> Path:
    root = Path(path).expanduser()
    if root.exists() and not root.is_dir():
        raise ScriptError(f"{root} exists and is not a directory", ERR_ARTIFACT, kind="file_exists")
    if root.is_dir() and any(root.iterdir()) and not is_project(root, config) and not force:
        raise ScriptError(
            f"{root} is not empty; pass force=True to lay out a project in it",
            ERR_ARTIFACT,
            kind="file_exists",
        )
    created: list[str] = []
    for sub in (config.scripts_dir, config.models_dir):
        directory = root / sub
        directory.mkdir(parents=True, exist_ok=True)
        keep = directory / _KEEP_FILE
        if not keep.exists():
            keep.touch()
            created.append(f"{sub}/{_KEEP_FILE}")
    use_git = config.git_enabled if version_control is None else version_control
    if use_git:
        if not (root / ".git").exists():
            init_repo(root, config)
        ignore_patterns = [p for p in config.git_ignore_files if p]
        if ignore_patterns:
            ignore = root / ".gitignore"
            existing = ignore.read_text(encoding="utf-8").splitlines() if ignore.exists() else []
            missing = [p for p in ignore_patterns if p not in existing]
            if missing:
                ignore.write_text("\n".join([*existing, *missing]) + "\n", encoding="utf-8")
                created.append(".gitignore")
        if created:
            commit_file(created, root, config)
    log_event(config, "info", "project", "make-project", root=str(root.resolve()), git=use_git)
    return root
