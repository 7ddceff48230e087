from __future__ import annotations

import getpass
import shutil
from datetime import date
from pathlib import Path

from .code_library import locate
from .config import ProjectConfig
from .errors import ScriptError
from .exit_codes import ERR_ARTIFACT
from .layout import check_if_project, scripts_dir, setup_file
from .logging import log_event


def script_header(description: str = "", author: str | None = None, created: date | None = None) -> str:
    who = author if author is not None else getpass.getuser()
    when = (created or date.today()).isoformat()
    return "\n".join(
        [
            "# ------------------------------------------------------------------",
            f"# Description: {description}".rstrip(),
            f"# Author: {who}".rstrip(),
            f"# Created: {when}",
            "# ------------------------------------------------------------------",
            "",
            "",
        ]
    )


def _target(proj_name: str | Path | None, name: str, config: ProjectConfig) -> Path:
    root = Path(proj_name) if proj_name is not None else Path.cwd()
    check_if_project(root, config)
    target = scripts_dir(root, config) / Path(name).name
    return target


def new_script(
    name: str,
    config: ProjectConfig,
    proj_name: str | Path | None = None,
    author: str | None = None,
    description: str = "",
) -> Path:
    target = _target(proj_name, name, config)
    if target.exists():
        raise ScriptError(f"{target} already exists", ERR_ARTIFACT, kind="file_exists")
    target.write_text(script_header(description, author), encoding="utf-8")
    setup_file(target, config, proj_name)
    log_event(config, "info", "scripts", "new-script", path=str(target))
    return target


def copy_script(
    from_path: str | Path,
    config: ProjectConfig,
    to_name: str | None = None,
    proj_name: str | Path | None = None,
    overwrite: bool = False,
) -> Path:
    """Copy a script into the project's scripts directory and set it up."""
    source = locate(from_path, config)
    target = _target(proj_name, to_name or source.name, config)
    if target.exists() and not overwrite:
        raise ScriptError(f"{target} already exists; use overwrite to replace it", ERR_ARTIFACT, kind="file_exists")
    shutil.copyfile(source, target)
    setup_file(target, config, proj_name)
    log_event(config, "info", "scripts", "copy-script", source=str(source), path=str(target))
    return target
