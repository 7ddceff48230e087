from __future__ import annotations

import math
import sys
from pathlib import Path
from typing import TextIO

from ..config import ProjectConfig
from ..errors import ScriptError
from ..exit_codes import ERR_CONTEXT
from ..layout import is_project, ls_scripts, scripts_dir
from ..library.manifest import library_path, library_status, r_available
from .base import Outcome
from .fields import field_val_test
from .ide import IdeIntegration, detect_ide, same_directory
from .registry import CheckReport, do_test, progress_line

IDE_CHECK = "ide working dir = current working dir"
PROJECT_CHECK = "directory is a project"
ENV_PRESENT_CHECK = "contains environment info"
ENV_FRESH_CHECK = "up to date environment info"
LIBRARY_CHECK = "project library setup"
DESCRIPTION_CHECK = "description fields present"
AUTHOR_CHECK = "author fields present"

_UNITS = ((60.0, 1.0, "secs"), (3600.0, 60.0, "mins"), (86400.0, 3600.0, "hours"))


def signif(value: float, digits: int = 2) -> str:
    if value == 0:
        return "0"
    rounded = round(value, digits - 1 - math.floor(math.log10(abs(value))))
    return f"{rounded:g}"


def format_lag(seconds: float) -> str:
    for limit, scale, unit in _UNITS:
        if seconds < limit:
            return f"{signif(seconds / scale)} {unit}"
    return f"{signif(seconds / 86400.0)} days"


def environment_freshness(root: Path, config: ProjectConfig) -> Outcome:
    scripts = ls_scripts(scripts_dir(root, config), config)
    if not scripts:
        return Outcome.info("No scripts")
    env_file = root / config.environment_file
    if not env_file.is_file():
        return Outcome.failed(f"no {config.environment_file}")
    newest_script = max(path.stat().st_mtime for path in scripts)
    lag = newest_script - env_file.stat().st_mtime
    if lag <= 0:
        return Outcome.passed()
    return Outcome.failed(f"{format_lag(lag)} behind scripts")


def library_setup(root: Path, config: ProjectConfig) -> Outcome:
    if not library_path(root, config).is_dir():
        return Outcome.failed("no project library")
    try:
        rows = library_status(root, config)
    except ScriptError as exc:
        return Outcome.failed(f"snapshot needed: {exc}")
    unresolved = [row for row in rows if row.unresolved]
    if not unresolved:
        return Outcome.passed("project library is up to date")
    if not r_available() and all(row.source == "r" for row in unresolved):
        return Outcome.failed("Rscript not available")
    return Outcome.failed("snapshot needed")


def check_working_directory(ide: IdeIntegration, silent: bool = False, stream: TextIO | None = None) -> None:
    """Abort unless the IDE's project directory is the current working directory."""
    ide_dir = ide.project_directory()
    ok = same_directory(ide_dir, Path.cwd())
    outcome = Outcome.passed() if ok else Outcome.failed("switch to main dir")
    if not silent:
        out = stream if stream is not None else sys.stderr
        out.write(progress_line(IDE_CHECK, outcome.text) + "\n")
    if not ok:
        raise ScriptError(
            f"FAILED: working directory {Path.cwd()} should be the IDE project directory {ide_dir}",
            ERR_CONTEXT,
            kind="wrong_working_directory",
        )


def check_session(
    proj_name: str | Path | None = None,
    *,
    silent: bool = False,
    check_ide: bool = True,
    config: ProjectConfig | None = None,
    ide: IdeIntegration | None = None,
    stream: TextIO | None = None,
) -> CheckReport:
    """Run the project best-practice checks and return the report.

    The IDE working-directory check runs first and raises on mismatch; every
    other condition is reported as a row.
    """
    cfg = config or ProjectConfig()
    root = Path(proj_name) if proj_name is not None else Path.cwd()
    if check_ide:
        integration = ide if ide is not None else detect_ide(cfg)
        if integration is not None:
            check_working_directory(integration, silent=silent, stream=stream)

    scripts = scripts_dir(root, cfg)
    return do_test(
        {
            PROJECT_CHECK: lambda: is_project(root, cfg),
            ENV_PRESENT_CHECK: lambda: (root / cfg.environment_file).is_file(),
            ENV_FRESH_CHECK: lambda: environment_freshness(root, cfg),
            LIBRARY_CHECK: lambda: library_setup(root, cfg),
            DESCRIPTION_CHECK: lambda: field_val_test("Description", scripts, cfg.field_extension),
            AUTHOR_CHECK: lambda: field_val_test("Author", scripts, cfg.field_extension),
        },
        silent=silent,
        stream=stream,
    )
