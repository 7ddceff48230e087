from __future__ import annotations

import getpass
import platform
import sys
from datetime import datetime
from importlib import metadata
from pathlib import Path

from .config import ProjectConfig
from .layout import check_if_project, ls_scripts, scripts_dir, setup_file
from .library.manifest import project_dependencies, resolve_version, snapshot_library
from .logging import log_event


def _installed_distributions() -> list[str]:
    seen: dict[str, str] = {}
    for dist in metadata.distributions():
        name = dist.metadata["Name"]
        if name and name.lower() not in seen:
            seen[name.lower()] = f"{name}=={dist.version}"
    return [seen[key] for key in sorted(seen)]


def render_environment_info(proj_name: str | Path, config: ProjectConfig, created: datetime | None = None) -> str:
    root = Path(proj_name)
    stamp = (created or datetime.now()).strftime("%Y-%m-%d %H:%M:%S")
    lines = [f"Created at {stamp} by {getpass.getuser()}", ""]
    lines.append(f"python: {sys.version.split()[0]} ({platform.python_implementation()})")
    lines.append(f"executable: {sys.executable}")
    lines.append(f"platform: {platform.platform()}")
    lines.append(f"project: {root.resolve()}")
    lines.append("")
    lines.append("referenced packages:")
    for dep in project_dependencies(root, config):
        version = resolve_version(dep, config, root) or "not installed"
        lines.append(f"  {dep.name} [{dep.source}] {version}")
    lines.append("")
    lines.append("installed distributions:")
    lines.extend(f"  {row}" for row in _installed_distributions())
    return "\n".join(lines) + "\n"


def environment_info(proj_name: str | Path | None, config: ProjectConfig) -> Path | None:
    """Write the environment snapshot file after locking the project library."""
    root = (Path(proj_name) if proj_name is not None else Path.cwd()).resolve()
    check_if_project(root, config)
    if not ls_scripts(scripts_dir(root, config), config):
        log_event(config, "info", "environment", "skip", reason="no package dependencies right now")
        return None
    lock = snapshot_library(root, config)
    out = root / config.environment_file
    out.write_text(render_environment_info(root, config), encoding="utf-8")
    setup_file(lock, config, root)
    setup_file(config.environment_file, config, root)
    log_event(config, "info", "environment", "write", path=str(out))
    return out
