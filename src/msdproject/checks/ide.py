from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Protocol

from ..config import ProjectConfig


class IdeIntegration(Protocol):
    def project_directory(self) -> Path:
        ...


@dataclass(frozen=True)
class EnvIdeIntegration:
    """IDE integration backed by an environment variable the IDE exports."""

    variable: str
    environ: Mapping[str, str] | None = None

    def project_directory(self) -> Path:
        env = os.environ if self.environ is None else self.environ
        return Path(env[self.variable])


def detect_ide(config: ProjectConfig, environ: Mapping[str, str] | None = None) -> IdeIntegration | None:
    env = os.environ if environ is None else environ
    if env.get(config.ide_project_dir_env):
        return EnvIdeIntegration(config.ide_project_dir_env, environ)
    return None


def same_directory(left: str | Path, right: str | Path) -> bool:
    return Path(left).expanduser().resolve() == Path(right).expanduser().resolve()
