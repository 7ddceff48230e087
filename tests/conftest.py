from __future__ import annotations

import shutil
import socket
from pathlib import Path

import pytest
from hypothesis import settings

from msdproject.config import ProjectConfig

_ALLOWED_MARKERS = {"unit", "integration", "slow"}

settings.register_profile("msdproject", deadline=None, max_examples=50)
settings.load_profile("msdproject")


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        names = {mark.name for mark in item.iter_markers()}
        if not names.intersection(_ALLOWED_MARKERS):
            item.add_marker("unit")


@pytest.fixture(autouse=True)
def no_network_for_unit(request: pytest.FixtureRequest, monkeypatch: pytest.MonkeyPatch) -> None:
    if request.node.get_closest_marker("integration") or request.node.get_closest_marker("slow"):
        return

    def _blocked(*_args: object, **_kwargs: object) -> socket.socket:
        raise RuntimeError("network disabled in unit tests")

    def _blocked_connect(*_args: object, **_kwargs: object) -> None:
        raise RuntimeError("network disabled in unit tests")

    monkeypatch.setattr(socket, "create_connection", _blocked)
    monkeypatch.setattr(socket.socket, "connect", _blocked_connect)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "MSDPROJECT_CONFIG",
        "MSDPROJECT_SCRIPTS_DIR",
        "MSDPROJECT_MODELS_DIR",
        "MSDPROJECT_CODE_LIBRARY",
        "MSDPROJECT_GIT",
        "MSDPROJECT_LOG_JSON",
        "MSDPROJECT_IDE_PROJECT_DIR",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config() -> ProjectConfig:
    return ProjectConfig(git_enabled=False, quiet=True)


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    (root / "Scripts").mkdir(parents=True)
    (root / "Models").mkdir()
    return root


@pytest.fixture
def git_config() -> ProjectConfig:
    if shutil.which("git") is None:
        pytest.skip("git is not installed")
    return ProjectConfig(git_enabled=True, quiet=True, user_email="tester@example.org")

