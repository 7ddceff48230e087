from __future__ import annotations

from pathlib import Path

from msdproject.config import ProjectConfig
from msdproject.environment import environment_info


def test_no_scripts_writes_nothing(project_root: Path, config: ProjectConfig) -> None:
    assert environment_info(project_root, config) is None
    assert not (project_root / config.environment_file).exists()


def test_environment_info_written_with_lock(project_root: Path, config: ProjectConfig) -> None:
    (project_root / "Scripts" / "load.py").write_text("import jsonschema\n", encoding="utf-8")
    out = environment_info(project_root, config)
    assert out is not None
    text = out.read_text(encoding="utf-8")
    assert text.startswith("Created at ")
    assert "referenced packages:" in text
    assert "jsonschema [python]" in text
    assert (project_root / config.library_dir / "packages.lock.json").is_file()
