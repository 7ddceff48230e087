from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest
from helpers import write_script

from msdproject.checks.fields import get_script_field
from msdproject.config import ProjectConfig
from msdproject.errors import ScriptError
from msdproject.scripts import copy_script, new_script, script_header


def test_script_header_fields() -> None:
    header = script_header("fit the model", "ann", date(2026, 1, 2))
    assert "# Description: fit the model" in header
    assert "# Author: ann" in header
    assert "# Created: 2026-01-02" in header


def test_new_script_creates_file_with_fields(project_root: Path, config: ProjectConfig) -> None:
    path = new_script("test.R", config, proj_name=project_root, author="ann", description="demo")
    assert path == (project_root / "Scripts" / "test.R").resolve()
    assert get_script_field(path, "Author") == "ann"
    assert get_script_field(path, "Description") == "demo"


def test_new_script_leaves_description_empty_by_default(project_root: Path, config: ProjectConfig) -> None:
    path = new_script("empty.R", config, proj_name=project_root, author="ann")
    assert get_script_field(path, "Description") == ""


def test_new_script_refuses_overwrite(project_root: Path, config: ProjectConfig) -> None:
    new_script("test.R", config, proj_name=project_root)
    with pytest.raises(ScriptError) as err:
        new_script("test.R", config, proj_name=project_root)
    assert err.value.kind == "file_exists"


def test_new_script_requires_project(tmp_path: Path, config: ProjectConfig) -> None:
    with pytest.raises(ScriptError) as err:
        new_script("test.R", config, proj_name=tmp_path)
    assert err.value.kind == "not_a_project"


def test_copy_script_from_library(project_root: Path, tmp_path: Path) -> None:
    lib = tmp_path / "lib"
    lib.mkdir()
    write_script(lib, "output.data.R", description="outputs")
    cfg = ProjectConfig(git_enabled=False, quiet=True, code_library_paths=(str(lib),))
    target = copy_script("output.data.R", cfg, proj_name=project_root)
    assert target.read_text(encoding="utf-8") == (lib / "output.data.R").read_text(encoding="utf-8")

    renamed = copy_script(str(lib / "output.data.R"), cfg, to_name="outputs2.R", proj_name=project_root)
    assert renamed.name == "outputs2.R"

    with pytest.raises(ScriptError):
        copy_script("output.data.R", cfg, proj_name=project_root)
    assert copy_script("output.data.R", cfg, proj_name=project_root, overwrite=True) == target
