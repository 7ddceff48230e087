from __future__ import annotations

from pathlib import Path

import pytest
from helpers import write_script

from msdproject.code_library import code_library, locate, preview, search_code_library
from msdproject.config import ProjectConfig
from msdproject.errors import ScriptError


@pytest.fixture
def library_config(tmp_path: Path) -> ProjectConfig:
    first = tmp_path / "lib1"
    second = tmp_path / "lib2"
    first.mkdir()
    second.mkdir()
    write_script(first, "template1.R", description="simulation template", author="ann")
    write_script(first, "output.data.R", description="write outputs", author=None)
    write_script(second, "template1.R", description="duplicate name")
    write_script(second, "plots.py", description="plot helpers")
    return ProjectConfig(git_enabled=False, quiet=True, code_library_paths=(str(first), str(second)))


def test_code_library_lists_entries_with_fields(library_config: ProjectConfig) -> None:
    entries = code_library(library_config)
    assert [e.name for e in entries] == ["output.data.R", "template1.R", "plots.py", "template1.R"]
    first = entries[1]
    assert first.description == "simulation template"
    assert first.author == "ann"
    assert entries[0].author == ""


def test_locate_unique_and_ambiguous(library_config: ProjectConfig) -> None:
    assert locate("plots.py", library_config).name == "plots.py"
    with pytest.raises(ScriptError) as err:
        locate("template1.R", library_config)
    assert "ambiguous" in str(err.value)
    with pytest.raises(ScriptError) as missing:
        locate("nothing.R", library_config)
    assert missing.value.kind == "library_lookup"


def test_locate_full_path(library_config: ProjectConfig, tmp_path: Path) -> None:
    path = tmp_path / "lib2" / "template1.R"
    assert locate(str(path), library_config) == path
    with pytest.raises(ScriptError) as err:
        locate(str(tmp_path / "missing.R"), library_config)
    assert err.value.kind == "file_not_found"


def test_preview_limits_lines(library_config: ProjectConfig) -> None:
    text = preview("plots.py", library_config, n=2)
    assert text.splitlines() == ["# header", "# Description: plot helpers"]
    assert preview("plots.py", library_config).endswith("x <- 1\n")


def test_search(library_config: ProjectConfig) -> None:
    hits = search_code_library("TEMPLATE", library_config)
    assert [(h.path.name, h.line_no) for h in hits] == [("template1.R", 2)]
    assert search_code_library("TEMPLATE", library_config, ignore_case=False) == []
    with pytest.raises(ScriptError):
        search_code_library("(", library_config)
