from __future__ import annotations

import json
from pathlib import Path

import pytest
from helpers import write_script

from msdproject.cli import build_parser, main
from msdproject.exit_codes import ERR_CHECKS_FAILED, ERR_CONTEXT, OK


@pytest.fixture(autouse=True)
def no_git(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MSDPROJECT_GIT", "0")


def test_parser_lists_commands() -> None:
    parser = build_parser()
    ns = parser.parse_args(["check", "--json", "--no-ide-check"])
    assert ns.cmd == "check"
    assert ns.json and ns.no_ide_check


def test_make_project_then_check_json(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    root = tmp_path / "PKAE1"
    assert main(["--quiet", "make-project", str(root)]) == OK
    capsys.readouterr()

    code = main(["check", str(root), "--json", "--no-ide-check"])
    payload = json.loads(capsys.readouterr().out)
    assert code == ERR_CHECKS_FAILED
    assert payload["kind"] == "check-report"
    assert payload["total_count"] == 6
    assert payload["checks"][0] == {"test": "directory is a project", "result_text": "TRUE", "result_bool": True}


def test_check_text_output(project_root: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["check", str(project_root), "--no-ide-check"])
    captured = capsys.readouterr()
    assert code == ERR_CHECKS_FAILED
    assert "directory is a project" in captured.err
    assert captured.out.splitlines()[0].startswith("test")


def test_check_aborts_on_wrong_ide_directory(
    project_root: Path,
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("MSDPROJECT_IDE_PROJECT_DIR", str(tmp_path))
    code = main(["--cwd", str(project_root), "check", "--silent"])
    captured = capsys.readouterr()
    assert code == ERR_CONTEXT
    assert captured.out == ""
    assert "error: FAILED" in captured.err


def test_field_and_new_script(project_root: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.chdir(project_root)
    assert main(["--quiet", "new-script", "fit.R", "--author", "ann", "--description", "fit it"]) == OK
    capsys.readouterr()
    assert main(["field", "Scripts/fit.R", "description"]) == OK
    assert capsys.readouterr().out.strip() == "fit it"


def test_library_and_search(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    lib = tmp_path / "lib"
    lib.mkdir()
    write_script(lib, "template1.R", description="bootstrap template")
    monkeypatch.setenv("MSDPROJECT_CODE_LIBRARY", str(lib))
    monkeypatch.chdir(tmp_path)
    assert main(["library", "--json"]) == OK
    payload = json.loads(capsys.readouterr().out)
    assert payload["files"][0]["description"] == "bootstrap template"
    assert main(["search", "bootstrap"]) == OK
    assert "template1.R:2:" in capsys.readouterr().out
    assert main(["search", "nothing-here"]) == ERR_CHECKS_FAILED


def test_status_without_library_is_an_error(project_root: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.chdir(project_root)
    code = main(["status"])
    assert code != OK
    assert "no project library" in capsys.readouterr().err


def test_check_reads_config_from_project_path(tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch) -> None:
    root = tmp_path / "proj"
    (root / "Code").mkdir(parents=True)
    (root / "Models").mkdir()
    (root / "msdproject.json").write_text(json.dumps({"scripts_dir": "Code"}), encoding="utf-8")
    elsewhere = tmp_path / "elsewhere"
    elsewhere.mkdir()
    monkeypatch.chdir(elsewhere)
    main(["check", str(root), "--silent", "--no-ide-check", "--json"])
    payload = json.loads(capsys.readouterr().out)
    rows = {row["test"]: row for row in payload["checks"]}
    assert rows["directory is a project"]["result_bool"] is True


def test_check_with_malformed_lock_reports_a_row(project_root: Path, capsys: pytest.CaptureFixture[str]) -> None:
    library = project_root / "project_library"
    library.mkdir()
    (library / "packages.lock.json").write_text("{bad", encoding="utf-8")
    code = main(["check", str(project_root), "--no-ide-check", "--json"])
    payload = json.loads(capsys.readouterr().out)
    assert code == ERR_CHECKS_FAILED
    rows = {row["test"]: row for row in payload["checks"]}
    assert rows["project library setup"]["result_text"].startswith("FALSE: snapshot needed: invalid lock file")


def test_ide_dir_prints_detected_directory(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setenv("MSDPROJECT_IDE_PROJECT_DIR", str(tmp_path))
    assert main(["ide-dir"]) == OK
    assert capsys.readouterr().out.strip() == str(tmp_path.resolve())


def test_ide_dir_without_integration(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["ide-dir"]) == ERR_CONTEXT
    assert "MSDPROJECT_IDE_PROJECT_DIR" in capsys.readouterr().err
