from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Callable

from . import __version__
from .adapters.git import commit_file
from .checks.fields import get_script_field
from .checks.ide import detect_ide
from .checks.session import check_session
from .code_library import code_library, preview, search_code_library
from .config import ProjectConfig, load_config
from .environment import environment_info
from .errors import ScriptError
from .exit_codes import ERR_CHECKS_FAILED, ERR_CONTEXT, ERR_INTERNAL, OK
from .layout import check_if_project, make_project
from .library.manifest import library_status, snapshot_library
from .logging import log_event
from .scripts import copy_script, new_script

Handler = Callable[[ProjectConfig, argparse.Namespace], int]


def _emit(payload: object, as_json: bool) -> None:
    if as_json:
        print(json.dumps(payload, sort_keys=True))
    else:
        print(json.dumps(payload, indent=2, sort_keys=True))


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="msdproject", description="manage standardized analysis project directories")
    p.add_argument("--version", action="version", version=f"msdproject {__version__}")
    p.add_argument("--cwd", help="run as if started in this directory")
    p.add_argument("--config", help="path to a msdproject.json configuration file")
    p.add_argument("--log-json", action="store_true", help="emit structured log events as JSON")
    vg = p.add_mutually_exclusive_group()
    vg.add_argument("--verbose", action="store_true", help="enable debug log events")
    vg.add_argument("--quiet", action="store_true", help="only emit warnings and errors")
    sub = p.add_subparsers(dest="cmd", required=True)

    make_p = sub.add_parser("make-project", help="create the standard project layout")
    make_p.add_argument("path")
    make_p.add_argument("--no-git", action="store_true", help="do not put the project under version control")
    make_p.add_argument("--force", action="store_true", help="lay out a project in a non-empty directory")

    check_p = sub.add_parser("check", help="check the project for best-practice compliance")
    check_p.add_argument("path", nargs="?", help="project root (default: current directory)")
    check_p.add_argument("--silent", action="store_true", help="suppress per-check progress lines")
    check_p.add_argument("--no-ide-check", action="store_true", help="skip the IDE working directory check")
    check_p.add_argument("--json", action="store_true", help="emit JSON report")

    new_p = sub.add_parser("new-script", help="create an empty script with header fields")
    new_p.add_argument("name")
    new_p.add_argument("--author", help="author field (default: current user)")
    new_p.add_argument("--description", default="", help="description field")

    copy_p = sub.add_parser("copy-script", help="copy a script from the code library or a path")
    copy_p.add_argument("source")
    copy_p.add_argument("name", nargs="?")
    copy_p.add_argument("--overwrite", action="store_true", help="replace an existing script")

    lib_p = sub.add_parser("library", help="list code library files")
    lib_p.add_argument("--json", action="store_true", help="emit JSON output")

    preview_p = sub.add_parser("preview", help="print a code library file")
    preview_p.add_argument("name")
    preview_p.add_argument("-n", type=int, default=None, help="number of lines to show")

    search_p = sub.add_parser("search", help="search code library files with a regular expression")
    search_p.add_argument("pattern")
    search_p.add_argument("--case-sensitive", action="store_true")

    field_p = sub.add_parser("field", help="print a header field of a file")
    field_p.add_argument("file")
    field_p.add_argument("field")
    field_p.add_argument("-n", type=int, default=10, help="number of leading lines to search")

    commit_p = sub.add_parser("commit", help="commit individual files")
    commit_p.add_argument("files", nargs="+")

    sub.add_parser("environment-info", help="write the environment snapshot file")
    sub.add_parser("snapshot", help="lock referenced packages in the project library")

    status_p = sub.add_parser("status", help="show project library status")
    status_p.add_argument("--json", action="store_true", help="emit JSON output")

    sub.add_parser("ide-dir", help="print the IDE project directory to change into")
    return p


def _cmd_make_project(config: ProjectConfig, ns: argparse.Namespace) -> int:
    root = make_project(ns.path, config, version_control=(False if ns.no_git else None), force=ns.force)
    print(root.resolve())
    return OK


def _cmd_check(config: ProjectConfig, ns: argparse.Namespace) -> int:
    if ns.path:
        config = _load_config(ns, Path(ns.path))
    report = check_session(ns.path, silent=ns.silent or ns.json, check_ide=not ns.no_ide_check, config=config)
    if ns.json:
        _emit(report.to_payload(project=str(Path(ns.path or ".").resolve())), True)
    else:
        print(report.render_table())
    return OK if report.passed else ERR_CHECKS_FAILED


def _cmd_new_script(config: ProjectConfig, ns: argparse.Namespace) -> int:
    print(new_script(ns.name, config, author=ns.author, description=ns.description))
    return OK


def _cmd_copy_script(config: ProjectConfig, ns: argparse.Namespace) -> int:
    print(copy_script(ns.source, config, to_name=ns.name, overwrite=ns.overwrite))
    return OK


def _cmd_library(config: ProjectConfig, ns: argparse.Namespace) -> int:
    entries = code_library(config)
    if ns.json:
        _emit({"schema_version": 1, "tool": "msdproject", "files": [e.as_row() for e in entries]}, True)
        return OK
    for entry in entries:
        print(f"{entry.name}\t{entry.description}\t{entry.author}\t{entry.path}")
    return OK


def _cmd_preview(config: ProjectConfig, ns: argparse.Namespace) -> int:
    sys.stdout.write(preview(ns.name, config, ns.n))
    return OK


def _cmd_search(config: ProjectConfig, ns: argparse.Namespace) -> int:
    hits = search_code_library(ns.pattern, config, ignore_case=not ns.case_sensitive)
    for hit in hits:
        print(f"{hit.path}:{hit.line_no}: {hit.line}")
    return OK if hits else ERR_CHECKS_FAILED


def _cmd_field(config: ProjectConfig, ns: argparse.Namespace) -> int:
    print(get_script_field(ns.file, ns.field, ns.n))
    return OK


def _cmd_commit(config: ProjectConfig, ns: argparse.Namespace) -> int:
    check_if_project(Path.cwd(), config)
    sha = commit_file(ns.files, Path.cwd(), config)
    print(sha or "nothing to commit")
    return OK


def _cmd_environment_info(config: ProjectConfig, ns: argparse.Namespace) -> int:
    out = environment_info(None, config)
    if out is not None:
        print(out)
    return OK


def _cmd_snapshot(config: ProjectConfig, ns: argparse.Namespace) -> int:
    print(snapshot_library(None, config))
    return OK


def _cmd_status(config: ProjectConfig, ns: argparse.Namespace) -> int:
    rows = library_status(None, config)
    if ns.json:
        _emit({"schema_version": 1, "tool": "msdproject", "packages": [r.as_row() for r in rows]}, True)
    else:
        for row in rows:
            print(
                f"{row.package}\t{row.source}\tlocked={row.locked_version or 'NA'}"
                f"\tlibrary={row.library_version or 'NA'}\tused={row.used}"
            )
    return ERR_CHECKS_FAILED if any(row.unresolved for row in rows) else OK


def _cmd_ide_dir(config: ProjectConfig, ns: argparse.Namespace) -> int:
    ide = detect_ide(config)
    if ide is None:
        raise ScriptError(
            f"no IDE project directory; set {config.ide_project_dir_env}", ERR_CONTEXT, kind="no_ide_integration"
        )
    print(ide.project_directory().expanduser().resolve())
    return OK


def _load_config(ns: argparse.Namespace, root: Path) -> ProjectConfig:
    base = load_config(root, ns.config)
    return base.with_overrides(
        log_json=ns.log_json or base.log_json,
        quiet=ns.quiet or base.quiet,
        verbose=ns.verbose or base.verbose,
    )


HANDLERS: dict[str, Handler] = {
    "make-project": _cmd_make_project,
    "check": _cmd_check,
    "new-script": _cmd_new_script,
    "copy-script": _cmd_copy_script,
    "library": _cmd_library,
    "preview": _cmd_preview,
    "search": _cmd_search,
    "field": _cmd_field,
    "commit": _cmd_commit,
    "environment-info": _cmd_environment_info,
    "snapshot": _cmd_snapshot,
    "status": _cmd_status,
    "ide-dir": _cmd_ide_dir,
}


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    ns = parser.parse_args(argv)
    if ns.cwd:
        os.chdir(ns.cwd)
    try:
        config = _load_config(ns, Path.cwd())
        log_event(config, "debug", "cli", "start", cmd=ns.cmd)
        return HANDLERS[ns.cmd](config, ns)
    except ScriptError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.code
    except Exception as exc:  # pragma: no cover
        print(f"internal error: {exc}", file=sys.stderr)
        return ERR_INTERNAL


if __name__ == "__main__":
    raise SystemExit(main())
