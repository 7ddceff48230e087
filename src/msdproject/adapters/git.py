"""Git adapter helpers."""

from __future__ import annotations

import getpass
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Iterable

from ..core.process import CommandResult, run_command
from ..errors import ScriptError
from ..exit_codes import ERR_VCS
from ..logging import log_event

if TYPE_CHECKING:
    from ..config import ProjectConfig


__all__ = ["GitContext", "commit_file", "init_repo", "read_git_context", "staged_files"]


@dataclass(frozen=True)
class GitContext:
    sha: str
    is_dirty: bool


def _git(repo_root: Path, args: list[str], config: ProjectConfig | None = None) -> CommandResult:
    result = run_command(["git", *args], repo_root, config=config)
    if result.code != 0:
        raise ScriptError(
            f"git {' '.join(args)} failed: {result.combined_output}",
            ERR_VCS,
            kind="git_failed",
        )
    return result


def read_git_context(repo_root: Path) -> GitContext:
    sha_res = run_command(["git", "rev-parse", "--short", "HEAD"], repo_root)
    sha = sha_res.stdout.strip() if sha_res.code == 0 else "unknown"
    dirty_res = run_command(["git", "status", "--porcelain"], repo_root)
    is_dirty = bool(dirty_res.stdout.strip()) if dirty_res.code == 0 else True
    return GitContext(sha=sha or "unknown", is_dirty=is_dirty)


def _has_head(repo_root: Path) -> bool:
    return run_command(["git", "rev-parse", "--verify", "-q", "HEAD"], repo_root).code == 0


def staged_files(repo_root: Path) -> list[str]:
    res = _git(repo_root, ["diff", "--cached", "--name-only"])
    return [line for line in res.stdout.splitlines() if line.strip()]


def init_repo(repo_root: Path, config: ProjectConfig) -> None:
    _git(repo_root, ["init", "-q"], config)
    if run_command(["git", "config", "user.email"], repo_root).code != 0:
        _git(repo_root, ["config", "user.email", config.user_email], config)
    if run_command(["git", "config", "user.name"], repo_root).code != 0:
        _git(repo_root, ["config", "user.name", getpass.getuser()], config)
    log_event(config, "info", "git", "init", repo=str(repo_root))


def _unstage(repo_root: Path, paths: list[str], config: ProjectConfig | None) -> None:
    if _has_head(repo_root):
        _git(repo_root, ["reset", "-q", "--", *paths], config)
    else:
        _git(repo_root, ["rm", "--cached", "-q", "--", *paths], config)


def commit_file(
    file_names: str | Path | Iterable[str | Path],
    repo_root: Path,
    config: ProjectConfig | None = None,
) -> str | None:
    """Commit only ``file_names``, leaving anything else that was staged staged.

    Returns the new commit sha, or ``None`` when adding the files staged
    nothing (already committed and unchanged).
    """
    if isinstance(file_names, (str, Path)):
        names = [str(file_names)]
    else:
        names = [str(name) for name in file_names]
    old_staged = staged_files(repo_root)
    if old_staged:
        _unstage(repo_root, old_staged, config)
    try:
        _git(repo_root, ["add", "--", *names], config)
        if not staged_files(repo_root):
            return None
        _git(repo_root, ["commit", "-q", "-m", f"snapshot: {','.join(names)}"], config)
        sha = _git(repo_root, ["rev-parse", "--short", "HEAD"]).stdout.strip()
    finally:
        if old_staged:
            _git(repo_root, ["add", "--", *old_staged], config)
    if config is not None:
        log_event(config, "info", "git", "commit", files=",".join(names), sha=sha)
    return sha
