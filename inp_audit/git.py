"""Git subprocess helpers."""

from __future__ import annotations

import logging
import shlex
from dataclasses import dataclass
from pathlib import Path
from subprocess import CalledProcessError, run

logger = logging.getLogger(__name__)


class GitError(RuntimeError):
    """Raised when git command execution fails."""


_STATUS_BY_CODE = {
    "A": "added",
    "C": "added",
    "M": "modified",
    "R": "modified",
    "T": "modified",
    "D": "deleted",
}


@dataclass(frozen=True, slots=True)
class ChangedFile:
    """A path touched by a diff and how it changed."""

    path: str
    status: str


def get_changed_files(repo: Path, diff_spec: str) -> list[ChangedFile]:
    """Return files changed by ``diff_spec`` (e.g. ``main...HEAD`` or ``HEAD~1``).

    Renames are reported as modified at their new path, copies as added. Only
    revisions and paths are accepted; option-like tokens raise ``GitError``.
    """
    try:
        args = shlex.split(diff_spec)
    except ValueError as exc:
        raise GitError(f"invalid diff specification: {exc}") from exc
    if not args:
        raise GitError("diff specification must not be empty")
    options = [arg for arg in args if arg.startswith("-")]
    if options:
        raise GitError(f"diff specification must only name revisions: {', '.join(options)}")
    output = _run_git(repo, ["diff", "--name-status", "--no-color", *args])
    changed = parse_name_status(output)
    logger.debug("git diff %s: %d changed files", diff_spec, len(changed))
    return changed


def parse_name_status(output: str) -> list[ChangedFile]:
    """Parse ``git diff --name-status`` output."""
    changed: list[ChangedFile] = []
    for line in output.splitlines():
        if not line.strip():
            continue
        parts = line.split("\t")
        code = parts[0][:1]
        status = _STATUS_BY_CODE.get(code)
        if status is None or len(parts) < 2:
            logger.debug("Skipping unrecognised name-status line: %r", line)
            continue
        changed.append(ChangedFile(path=parts[-1], status=status))
    return changed


def _run_git(repo: Path, args: list[str]) -> str:
    try:
        completed = run(
            ["git", *args],
            cwd=repo,
            check=True,
            capture_output=True,
            text=True,
        )
    except CalledProcessError as exc:
        stderr = (exc.stderr or "").strip()
        raise GitError(stderr or f"git {' '.join(args)} failed") from exc
    except FileNotFoundError as exc:
        raise GitError(f"git executable not found or repository missing: {exc}") from exc

    return completed.stdout
