from __future__ import annotations

import logging
import subprocess
import tempfile
from pathlib import Path
from typing import IO, Iterable, List, Optional, Union, cast

from .errors import CommitError, GitNotFoundError, VcsQueryError

logger = logging.getLogger(__name__)

# Safety rail against runaway output; budget enforcement happens in prepare.py.
MAX_OUTPUT_BYTES = 50 * 1024 * 1024
_READ_CHUNK = 64 * 1024

PathLike = Union[str, Path]


# -----------------------------
# Process helpers
# -----------------------------

def run_git(*args: str, cwd: Optional[PathLike] = None, max_bytes: int = MAX_OUTPUT_BYTES) -> str:
    """Run a git command and return its stdout decoded as UTF-8.

    Raises VcsQueryError on a non-zero exit or when stdout grows past
    ``max_bytes``; GitNotFoundError when git cannot be spawned at all.
    """
    cmd = ["git", *args]
    logger.debug("running: %s (cwd=%s)", " ".join(cmd), cwd or ".")

    # stderr goes to a file so a chatty child can never block on a full pipe
    # while we are still draining stdout.
    with tempfile.TemporaryFile() as err_file:
        try:
            proc = subprocess.Popen(
                cmd,
                cwd=str(cwd) if cwd is not None else None,
                stdout=subprocess.PIPE,
                stderr=err_file,
            )
        except FileNotFoundError as e:
            raise GitNotFoundError(f"Could not run git: {e}") from e

        chunks: List[bytes] = []
        size = 0
        with proc:
            stdout = cast(IO[bytes], proc.stdout)
            while True:
                chunk = stdout.read(_READ_CHUNK)
                if not chunk:
                    break
                size += len(chunk)
                if size > max_bytes:
                    proc.kill()
                    raise VcsQueryError(
                        f"git output exceeded {max_bytes} bytes: {' '.join(cmd)}",
                        command=cmd,
                    )
                chunks.append(chunk)
            returncode = proc.wait()

        err_file.seek(0)
        stderr = err_file.read().decode("utf-8", errors="replace").strip()

    if returncode != 0:
        raise VcsQueryError(
            stderr or f"{' '.join(cmd)} exited with status {returncode}",
            command=cmd,
            returncode=returncode,
            stderr=stderr,
        )
    return b"".join(chunks).decode("utf-8", errors="replace")


# -----------------------------
# Pathspec
# -----------------------------

def build_pathspec(directory: Optional[PathLike], excludes: Iterable[str]) -> List[str]:
    """Root scope first, then one ``:(exclude)`` token per pattern, order kept."""
    root = str(directory).strip() if directory is not None else ""
    return [root or "."] + [f":(exclude){p}" for p in excludes]


# -----------------------------
# Staged change queries
# -----------------------------

class ChangeSetReader:
    """Staged-change queries against the index, scoped by a pathspec."""

    def __init__(self, pathspec: List[str], cwd: Optional[PathLike] = None):
        self.pathspec = list(pathspec)
        self.cwd = cwd

    def _git(self, *args: str) -> str:
        return run_git(*args, "--", *self.pathspec, cwd=self.cwd)

    def read_full_diff(self, unified: int = 3) -> str:
        return self._git("diff", "--cached", f"-U{unified}", "--no-ext-diff", "--find-renames")

    def read_stat(self) -> str:
        return self._git("diff", "--cached", "--stat", "--no-ext-diff", "--find-renames")

    def read_names(self) -> str:
        # Deleted files are left out: their content cannot inform a summary.
        return self._git("diff", "--cached", "--name-only", "--diff-filter=ACMRT")


# -----------------------------
# Commit
# -----------------------------

def commit_changes(message: str, cwd: Optional[PathLike] = None) -> None:
    """Commit currently staged changes only (no git add)."""
    try:
        run_git("commit", "-m", message, cwd=cwd)
    except VcsQueryError as e:
        raise CommitError("git commit failed", stderr=e.stderr) from e
