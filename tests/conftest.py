from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest


def git(repo: Path, *args: str) -> str:
    cp = subprocess.run(["git", *args], cwd=repo, text=True, capture_output=True, check=True)
    return cp.stdout


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    """An initialised repository with one commit containing keep.txt and gone.txt."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")
    git(tmp_path, "init", "-q")
    git(tmp_path, "config", "user.name", "Test User")
    git(tmp_path, "config", "user.email", "test@example.com")
    git(tmp_path, "config", "commit.gpgsign", "false")
    (tmp_path / "keep.txt").write_text("one\ntwo\nthree\n", encoding="utf-8")
    (tmp_path / "gone.txt").write_text("bye\n", encoding="utf-8")
    git(tmp_path, "add", ".")
    git(tmp_path, "commit", "-q", "-m", "initial")
    return tmp_path


class FakeReader:
    """Stands in for ChangeSetReader; a value that is an exception gets raised."""

    def __init__(self, u0="", full="", stat="", names=""):
        self.outputs = {"u0": u0, "full": full, "stat": stat, "names": names}
        self.calls = []

    def _get(self, key):
        self.calls.append(key)
        value = self.outputs[key]
        if isinstance(value, BaseException):
            raise value
        return value

    def read_full_diff(self, unified=3):
        return self._get("u0" if unified == 0 else "full")

    def read_stat(self):
        return self._get("stat")

    def read_names(self):
        return self._get("names")


@pytest.fixture
def make_reader():
    return FakeReader
