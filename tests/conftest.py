import subprocess
from pathlib import Path
from typing import Callable

import pytest


def _git(cwd: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        check=True,
        capture_output=True,
        text=True,
    )
    return result.stdout.strip()


@pytest.fixture
def run_git() -> Callable[..., str]:
    return _git


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    """A work tree on ``main`` with one pushed commit and a bare ``origin``."""
    remote = tmp_path / "remote.git"
    work = tmp_path / "work"
    work.mkdir()

    _git(tmp_path, "init", "--bare", str(remote))
    _git(work, "init")
    _git(work, "symbolic-ref", "HEAD", "refs/heads/main")
    _git(work, "config", "user.email", "dev@example.com")
    _git(work, "config", "user.name", "Dev")
    _git(work, "config", "commit.gpgsign", "false")

    (work / "README.md").write_text("# demo\n", encoding="utf-8")
    _git(work, "add", "README.md")
    _git(work, "commit", "-m", "initial")
    _git(work, "remote", "add", "origin", str(remote))
    _git(work, "push", "origin", "main")
    return work
