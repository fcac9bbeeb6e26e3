import logging
import re
import subprocess
from pathlib import Path

from ..process import MAX_OUTPUT_BYTES, CommandError, run_command
from .contracts import CommitResult

logger = logging.getLogger(__name__)


class GitOperations:
    """Thin wrapper over the git executable. Every call is scoped to a working directory."""

    SHORTSTAT_PATTERN = re.compile(
        r"(\d+) files? changed"
        r"(?:, (\d+) insertions?\(\+\))?"
        r"(?:, (\d+) deletions?\(-\))?"
    )

    def __init__(
        self,
        executable: str = "git",
        timeout: float | None = None,
        max_output: int = MAX_OUTPUT_BYTES,
    ) -> None:
        self.executable = executable
        self.timeout = timeout
        self.max_output = max_output

    def _run(self, args: list[str], cwd: Path) -> subprocess.CompletedProcess:
        return run_command(
            [self.executable, *args],
            cwd=cwd,
            timeout=self.timeout,
            max_output=self.max_output,
        )

    def is_repository(self, project_path: Path) -> bool:
        if not project_path.is_dir():
            return False
        try:
            result = self._run(["rev-parse", "--is-inside-work-tree"], project_path)
        except CommandError:
            return False
        return result.stdout.strip() == "true"

    def get_status(self, project_path: Path) -> list[str]:
        """Paths with pending changes, from porcelain status."""
        result = self._run(["status", "--porcelain"], project_path)
        return [line[3:] for line in result.stdout.splitlines() if line]

    def create_branch(self, project_path: Path, branch: str) -> None:
        self._run(["checkout", "-b", branch, "HEAD"], project_path)

    def checkout(self, project_path: Path, branch: str) -> None:
        self._run(["checkout", branch], project_path)

    def stage(self, project_path: Path, files: list[str]) -> None:
        if files:
            self._run(["add", "--", *files], project_path)
        else:
            self._run(["add", "-A"], project_path)

    def commit(self, project_path: Path, message: str) -> CommitResult:
        self._run(["commit", "-m", message], project_path)

        # commit stdout echoes the message, so counts come from the commit itself
        stat_result = self._run(["show", "--shortstat", "--format=", "HEAD"], project_path)
        files_changed, insertions, deletions = self.parse_shortstat(stat_result.stdout)

        hash_result = self._run(["rev-parse", "--short", "HEAD"], project_path)
        commit_hash = hash_result.stdout.strip() or None

        return CommitResult(
            hash=commit_hash,
            files_changed=files_changed,
            insertions=insertions,
            deletions=deletions,
        )

    def get_current_branch(self, project_path: Path) -> str:
        result = self._run(["rev-parse", "--abbrev-ref", "HEAD"], project_path)
        return result.stdout.strip()

    def push(self, project_path: Path, remote: str, branch: str) -> None:
        self._run(["push", remote, branch], project_path)

    @classmethod
    def parse_shortstat(cls, output: str) -> tuple[int, int, int]:
        """Extract (files changed, insertions, deletions) from a commit summary."""
        match = cls.SHORTSTAT_PATTERN.search(output)
        if not match:
            return 0, 0, 0
        return tuple(int(group or 0) for group in match.groups())
