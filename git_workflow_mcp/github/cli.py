"""GitHub CLI (gh) invocations with ambient auth tokens cleared."""

import logging
import os
import subprocess
import tempfile
from enum import Enum
from pathlib import Path

from ..process import MAX_OUTPUT_BYTES, run_command

logger = logging.getLogger(__name__)


class MergeMethod(str, Enum):
    MERGE = "merge"
    SQUASH = "squash"
    REBASE = "rebase"


MERGE_FLAGS = {
    MergeMethod.MERGE: "--merge",
    MergeMethod.SQUASH: "--squash",
    MergeMethod.REBASE: "--rebase",
}


class GitHubCLI:
    """Runs gh so that it falls back to its own stored credentials."""

    TOKEN_ENV_VARS = ("GH_TOKEN", "GITHUB_TOKEN")

    def __init__(
        self,
        executable: str = "gh",
        token_env_vars: list[str] | tuple[str, ...] = TOKEN_ENV_VARS,
        timeout: float | None = None,
        max_output: int = MAX_OUTPUT_BYTES,
    ) -> None:
        self.executable = executable
        self.token_env_vars = tuple(token_env_vars)
        self.timeout = timeout
        self.max_output = max_output

    def _clean_env(self) -> dict[str, str]:
        env = dict(os.environ)
        for name in self.token_env_vars:
            env.pop(name, None)
        return env

    def _run(self, args: list[str], cwd: Path) -> subprocess.CompletedProcess:
        return run_command(
            [self.executable, *args],
            cwd=cwd,
            env=self._clean_env(),
            timeout=self.timeout,
            max_output=self.max_output,
        )

    def create_pull_request(
        self, cwd: Path, title: str, body: str, base: str, head: str
    ) -> str:
        """Open a PR and return its URL.

        The body goes through a temporary file that is removed on every exit path.
        """
        body_file: Path | None = None
        try:
            with tempfile.NamedTemporaryFile(
                mode='w', prefix='gh-pr-body-', suffix='.txt', delete=False, encoding='utf-8'
            ) as f:
                body_file = Path(f.name)
                f.write(body)

            result = self._run(
                [
                    "pr", "create",
                    f"--title={title}",
                    f"--body-file={body_file}",
                    f"--base={base}",
                    f"--head={head}",
                ],
                cwd,
            )
        finally:
            if body_file is not None:
                try:
                    body_file.unlink(missing_ok=True)
                except OSError as e:
                    logger.warning(f"Could not remove PR body file {body_file}: {e}")

        return result.stdout.strip()

    @staticmethod
    def merge_args(pr_number: str, method: MergeMethod, delete_branch: bool) -> list[str]:
        args = ["pr", "merge", pr_number, MERGE_FLAGS[MergeMethod(method)]]
        if delete_branch:
            args.append("--delete-branch")
        return args

    def merge_pull_request(
        self, cwd: Path, pr_number: str, method: MergeMethod, delete_branch: bool
    ) -> str:
        result = self._run(self.merge_args(pr_number, method, delete_branch), cwd)
        return result.stdout
