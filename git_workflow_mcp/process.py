"""Subprocess execution shared by the git and gh wrappers."""

import logging
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)

MAX_OUTPUT_BYTES = 1024 * 1024  # 1 MiB


class CommandError(Exception):
    """An external command exited non-zero or could not be run."""

    def __init__(
        self,
        command: list[str],
        returncode: int | None,
        stdout: str = "",
        stderr: str = "",
        reason: str | None = None,
    ) -> None:
        self.command = command
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        reason = reason or f"exit code {returncode}"
        super().__init__(
            f"Command failed: {' '.join(command)} ({reason})\n"
            f"Stdout: {stdout.strip()}\n"
            f"Stderr: {stderr.strip()}"
        )


class OutputLimitExceeded(CommandError):
    """Captured output went over the configured cap."""


def run_command(
    args: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    timeout: float | None = None,
    max_output: int = MAX_OUTPUT_BYTES,
) -> subprocess.CompletedProcess:
    """Run an argument vector and return the completed process.

    Raises CommandError on a non-zero exit, a missing executable or a timeout,
    and OutputLimitExceeded when stdout plus stderr exceed ``max_output`` bytes.
    """
    logger.debug(f"Running {args} in {cwd}")
    try:
        result = subprocess.run(
            args,
            cwd=cwd,
            env=env,
            capture_output=True,
            text=True,
            timeout=timeout,
            encoding='utf-8',
            errors='replace',
        )
    except FileNotFoundError as e:
        raise CommandError(args, None, reason=f"executable not found: {e}") from e
    except subprocess.TimeoutExpired as e:
        raise CommandError(args, None, reason=f"timed out after {timeout}s") from e

    size = len(result.stdout.encode("utf-8")) + len(result.stderr.encode("utf-8"))
    if size > max_output:
        raise OutputLimitExceeded(
            args,
            result.returncode,
            reason=f"output of {size} bytes exceeds limit of {max_output}",
        )

    if result.returncode != 0:
        raise CommandError(args, result.returncode, result.stdout, result.stderr)

    return result
