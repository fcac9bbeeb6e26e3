"""Tests for GitHubCLI argument construction, token clearing and body file handling."""

import subprocess
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from git_workflow_mcp.github.cli import GitHubCLI, MergeMethod
from git_workflow_mcp.process import CommandError

RUN_COMMAND = "git_workflow_mcp.github.cli.run_command"


def _completed(args: list[str], stdout: str = "") -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(args, 0, stdout=stdout, stderr="")


def _body_file(args: list[str]) -> Path:
    prefix = "--body-file="
    return Path(next(arg[len(prefix):] for arg in args if arg.startswith(prefix)))


@pytest.fixture
def cli() -> GitHubCLI:
    return GitHubCLI()


class TestEnvironment:
    def test_token_variables_removed(self, cli: GitHubCLI, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GH_TOKEN", "stale")
        monkeypatch.setenv("GITHUB_TOKEN", "wrong-scope")
        monkeypatch.setenv("KEPT_VAR", "kept")
        env = cli._clean_env()
        assert "GH_TOKEN" not in env
        assert "GITHUB_TOKEN" not in env
        assert env["KEPT_VAR"] == "kept"

    def test_parent_environment_untouched(self, cli: GitHubCLI, monkeypatch: pytest.MonkeyPatch) -> None:
        import os
        monkeypatch.setenv("GH_TOKEN", "stale")
        cli._clean_env()
        assert os.environ["GH_TOKEN"] == "stale"

    def test_every_invocation_uses_cleaned_env(self, cli: GitHubCLI, tmp_path: Path,
                                               monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GH_TOKEN", "stale")
        with patch(RUN_COMMAND, return_value=_completed([], "done")) as run:
            cli.merge_pull_request(tmp_path, "3", MergeMethod.MERGE, True)
        assert "GH_TOKEN" not in run.call_args.kwargs["env"]


class TestCreatePullRequest:
    def test_builds_argument_vector_with_body_file(self, cli: GitHubCLI, tmp_path: Path) -> None:
        seen: dict = {}

        def fake_run(args, cwd, env, timeout, max_output):
            body_file = _body_file(args)
            seen["args"] = args
            seen["body"] = body_file.read_text(encoding="utf-8")
            seen["cwd"] = cwd
            return _completed(args, "https://github.com/org/repo/pull/42\n")

        title = 'fix: handle "quotes" and $(whoami) `ticks`'
        body = "Line one\n\n- it's got 'quotes' & $VARS\n"
        with patch(RUN_COMMAND, side_effect=fake_run):
            url = cli.create_pull_request(tmp_path, title, body, "main", "feature/x")

        assert url == "https://github.com/org/repo/pull/42"
        assert seen["body"] == body
        assert seen["cwd"] == tmp_path
        args = seen["args"]
        assert args[:3] == ["gh", "pr", "create"]
        assert f"--title={title}" in args
        assert "--base=main" in args
        assert "--head=feature/x" in args
        assert not any(arg.startswith("--body=") or arg == "--body" for arg in args)

    def test_dash_prefixed_title_stays_a_flag_value(self, cli: GitHubCLI, tmp_path: Path) -> None:
        with patch(RUN_COMMAND, return_value=_completed([], "url")) as run:
            cli.create_pull_request(tmp_path, "--help", "b", "main", "x")
        args = run.call_args.args[0]
        assert "--title=--help" in args
        assert "--help" not in args

    def test_body_file_removed_after_success(self, cli: GitHubCLI, tmp_path: Path) -> None:
        paths: list[Path] = []

        def fake_run(args, **kwargs):
            paths.append(_body_file(args))
            return _completed(args, "url")

        with patch(RUN_COMMAND, side_effect=fake_run):
            cli.create_pull_request(tmp_path, "t", "b", "main", "x")

        assert paths and not paths[0].exists()

    def test_body_file_removed_after_failure(self, cli: GitHubCLI, tmp_path: Path) -> None:
        paths: list[Path] = []

        def fake_run(args, **kwargs):
            path = _body_file(args)
            assert path.exists()
            paths.append(path)
            raise CommandError(args, 1, stderr="authentication required")

        with patch(RUN_COMMAND, side_effect=fake_run):
            with pytest.raises(CommandError):
                cli.create_pull_request(tmp_path, "t", "b", "main", "x")

        assert paths and not paths[0].exists()

    def test_body_file_removed_when_write_fails(self, cli: GitHubCLI, tmp_path: Path,
                                                monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(tempfile, "tempdir", str(tmp_path))
        with patch(RUN_COMMAND) as run:
            with pytest.raises(UnicodeEncodeError):
                cli.create_pull_request(tmp_path, "t", "bad \ud800 body", "main", "x")
        run.assert_not_called()
        assert list(tmp_path.glob("gh-pr-body-*")) == []


class TestMergeArgs:
    @pytest.mark.parametrize("method, flag", [
        (MergeMethod.MERGE, "--merge"),
        (MergeMethod.SQUASH, "--squash"),
        (MergeMethod.REBASE, "--rebase"),
    ])
    def test_method_flag(self, method: MergeMethod, flag: str) -> None:
        assert GitHubCLI.merge_args("42", method, True) == ["pr", "merge", "42", flag, "--delete-branch"]

    def test_delete_branch_false_omits_flag(self) -> None:
        assert GitHubCLI.merge_args("42", MergeMethod.SQUASH, False) == ["pr", "merge", "42", "--squash"]

    def test_merge_returns_raw_stdout(self, cli: GitHubCLI, tmp_path: Path) -> None:
        with patch(RUN_COMMAND, return_value=_completed([], "Merged pull request #42\n")) as run:
            output = cli.merge_pull_request(tmp_path, "42", MergeMethod.REBASE, False)
        assert output == "Merged pull request #42\n"
        assert run.call_args.args[0] == ["gh", "pr", "merge", "42", "--rebase"]
