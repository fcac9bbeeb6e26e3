import logging
import re
from pathlib import Path

from ..config import ServerConfig
from ..github.cli import GitHubCLI, MergeMethod
from ..schemas import (
    CommitAndPushParams,
    CompleteWorkflowParams,
    CreatePullRequestParams,
    MergePullRequestParams,
)
from .contracts import WorkflowResult
from .operations import GitOperations

logger = logging.getLogger(__name__)


class GitWorkflow:
    """Commit, push, open and merge pull requests.

    Every operation returns a WorkflowResult and never raises. Nothing is
    rolled back when a later step fails: a local commit whose push failed stays
    committed, and a created PR stays open if its merge fails.
    """

    PR_NUMBER_PATTERN = re.compile(r"/pull/(\d+)$")

    def __init__(
        self,
        git: GitOperations | None = None,
        github: GitHubCLI | None = None,
        remote: str = "origin",
    ) -> None:
        self.git = git or GitOperations()
        self.github = github or GitHubCLI()
        self.remote = remote

    @classmethod
    def from_config(cls, config: ServerConfig) -> "GitWorkflow":
        git = GitOperations(
            executable=config.git_executable,
            timeout=config.command_timeout,
            max_output=config.max_output_bytes,
        )
        github = GitHubCLI(
            executable=config.gh_executable,
            token_env_vars=config.token_env_vars,
            timeout=config.command_timeout,
            max_output=config.max_output_bytes,
        )
        return cls(git=git, github=github, remote=config.remote)

    @staticmethod
    def _resolve_dir(working_dir: str | None) -> Path:
        return Path(working_dir) if working_dir else Path.cwd()

    def commit_and_push(self, params: CommitAndPushParams) -> WorkflowResult:
        failure = "Failed to commit and push"
        if params.dry_run:
            return WorkflowResult.ok("Dry run: Would commit and push changes", params.echo())

        try:
            project_path = self._resolve_dir(params.working_dir)
            logger.info(f"Committing in {project_path}")

            if not self.git.is_repository(project_path):
                return WorkflowResult.failed(failure, "Not a Git repository")

            pending = self.git.get_status(project_path)
            logger.debug(f"{len(pending)} paths with pending changes")

            if params.branch:
                error = self._switch_branch(project_path, params.branch)
                if error:
                    return WorkflowResult.failed(failure, error)

            self.git.stage(project_path, params.files)
            commit = self.git.commit(project_path, params.commit_message)

            branch = self.git.get_current_branch(project_path)
            self.git.push(project_path, self.remote, branch)
        except Exception as e:
            logger.warning(f"Commit and push failed: {e}")
            return WorkflowResult.failed(failure, str(e))

        logger.info(f"Pushed {commit.hash} to {self.remote}/{branch}")
        return WorkflowResult.ok(
            "Successfully committed and pushed changes",
            {
                "commit": commit.hash,
                "branch": branch,
                "files": commit.files_changed,
                "insertions": commit.insertions,
                "deletions": commit.deletions,
            },
        )

    def _switch_branch(self, project_path: Path, branch: str) -> str | None:
        """Create the branch, or switch to it if it exists. Returns an error or None."""
        try:
            self.git.create_branch(project_path, branch)
            return None
        except Exception as create_error:
            logger.debug(f"Could not create {branch}, trying checkout: {create_error}")

        try:
            self.git.checkout(project_path, branch)
        except Exception as e:
            return f"Failed to create or switch to branch {branch}: {e}"
        return None

    def create_pull_request(self, params: CreatePullRequestParams) -> WorkflowResult:
        if params.dry_run:
            return WorkflowResult.ok("Dry run: Would create pull request", params.echo())

        try:
            project_path = self._resolve_dir(params.working_dir)
            head_branch = params.head_branch or self.git.get_current_branch(project_path)
            logger.info(f"Creating pull request {head_branch} -> {params.base_branch}")

            url = self.github.create_pull_request(
                project_path,
                title=params.title,
                body=params.body,
                base=params.base_branch,
                head=head_branch,
            )
        except Exception as e:
            logger.warning(f"Pull request creation failed: {e}")
            return WorkflowResult.failed(
                "Failed to create pull request",
                f"Failed to create pull request: {e}",
            )

        return WorkflowResult.ok(
            "Successfully created pull request",
            {
                "url": url,
                "title": params.title,
                "baseBranch": params.base_branch,
                "headBranch": head_branch,
            },
        )

    def merge_pull_request(self, params: MergePullRequestParams) -> WorkflowResult:
        if params.dry_run:
            return WorkflowResult.ok("Dry run: Would merge pull request", params.echo())

        method = MergeMethod(params.merge_method)
        try:
            project_path = self._resolve_dir(params.working_dir)
            logger.info(f"Merging pull request #{params.pr_number} ({method.value})")
            output = self.github.merge_pull_request(
                project_path, params.pr_number, method, params.delete_branch
            )
        except Exception as e:
            logger.warning(f"Merge of #{params.pr_number} failed: {e}")
            return WorkflowResult.failed(
                "Failed to merge pull request",
                f"Failed to merge pull request: {e}",
            )

        return WorkflowResult.ok(
            "Successfully merged pull request",
            {
                "prNumber": params.pr_number,
                "mergeMethod": method.value,
                "output": output,
            },
        )

    @classmethod
    def extract_pr_number(cls, url: str) -> str | None:
        match = cls.PR_NUMBER_PATTERN.search(url)
        return match.group(1) if match else None

    def complete(self, params: CompleteWorkflowParams) -> WorkflowResult:
        """Commit and push, open a PR, then merge it when auto_merge is set.

        Stops at the first failing step and returns that step's result as-is.
        """
        if params.dry_run:
            return WorkflowResult.ok("Dry run: Would execute complete Git workflow", params.echo())

        try:
            commit_result = self.commit_and_push(CommitAndPushParams(
                files=params.files,
                commit_message=params.commit_message,
                branch=params.branch,
                working_dir=params.working_dir,
            ))
            if not commit_result.success:
                return commit_result

            pr_result = self.create_pull_request(CreatePullRequestParams(
                title=params.pr_title,
                body=params.pr_body,
                base_branch=params.base_branch,
                head_branch=params.branch,
                working_dir=params.working_dir,
            ))
            if not pr_result.success:
                return pr_result

            merge_result = None
            url = pr_result.details.get("url") if pr_result.details else None
            if params.auto_merge and url:
                pr_number = self.extract_pr_number(url)
                if pr_number is None:
                    logger.info(f"Skipping auto-merge, no PR number in {url!r}")
                else:
                    merge_result = self.merge_pull_request(MergePullRequestParams(
                        pr_number=pr_number,
                        merge_method=MergeMethod.MERGE,
                        delete_branch=True,
                        working_dir=params.working_dir,
                    ))
                    if not merge_result.success:
                        return merge_result
        except Exception as e:
            logger.exception("Git workflow failed")
            return WorkflowResult.failed("Git workflow failed", f"Git workflow failed: {e}")

        return WorkflowResult.ok(
            "Successfully completed Git workflow",
            {
                "commit": commit_result.details,
                "pullRequest": pr_result.details,
                "merge": merge_result.details if merge_result else None,
            },
        )
