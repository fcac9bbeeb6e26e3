import asyncio
import json
import logging
import sys
from typing import Any, Callable

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import CallToolResult, TextContent, Tool

from .config import ServerConfig
from .git import GitWorkflow, WorkflowResult
from .schemas import (
    CommitAndPushParams,
    CompleteWorkflowParams,
    CreatePullRequestParams,
    MergePullRequestParams,
)

logger = logging.getLogger(__name__)

SERVER_NAME = "git-workflow-server"

_WORKING_DIR = {
    "type": "string",
    "description": "Working directory path (defaults to current directory)"
}
_DRY_RUN = {
    "type": "boolean",
    "description": "Preview without executing",
    "default": False
}


class GitWorkflowMCPServer:

    def __init__(self, workflow: GitWorkflow | None = None, config: ServerConfig | None = None):
        self.config = config or ServerConfig()
        self._workflow = workflow or GitWorkflow.from_config(self.config)
        self._server = Server(SERVER_NAME)
        self._handlers: dict[str, Callable[[dict], WorkflowResult]] = {
            "git_commit_and_push": self._handle_commit_and_push,
            "create_pull_request": self._handle_create_pull_request,
            "merge_pull_request": self._handle_merge_pull_request,
            "complete_git_workflow": self._handle_complete_workflow,
        }
        self._register_handlers()

    def _register_handlers(self):
        self._server.list_tools()(self._list_tools)
        # arguments are validated by the pydantic models in the handlers
        self._server.call_tool(validate_input=False)(self._call_tool)

    async def _list_tools(self) -> list[Tool]:
        return [
            Tool(
                name="git_commit_and_push",
                description="Commit staged changes and push to remote repository",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "files": {
                            "type": "array",
                            "items": {"type": "string"},
                            "description": "Array of file paths to commit (empty for all changes)"
                        },
                        "commitMessage": {
                            "type": "string",
                            "description": "Commit message (use conventional commit format)"
                        },
                        "branch": {
                            "type": "string",
                            "description": "Branch name to create/switch to (optional)"
                        },
                        "workingDir": _WORKING_DIR,
                        "dryRun": _DRY_RUN,
                    },
                    "required": ["commitMessage"]
                }
            ),
            Tool(
                name="create_pull_request",
                description="Create a GitHub pull request with proper authentication handling",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "title": {
                            "type": "string",
                            "description": "Pull request title"
                        },
                        "body": {
                            "type": "string",
                            "description": "Pull request description"
                        },
                        "baseBranch": {
                            "type": "string",
                            "description": "Base branch (target)",
                            "default": "main"
                        },
                        "headBranch": {
                            "type": "string",
                            "description": "Head branch (source, defaults to current branch)"
                        },
                        "workingDir": _WORKING_DIR,
                        "dryRun": _DRY_RUN,
                    },
                    "required": ["title", "body"]
                }
            ),
            Tool(
                name="merge_pull_request",
                description="Merge a GitHub pull request",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "prNumber": {
                            "type": "string",
                            "pattern": "^\\d+$",
                            "description": "Pull request number"
                        },
                        "mergeMethod": {
                            "type": "string",
                            "enum": ["merge", "squash", "rebase"],
                            "description": "Merge method",
                            "default": "merge"
                        },
                        "deleteBranch": {
                            "type": "boolean",
                            "description": "Delete branch after merge",
                            "default": True
                        },
                        "workingDir": _WORKING_DIR,
                        "dryRun": _DRY_RUN,
                    },
                    "required": ["prNumber"]
                }
            ),
            Tool(
                name="complete_git_workflow",
                description="Execute complete Git workflow: commit, push, create PR, and optionally merge",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "files": {
                            "type": "array",
                            "items": {"type": "string"},
                            "description": "Files to commit (empty for all changes)"
                        },
                        "commitMessage": {
                            "type": "string",
                            "description": "Commit message (conventional format)"
                        },
                        "prTitle": {
                            "type": "string",
                            "description": "Pull request title"
                        },
                        "prBody": {
                            "type": "string",
                            "description": "Pull request description"
                        },
                        "branch": {
                            "type": "string",
                            "description": "Feature branch name"
                        },
                        "baseBranch": {
                            "type": "string",
                            "description": "Base branch",
                            "default": "main"
                        },
                        "autoMerge": {
                            "type": "boolean",
                            "description": "Automatically merge PR after creation",
                            "default": False
                        },
                        "workingDir": _WORKING_DIR,
                        "dryRun": _DRY_RUN,
                    },
                    "required": ["commitMessage", "prTitle", "prBody"]
                }
            ),
        ]

    async def _call_tool(self, name: str, arguments: dict | None) -> list[TextContent] | CallToolResult:
        try:
            handler = self._handlers.get(name)
            if handler is None:
                raise ValueError(f"Unknown tool: {name}")
            result = await asyncio.to_thread(handler, arguments or {})
        except Exception as e:
            logger.exception(f"Tool {name} failed")
            return self._error_response(str(e))

        return [TextContent(type="text", text=result.to_json())]

    @staticmethod
    def _error_response(error: str) -> CallToolResult:
        payload = {"success": False, "error": error}
        return CallToolResult(
            content=[TextContent(type="text", text=json.dumps(payload, indent=2))],
            isError=True,
        )

    def _handle_commit_and_push(self, arguments: dict[str, Any]) -> WorkflowResult:
        params = CommitAndPushParams.model_validate(arguments)
        return self._workflow.commit_and_push(params)

    def _handle_create_pull_request(self, arguments: dict[str, Any]) -> WorkflowResult:
        params = CreatePullRequestParams.model_validate(arguments)
        return self._workflow.create_pull_request(params)

    def _handle_merge_pull_request(self, arguments: dict[str, Any]) -> WorkflowResult:
        params = MergePullRequestParams.model_validate(arguments)
        return self._workflow.merge_pull_request(params)

    def _handle_complete_workflow(self, arguments: dict[str, Any]) -> WorkflowResult:
        params = CompleteWorkflowParams.model_validate(arguments)
        return self._workflow.complete(params)

    async def run(self):
        async with stdio_server() as (read_stream, write_stream):
            await self._server.run(read_stream, write_stream, self._server.create_initialization_options())


def configure_logging(level: str) -> None:
    # stdout carries the MCP stream
    logging.basicConfig(
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main():
    config = ServerConfig.load()
    configure_logging(config.log_level)
    server = GitWorkflowMCPServer(config=config)
    try:
        asyncio.run(server.run())
    except Exception:
        logger.exception("Git Workflow MCP Server error")
        sys.exit(1)


if __name__ == "__main__":
    main()
