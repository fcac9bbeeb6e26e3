from .server import GitWorkflowMCPServer, main
from .config import ServerConfig
from .git import GitWorkflow, GitOperations, WorkflowResult
from .github import GitHubCLI, MergeMethod

__all__ = [
    "GitWorkflowMCPServer",
    "ServerConfig",
    "GitWorkflow",
    "GitOperations",
    "WorkflowResult",
    "GitHubCLI",
    "MergeMethod",
    "main"
]
