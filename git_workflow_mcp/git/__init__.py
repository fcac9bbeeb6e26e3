from .contracts import CommitResult, WorkflowResult
from .operations import GitOperations
from .workflow import GitWorkflow

__all__ = [
    "CommitResult",
    "WorkflowResult",
    "GitOperations",
    "GitWorkflow",
]
