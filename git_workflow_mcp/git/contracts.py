import json
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class CommitResult:
    hash: str | None
    files_changed: int
    insertions: int
    deletions: int


@dataclass(frozen=True)
class WorkflowResult:
    """Outcome of one tool invocation.

    ``error`` is present exactly when ``success`` is false, and a failed
    result never carries ``details``.
    """
    success: bool
    message: str
    details: dict[str, Any] | None = None
    error: str | None = None

    def __post_init__(self) -> None:
        if self.success and self.error is not None:
            raise ValueError("successful result cannot carry an error")
        if not self.success and not self.error:
            raise ValueError("failed result requires a non-empty error")
        if not self.success and self.details is not None:
            raise ValueError("failed result cannot carry details")

    @classmethod
    def ok(cls, message: str, details: dict[str, Any] | None = None) -> "WorkflowResult":
        return cls(success=True, message=message, details=details)

    @classmethod
    def failed(cls, message: str, error: str) -> "WorkflowResult":
        return cls(success=False, message=message, error=error or message)

    def to_dict(self) -> dict:
        data: dict[str, Any] = {"success": self.success, "message": self.message}
        if self.details is not None:
            data["details"] = self.details
        if self.error is not None:
            data["error"] = self.error
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)
