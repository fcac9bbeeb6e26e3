"""Pydantic models for tool arguments."""

from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, Field, StringConstraints, field_validator
from pydantic.alias_generators import to_camel

from .github.cli import MergeMethod

DEFAULT_BASE_BRANCH = "main"


def _require_text(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be blank")
    return value


def _number_to_str(value: Any) -> Any:
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


NonBlankStr = Annotated[str, AfterValidator(_require_text)]
PullRequestNumber = Annotated[str, BeforeValidator(_number_to_str), StringConstraints(pattern=r"^\d+$")]


class ToolParams(BaseModel):
    """Arguments shared by every tool. Field names map to camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    working_dir: str | None = None
    dry_run: bool = False

    def echo(self) -> dict[str, Any]:
        """Parameters as reported back by a dry run."""
        return self.model_dump(mode="json", by_alias=True, exclude={"dry_run"})


class CommitAndPushParams(ToolParams):
    commit_message: NonBlankStr
    files: list[str] = Field(default_factory=list)
    branch: str | None = None

    @field_validator("files", mode="before")
    @classmethod
    def _default_files(cls, value: Any) -> Any:
        return [] if value is None else value


class CreatePullRequestParams(ToolParams):
    title: NonBlankStr
    body: str
    base_branch: str = DEFAULT_BASE_BRANCH
    head_branch: str | None = None

    @field_validator("base_branch", mode="before")
    @classmethod
    def _default_base(cls, value: Any) -> Any:
        return value or DEFAULT_BASE_BRANCH


class MergePullRequestParams(ToolParams):
    pr_number: PullRequestNumber
    merge_method: MergeMethod = MergeMethod.MERGE
    delete_branch: bool = True


class CompleteWorkflowParams(ToolParams):
    commit_message: NonBlankStr
    pr_title: NonBlankStr
    pr_body: str
    files: list[str] = Field(default_factory=list)
    branch: str | None = None
    base_branch: str = DEFAULT_BASE_BRANCH
    auto_merge: bool = False

    @field_validator("files", mode="before")
    @classmethod
    def _default_files(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("base_branch", mode="before")
    @classmethod
    def _default_base(cls, value: Any) -> Any:
        return value or DEFAULT_BASE_BRANCH
