"""GitHub CLI integration."""

from .cli import GitHubCLI, MergeMethod, MERGE_FLAGS

__all__ = ["GitHubCLI", "MergeMethod", "MERGE_FLAGS"]
