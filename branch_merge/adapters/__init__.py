"""Git platform adapters."""

from branch_merge.adapters.base import GitPlatformAdapter, GitPlatformError
from branch_merge.adapters.github import GitHubAdapter

__all__ = ["GitPlatformAdapter", "GitPlatformError", "GitHubAdapter"]
