"""Abstract base for Git platform adapters."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List

from branch_merge.models import PullRequest, RepoContext


class GitPlatformError(Exception):
    """Raised when a Git platform API call fails."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class GitPlatformAdapter(ABC):
    """Interface for the two pull request calls the merge run needs."""

    @abstractmethod
    def list_pull_requests(
        self,
        repo: RepoContext,
        state: str = "open",
        head: str | None = None,
        per_page: int = 100,
    ) -> List[PullRequest]:
        """List pull requests (a single page, no pagination)."""
        ...

    @abstractmethod
    def merge_pull_request(
        self,
        repo: RepoContext,
        number: int,
        merge_method: str | None = None,
    ) -> Dict[str, Any]:
        """Merge a pull request; raise GitPlatformError when not merged."""
        ...
