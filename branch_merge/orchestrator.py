"""Merge every open pull request whose head branch matches a name.

One list call, then one merge call per exact match, strictly in the order
the API returned them. A failed merge is logged and recorded but never stops
the loop; anything raised by the list call propagates to the caller.
"""

import logging
from typing import Iterable, List

from branch_merge.adapters.base import GitPlatformAdapter, GitPlatformError
from branch_merge.models import MergeOutcome, PullRequest, RepoContext, RunResult

logger = logging.getLogger(__name__)

# Single page only; more open PRs with the same head are not considered.
MAX_PER_PAGE = 100


def select_exact_head(pull_requests: Iterable[PullRequest], branch: str) -> List[PullRequest]:
    """Keep pull requests whose head ref equals branch exactly.

    The API ``head`` filter can match more than intended, so nothing is
    merged without this check.
    """
    return [pr for pr in pull_requests if pr.head_ref == branch]


class MergeOrchestrator:
    """Lists open PRs for a head branch and merges each one."""

    def __init__(
        self,
        adapter: GitPlatformAdapter,
        repo: RepoContext,
        per_page: int = MAX_PER_PAGE,
        merge_method: str | None = None,
    ) -> None:
        self._adapter = adapter
        self._repo = repo
        self._per_page = min(per_page, MAX_PER_PAGE)
        self._merge_method = merge_method

    def find_pull_requests(self, branch: str) -> List[PullRequest]:
        """Open PRs in the repo whose head is exactly branch."""
        pulls = self._adapter.list_pull_requests(
            self._repo,
            state="open",
            head=self._repo.head_qualifier(branch),
            per_page=self._per_page,
        )
        return select_exact_head(pulls, branch)

    def merge_one(self, pr: PullRequest) -> MergeOutcome:
        """Attempt a single merge and report the outcome without raising."""
        logger.info("Attempting to merge PR #%s from %s into %s", pr.number, pr.head_ref, pr.base_ref)
        try:
            data = self._adapter.merge_pull_request(self._repo, pr.number, merge_method=self._merge_method)
        except GitPlatformError as e:
            logger.error("Failed to merge PR #%s (%s -> %s): %s", pr.number, pr.head_ref, pr.base_ref, e)
            return MergeOutcome(
                number=pr.number,
                head_ref=pr.head_ref,
                base_ref=pr.base_ref,
                merged=False,
                error=str(e),
            )
        logger.info("Successfully merged PR #%s", pr.number)
        return MergeOutcome(
            number=pr.number,
            head_ref=pr.head_ref,
            base_ref=pr.base_ref,
            merged=True,
            sha=data.get("sha"),
        )

    def run(self, branch: str) -> RunResult:
        logger.info("Scanning for PRs from branch: %s", branch)
        matched = self.find_pull_requests(branch)
        logger.info("Found %d PR(s) from branch %s", len(matched), branch)

        result = RunResult(pull_requests=matched)
        for pr in matched:
            result.outcomes.append(self.merge_one(pr))
        if result.failed:
            logger.warning(
                "%d of %d PR(s) from branch %s could not be merged",
                len(result.failed),
                len(matched),
                branch,
            )
        return result
