"""Per-item merge outcomes and the overall run result."""

from typing import List

from pydantic import BaseModel, Field

from branch_merge.models.pr import PullRequest


class MergeOutcome(BaseModel):
    """Result of one merge attempt."""

    number: int
    head_ref: str
    base_ref: str
    merged: bool
    sha: str | None = None
    error: str | None = None


class RunResult(BaseModel):
    """Matched pull requests and what happened to each.

    ``pull_requests`` is the exact-match list as received from the API and is
    never adjusted for merge outcome; ``outcomes`` follows the same order.
    """

    pull_requests: List[PullRequest] = Field(default_factory=list)
    outcomes: List[MergeOutcome] = Field(default_factory=list)

    @property
    def merged(self) -> List[MergeOutcome]:
        return [o for o in self.outcomes if o.merged]

    @property
    def failed(self) -> List[MergeOutcome]:
        return [o for o in self.outcomes if not o.merged]
