"""Data models for pull requests, repositories and run results (Pydantic)."""

from branch_merge.models.pr import BranchRef, PullRequest
from branch_merge.models.repo import RepoContext
from branch_merge.models.result import MergeOutcome, RunResult

__all__ = ["BranchRef", "MergeOutcome", "PullRequest", "RepoContext", "RunResult"]
