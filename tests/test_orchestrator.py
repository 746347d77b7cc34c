"""Tests for MergeOrchestrator (fake adapter or mocked session, no network)."""

import logging
from typing import Any, Dict, List
from unittest.mock import Mock, patch

import pytest

from branch_merge.adapters.base import GitPlatformAdapter, GitPlatformError
from branch_merge.adapters.github import GitHubAdapter
from branch_merge.models import PullRequest, RepoContext
from branch_merge.orchestrator import MAX_PER_PAGE, MergeOrchestrator, select_exact_head

REPO = RepoContext(owner="octo", name="repo")


def _pr(number: int, head: str, base: str = "main") -> PullRequest:
    return PullRequest.from_api(
        {
            "number": number,
            "state": "open",
            "head": {"ref": head},
            "base": {"ref": base},
        }
    )


class FakeAdapter(GitPlatformAdapter):
    """Records calls; merges fail for numbers listed in fail."""

    def __init__(
        self,
        pulls: List[PullRequest] | None = None,
        fail: Dict[int, str] | None = None,
        list_error: Exception | None = None,
    ) -> None:
        self.pulls = pulls or []
        self.fail = fail or {}
        self.list_error = list_error
        self.list_calls: List[Dict[str, Any]] = []
        self.merge_calls: List[tuple] = []

    def list_pull_requests(self, repo, state="open", head=None, per_page=100):
        self.list_calls.append({"repo": repo, "state": state, "head": head, "per_page": per_page})
        if self.list_error is not None:
            raise self.list_error
        return list(self.pulls)

    def merge_pull_request(self, repo, number, merge_method=None):
        self.merge_calls.append((number, merge_method))
        if number in self.fail:
            raise GitPlatformError(self.fail[number], status_code=405)
        return {"sha": f"sha{number}", "merged": True}


def test_select_exact_head() -> None:
    """Only exact head ref matches are kept, in order."""
    pulls = [_pr(1, "feature-x"), _pr(2, "feature-x-extra"), _pr(3, "feature-x")]
    assert [pr.number for pr in select_exact_head(pulls, "feature-x")] == [1, 3]


def test_exact_match_filtering_limits_merges() -> None:
    """Near-miss heads returned by the API are never merged."""
    adapter = FakeAdapter([_pr(1, "feature-x"), _pr(2, "feature-x-extra"), _pr(3, "feature-x")])

    result = MergeOrchestrator(adapter, REPO).run("feature-x")

    assert [n for n, _ in adapter.merge_calls] == [1, 3]
    assert [pr.number for pr in result.pull_requests] == [1, 3]


def test_list_call_arguments() -> None:
    """One list call: open state, owner-qualified head, page size 100."""
    adapter = FakeAdapter()

    MergeOrchestrator(adapter, REPO).run("feature-x")

    assert adapter.list_calls == [{"repo": REPO, "state": "open", "head": "octo:feature-x", "per_page": 100}]


def test_per_page_capped() -> None:
    """Page size never exceeds the single-page limit."""
    adapter = FakeAdapter()
    MergeOrchestrator(adapter, REPO, per_page=500).run("x")
    assert adapter.list_calls[0]["per_page"] == MAX_PER_PAGE


def test_merge_method_passed_through() -> None:
    adapter = FakeAdapter([_pr(1, "x")])
    MergeOrchestrator(adapter, REPO, merge_method="rebase").run("x")
    assert adapter.merge_calls == [(1, "rebase")]


def test_failed_merge_does_not_stop_loop(caplog: pytest.LogCaptureFixture) -> None:
    """First merge fails, second succeeds; both listed, one failure logged."""
    adapter = FakeAdapter([_pr(1, "feature-x"), _pr(2, "feature-x", base="dev")], fail={1: "405: merge conflict"})

    with caplog.at_level(logging.INFO, logger="branch_merge.orchestrator"):
        result = MergeOrchestrator(adapter, REPO).run("feature-x")

    assert [n for n, _ in adapter.merge_calls] == [1, 2]
    assert [pr.number for pr in result.pull_requests] == [1, 2]
    assert [o.number for o in result.failed] == [1]
    assert result.failed[0].error == "405: merge conflict"
    assert [o.number for o in result.merged] == [2]
    assert result.merged[0].sha == "sha2"

    errors = [r.getMessage() for r in caplog.records if r.levelno == logging.ERROR]
    assert errors == ["Failed to merge PR #1 (feature-x -> main): 405: merge conflict"]
    infos = [r.getMessage() for r in caplog.records if r.levelno == logging.INFO]
    assert infos[:2] == ["Scanning for PRs from branch: feature-x", "Found 2 PR(s) from branch feature-x"]
    assert "Attempting to merge PR #2 from feature-x into dev" in infos
    assert "Successfully merged PR #2" in infos
    assert "Successfully merged PR #1" not in infos


def test_list_error_aborts_before_merging() -> None:
    """An error from the list call propagates and no merge is attempted."""
    adapter = FakeAdapter([_pr(1, "x")], list_error=GitPlatformError("401: Bad credentials", status_code=401))

    with pytest.raises(GitPlatformError, match="Bad credentials"):
        MergeOrchestrator(adapter, REPO).run("x")
    assert adapter.merge_calls == []


def test_unexpected_merge_error_propagates() -> None:
    """Only platform errors are item-scoped."""

    class Broken(FakeAdapter):
        def merge_pull_request(self, repo, number, merge_method=None):
            raise RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        MergeOrchestrator(Broken([_pr(1, "x")]), REPO).run("x")


def test_empty_result() -> None:
    """No matches: no merge calls and an empty result."""
    adapter = FakeAdapter([_pr(1, "other")])

    result = MergeOrchestrator(adapter, REPO).run("feature-x")

    assert adapter.merge_calls == []
    assert result.pull_requests == []
    assert result.outcomes == []


def test_full_page_is_not_paginated() -> None:
    """Exactly 100 matches: all merged, list called once."""
    adapter = FakeAdapter([_pr(n, "bulk") for n in range(1, 101)])

    result = MergeOrchestrator(adapter, REPO).run("bulk")

    assert len(adapter.list_calls) == 1
    assert len(adapter.merge_calls) == 100
    assert len(result.merged) == 100


def test_result_list_independent_of_outcomes() -> None:
    """Every matched PR stays in the result even when all merges fail."""
    pulls = [_pr(1, "x"), _pr(2, "x")]
    adapter = FakeAdapter(pulls, fail={1: "conflict", 2: "protected"})

    result = MergeOrchestrator(adapter, REPO).run("x")

    assert [pr.to_api() for pr in result.pull_requests] == [pr.to_api() for pr in pulls]
    assert len(result.failed) == 2


def test_unreadable_merge_response_is_item_scoped() -> None:
    """A merge answered with a non-JSON body is recorded as failed and the loop continues."""
    adapter = GitHubAdapter(token="test-token")
    list_resp = Mock()
    list_resp.status_code = 200
    list_resp.json.return_value = [
        {"number": 1, "state": "open", "head": {"ref": "x"}, "base": {"ref": "main"}},
        {"number": 2, "state": "open", "head": {"ref": "x"}, "base": {"ref": "main"}},
    ]
    garbled = Mock()
    garbled.status_code = 200
    garbled.json.side_effect = ValueError("Expecting value")
    merged = Mock()
    merged.status_code = 200
    merged.json.return_value = {"sha": "abc", "merged": True}

    with patch.object(adapter._session, "request", side_effect=[list_resp, garbled, merged]) as req:
        result = MergeOrchestrator(adapter, REPO).run("x")

    urls = [c[0][1] for c in req.call_args_list]
    assert urls[1].endswith("/pulls/1/merge")
    assert urls[2].endswith("/pulls/2/merge")
    assert [o.number for o in result.failed] == [1]
    assert "invalid JSON response" in result.failed[0].error
    assert [o.number for o in result.merged] == [2]
    assert [pr.number for pr in result.pull_requests] == [1, 2]
