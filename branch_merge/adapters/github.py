"""GitHub REST API adapter."""

from typing import Any, Dict, List

import requests

from branch_merge.adapters.base import GitPlatformAdapter, GitPlatformError
from branch_merge.models import PullRequest, RepoContext

DEFAULT_API_URL = "https://api.github.com"
REQUEST_TIMEOUT = 30


def _error_message(resp: requests.Response) -> str:
    msg = resp.text or resp.reason or str(resp.status_code)
    try:
        body = resp.json()
    except ValueError:
        return msg
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return msg


def _json_body(resp: requests.Response, expected: type) -> Any:
    """Decoded body of a successful response; GitPlatformError if it is not the expected JSON type."""
    try:
        data = resp.json()
    except ValueError as e:
        raise GitPlatformError(f"{resp.status_code}: invalid JSON response: {e}", status_code=resp.status_code) from e
    if data is None:
        return expected()
    if not isinstance(data, expected):
        raise GitPlatformError(
            f"{resp.status_code}: expected JSON {expected.__name__}, got {type(data).__name__}",
            status_code=resp.status_code,
        )
    return data


class GitHubAdapter(GitPlatformAdapter):
    """GitHub API implementation."""

    def __init__(self, token: str, api_url: str = DEFAULT_API_URL) -> None:
        self._api_url = api_url.rstrip("/")
        self._session = requests.Session()
        self._session.headers["Authorization"] = f"token {token}"
        self._session.headers["Accept"] = "application/vnd.github.v3+json"

    def _request(
        self,
        method: str,
        path: str,
        params: Dict[str, Any] | None = None,
        json: Dict[str, Any] | None = None,
    ) -> requests.Response:
        url = f"{self._api_url}{path}" if path.startswith("/") else f"{self._api_url}/{path}"
        try:
            resp = self._session.request(method, url, params=params, json=json, timeout=REQUEST_TIMEOUT)
        except requests.RequestException as e:
            raise GitPlatformError(f"{method} {url} failed: {e}") from e
        if resp.status_code >= 400:
            raise GitPlatformError(f"{resp.status_code}: {_error_message(resp)}", status_code=resp.status_code)
        return resp

    def list_pull_requests(
        self,
        repo: RepoContext,
        state: str = "open",
        head: str | None = None,
        per_page: int = 100,
    ) -> List[PullRequest]:
        params: Dict[str, Any] = {"state": state, "per_page": per_page}
        if head is not None:
            params["head"] = head
        resp = self._request("GET", f"/repos/{repo.slug}/pulls", params=params)
        data = _json_body(resp, list)
        return [PullRequest.from_api(d) for d in data]

    def merge_pull_request(
        self,
        repo: RepoContext,
        number: int,
        merge_method: str | None = None,
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {}
        if merge_method:
            body["merge_method"] = merge_method
        resp = self._request("PUT", f"/repos/{repo.slug}/pulls/{number}/merge", json=body or None)
        data = _json_body(resp, dict)
        if data.get("merged") is False:
            raise GitPlatformError(data.get("message") or f"PR #{number} was not merged", status_code=resp.status_code)
        return data
