"""Pull request model as returned by the pulls listing endpoint."""

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict


class BranchRef(BaseModel):
    """Head or base side of a pull request."""

    model_config = ConfigDict(extra="allow")

    ref: str
    label: str | None = None
    sha: str | None = None


class PullRequest(BaseModel):
    """Open pull request.

    Only the fields the merge run relies on are typed. Anything else the
    API returns is kept untouched so the record can be emitted as received.
    """

    model_config = ConfigDict(extra="allow")

    number: int
    state: str
    head: BranchRef
    base: BranchRef
    title: str | None = None
    html_url: str | None = None

    @property
    def head_ref(self) -> str:
        return self.head.ref

    @property
    def base_ref(self) -> str:
        return self.base.ref

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "PullRequest":
        """Build from an API payload item."""
        return cls.model_validate(data)

    def to_api(self) -> Dict[str, Any]:
        """Dump back to the API shape, pass-through fields included."""
        return self.model_dump(mode="json", exclude_unset=True)
