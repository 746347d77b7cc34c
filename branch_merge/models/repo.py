"""Target repository identity."""

from pydantic import BaseModel


class RepoContext(BaseModel):
    """Owner and name of the repository the run operates on."""

    owner: str
    name: str

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.name}"

    @classmethod
    def from_slug(cls, slug: str | None) -> "RepoContext":
        """Parse ``owner/name`` (the GITHUB_REPOSITORY form).

        Raises ValueError when the value is empty or not exactly two
        non-empty parts.
        """
        parts = (slug or "").strip().split("/")
        if len(parts) != 2 or not all(parts):
            raise ValueError(f"Invalid repository {slug!r}, expected 'owner/name'")
        return cls(owner=parts[0], name=parts[1])

    def head_qualifier(self, branch: str) -> str:
        """Value for the pulls ``head`` filter: ``owner:branch``."""
        return f"{self.owner}:{branch}"
