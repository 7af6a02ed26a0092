"""Repository identifiers."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from repo_transfer.errors import MalformedRepositoryError


class RepositoryRef(BaseModel):
    """A repository split into its owning organization and its name."""

    model_config = ConfigDict(frozen=True)

    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


def parse_repository(identifier: str) -> RepositoryRef:
    """Split ``owner/name``; anything else raises MalformedRepositoryError."""
    parts = identifier.split("/")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise MalformedRepositoryError(identifier)
    return RepositoryRef(owner=parts[0], name=parts[1])
