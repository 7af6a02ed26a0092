"""Per-repository report as printed and exported by the CLI."""

from __future__ import annotations

from pydantic import BaseModel

from repo_transfer.models.facts import DiscoveredFacts
from repo_transfer.models.validation import MigrationValidation


class RepositoryReport(BaseModel):
    repository: str
    facts: DiscoveredFacts | None = None
    validation: MigrationValidation | None = None
    error: str | None = None
