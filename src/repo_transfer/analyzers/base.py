"""Base analyzer interface shared by every fact category."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable
from typing import TypeVar

from pydantic import BaseModel

from repo_transfer.client import GitHubClient
from repo_transfer.errors import FeatureAbsentError
from repo_transfer.models.context import OrganizationContext
from repo_transfer.models.facts import Category
from repo_transfer.models.repository import RepositoryRef

T = TypeVar("T")


class CategoryAnalyzer(ABC):
    """Produces the facts of one category for one repository.

    Analyzers read the shared organization context and never modify it.
    """

    category: Category

    @abstractmethod
    async def analyze(
        self,
        client: GitHubClient,
        repository: RepositoryRef,
        context: OrganizationContext,
    ) -> BaseModel:
        """Discover this category's facts."""
        ...


async def absent_as(query: Awaitable[T], default: T) -> T:
    """Await ``query``; a 403/404 yields ``default`` instead of an error."""
    try:
        return await query
    except FeatureAbsentError:
        return default
