"""Security: organization security campaigns that cover the repository."""

from __future__ import annotations

from repo_transfer.analyzers.base import CategoryAnalyzer
from repo_transfer.client import GitHubClient
from repo_transfer.models.context import OrganizationContext
from repo_transfer.models.facts import Category, SecurityFacts
from repo_transfer.models.repository import RepositoryRef


class SecurityAnalyzer(CategoryAnalyzer):
    """Campaigns are org-wide, so this reads the cached context and makes no calls."""

    category = Category.SECURITY

    async def analyze(
        self,
        client: GitHubClient,
        repository: RepositoryRef,
        context: OrganizationContext,
    ) -> SecurityFacts:
        return SecurityFacts(security_campaigns=list(context.security_campaigns))
