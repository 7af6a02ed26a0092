"""Access: teams, direct collaborators, and CODEOWNERS requirements."""

from __future__ import annotations

import asyncio

from repo_transfer.analyzers.base import CategoryAnalyzer, absent_as
from repo_transfer.analyzers.code import decode_content
from repo_transfer.client import GitHubClient
from repo_transfer.models.context import OrganizationContext
from repo_transfer.models.facts import AccessFacts, Category
from repo_transfer.models.github import Collaborator, FileContent, Team
from repo_transfer.models.repository import RepositoryRef

# Searched in this order; GitHub uses the first one it finds.
CODEOWNERS_LOCATIONS = (".github/CODEOWNERS", "CODEOWNERS", "docs/CODEOWNERS")


def codeowners_requirements(text: str) -> list[str]:
    """Distinct owners named in a CODEOWNERS file, in first-seen order.

    ``@org/team`` becomes ``"Team: @org/team"``, ``@login`` becomes
    ``"User: @login"``. Email owners are ignored.
    """
    requirements: list[str] = []
    for line in text.splitlines():
        line = line.split("#", 1)[0].strip()
        if not line:
            continue
        for token in line.split()[1:]:
            if not token.startswith("@"):
                continue
            entry = f"Team: {token}" if "/" in token else f"User: {token}"
            if entry not in requirements:
                requirements.append(entry)
    return requirements


class AccessAnalyzer(CategoryAnalyzer):
    category = Category.ACCESS

    async def analyze(
        self,
        client: GitHubClient,
        repository: RepositoryRef,
        context: OrganizationContext,
    ) -> AccessFacts:
        base = f"repos/{repository.full_name}"
        teams, collaborators, codeowners = await asyncio.gather(
            absent_as(client.get_as(f"{base}/teams", list[Team]), []),
            absent_as(
                client.get_as(
                    f"{base}/collaborators", list[Collaborator], params={"affiliation": "direct"}
                ),
                [],
            ),
            self._codeowners(client, repository),
        )
        return AccessFacts(
            teams=[f"{team.name} ({team.permission or 'unknown'})" for team in teams],
            individual_collaborators=[f"{c.login} ({c.permission})" for c in collaborators],
            codeowners_requirements=codeowners,
        )

    async def _codeowners(self, client: GitHubClient, repository: RepositoryRef) -> list[str]:
        for location in CODEOWNERS_LOCATIONS:
            file = await absent_as(
                client.get_as(f"repos/{repository.full_name}/contents/{location}", FileContent),
                None,
            )
            if file is not None:
                return codeowners_requirements(decode_content(file))
        return []
