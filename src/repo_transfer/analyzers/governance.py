"""Repository-level governance: templates and required status checks.

Organization policies and rulesets come from the shared context; the batch
analyzer merges them with what this analyzer finds.
"""

from __future__ import annotations

import asyncio
from urllib.parse import quote

from repo_transfer.analyzers.base import CategoryAnalyzer, absent_as
from repo_transfer.client import GitHubClient
from repo_transfer.models.context import OrganizationContext
from repo_transfer.models.facts import Category, GovernanceFacts
from repo_transfer.models.github import Branch, BranchProtection
from repo_transfer.models.repository import RepositoryRef

ISSUE_TEMPLATE_LOCATIONS = (
    ".github/ISSUE_TEMPLATE",
    ".github/issue_template.md",
    "ISSUE_TEMPLATE.md",
)
PR_TEMPLATE_LOCATIONS = (
    ".github/pull_request_template.md",
    ".github/PULL_REQUEST_TEMPLATE.md",
    "pull_request_template.md",
    "PULL_REQUEST_TEMPLATE.md",
)


async def first_existing(client: GitHubClient, owner: str, repo: str, locations: tuple[str, ...]) -> str | None:
    """First of ``locations`` present in ``owner/repo``, or None."""
    for location in locations:
        if await client.exists(f"repos/{owner}/{repo}/contents/{location}"):
            return location
    return None


class GovernanceAnalyzer(CategoryAnalyzer):
    category = Category.GOVERNANCE

    async def analyze(
        self,
        client: GitHubClient,
        repository: RepositoryRef,
        context: OrganizationContext,
    ) -> GovernanceFacts:
        issue, pull_request, checks = await asyncio.gather(
            first_existing(client, repository.owner, repository.name, ISSUE_TEMPLATE_LOCATIONS),
            first_existing(client, repository.owner, repository.name, PR_TEMPLATE_LOCATIONS),
            self._required_status_checks(client, repository),
        )
        return GovernanceFacts(
            issue_templates=[f"Issue template: {issue}"] if issue else [],
            pull_request_templates=[f"PR template: {pull_request}"] if pull_request else [],
            required_status_checks=checks,
        )

    async def _required_status_checks(self, client: GitHubClient, repository: RepositoryRef) -> list[str]:
        base = f"repos/{repository.full_name}/branches"
        branches = await absent_as(
            client.get_as(base, list[Branch], params={"protected": "true"}), []
        )
        protected = [branch for branch in branches if branch.protected]
        protections = await asyncio.gather(
            *(
                absent_as(client.get_as(f"{base}/{quote(branch.name, safe='')}/protection", BranchProtection), None)
                for branch in protected
            )
        )

        checks: list[str] = []
        for branch, protection in zip(protected, protections, strict=True):
            required = protection.required_status_checks if protection else None
            if required is None:
                continue
            contexts = list(required.contexts)
            contexts.extend(c.context for c in required.checks if c.context not in contexts)
            checks.extend(f"{context} (branch: {branch.name})" for context in contexts)
        return checks
