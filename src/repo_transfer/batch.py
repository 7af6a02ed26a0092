"""Batch analysis of many repositories that share one organization.

Phase 1 loads organization-wide facts once, with all loaders running
concurrently, and freezes them into an :class:`OrganizationContext`. Phase 2
starts only after that join and analyzes every repository in parallel against
the same read-only context. Results keep the order of the input.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import BaseModel, ConfigDict

from repo_transfer.analyzers import CategoryAnalyzer, default_analyzers
from repo_transfer.analyzers.org_level import (
    load_apps,
    load_governance,
    load_org_info,
    load_security_campaigns,
    with_settings_policies,
)
from repo_transfer.client import GitHubClient
from repo_transfer.errors import MalformedRepositoryError
from repo_transfer.models.context import OrganizationContext, OrgGovernance
from repo_transfer.models.facts import (
    AccessFacts,
    Category,
    CIFacts,
    CodeFacts,
    DegradedCategory,
    DiscoveredFacts,
    GovernanceFacts,
    IntegrationFacts,
    SecurityFacts,
)
from repo_transfer.models.repository import RepositoryRef, parse_repository
from repo_transfer.rulesets import policy_applies

logger = logging.getLogger(__name__)

# Loader name -> category left incomplete when that loader fails.
_LOADER_CATEGORIES = {
    "apps": Category.INTEGRATIONS,
    "governance": Category.GOVERNANCE,
    "security_campaigns": Category.SECURITY,
    "org_info": Category.GOVERNANCE,
}


class BatchResult(BaseModel):
    """Outcome for one input identifier: facts, or the reason there are none."""

    model_config = ConfigDict(frozen=True)

    repository: str
    facts: DiscoveredFacts | None = None
    error: str | None = None


# ---------------------------------------------------------------------------
# Phase 1
# ---------------------------------------------------------------------------


class OrganizationContextBuilder:
    """Runs the organization loaders and returns the snapshot after all of them finish."""

    def __init__(self, client: GitHubClient, organization: str) -> None:
        self._client = client
        self._organization = organization

    async def build(self) -> OrganizationContext:
        loaders: dict[str, Callable[[GitHubClient, str], Awaitable[Any]]] = {
            "apps": load_apps,
            "governance": load_governance,
            "security_campaigns": load_security_campaigns,
            "org_info": load_org_info,
        }
        loaded: dict[str, Any] = {}
        errors: dict[str, str] = {}

        async def run(name: str, loader: Callable[[GitHubClient, str], Awaitable[Any]]) -> None:
            try:
                loaded[name] = await loader(self._client, self._organization)
            except Exception as exc:
                logger.debug("Loader %s failed for %s: %s", name, self._organization, exc)
                errors[name] = str(exc) or type(exc).__name__

        logger.debug("Loading organization context for %s", self._organization)
        async with asyncio.TaskGroup() as group:
            for name, loader in loaders.items():
                group.create_task(run(name, loader))

        org_info = loaded.get("org_info")
        return OrganizationContext(
            organization=self._organization,
            apps=loaded.get("apps", ()),
            governance=with_settings_policies(loaded.get("governance", OrgGovernance()), org_info),
            security_campaigns=loaded.get("security_campaigns", ()),
            org_info=org_info,
            load_errors=errors,
        )


# ---------------------------------------------------------------------------
# Phase 2
# ---------------------------------------------------------------------------


class BatchAnalyzer:
    """Analyze repositories of one organization against a shared context."""

    def __init__(
        self,
        client: GitHubClient,
        analyzers: list[CategoryAnalyzer] | None = None,
    ) -> None:
        self._client = client
        self._analyzers = analyzers if analyzers is not None else default_analyzers()

    async def analyze_many(self, repositories: list[str]) -> list[BatchResult]:
        """One result per input, at the input's position.

        The organization is taken from the first well-formed identifier;
        identifiers from any other owner are reported as errors.
        """
        if not repositories:
            raise ValueError("no repositories provided")

        owner = _first_owner(repositories)
        if owner is None:
            return [self._malformed(identifier) for identifier in repositories]

        context = await OrganizationContextBuilder(self._client, owner).build()

        results: list[BatchResult | None] = [None] * len(repositories)

        async def run(index: int, identifier: str) -> None:
            results[index] = await self._analyze_one(identifier, context)

        async with asyncio.TaskGroup() as group:
            for index, identifier in enumerate(repositories):
                group.create_task(run(index, identifier))

        logger.debug("Batch analysis completed for %d repositories", len(repositories))
        return [result for result in results if result is not None]

    def _malformed(self, identifier: str) -> BatchResult:
        return BatchResult(repository=identifier, error=str(MalformedRepositoryError(identifier)))

    async def _analyze_one(self, identifier: str, context: OrganizationContext) -> BatchResult:
        try:
            repository = parse_repository(identifier)
        except MalformedRepositoryError as exc:
            return BatchResult(repository=identifier, error=str(exc))
        if repository.owner != context.organization:
            return BatchResult(
                repository=identifier,
                error=f"repository '{identifier}' is not owned by '{context.organization}'",
            )

        logger.debug("Analyzing repository %s", identifier)
        facts = await self.analyze_with_context(repository, context)
        return BatchResult(repository=identifier, facts=facts)

    async def analyze_with_context(
        self,
        repository: RepositoryRef,
        context: OrganizationContext,
    ) -> DiscoveredFacts:
        """Run every category analyzer concurrently and assemble the facts."""
        outcomes: list[tuple[BaseModel | None, str | None]] = [(None, None)] * len(self._analyzers)

        async def run(index: int, analyzer: CategoryAnalyzer) -> None:
            try:
                outcomes[index] = (await analyzer.analyze(self._client, repository, context), None)
            except Exception as exc:
                logger.debug(
                    "%s analysis of %s failed: %s", analyzer.category, repository.full_name, exc
                )
                outcomes[index] = (None, str(exc) or type(exc).__name__)

        async with asyncio.TaskGroup() as group:
            for index, analyzer in enumerate(self._analyzers):
                group.create_task(run(index, analyzer))

        found: dict[Category, BaseModel] = {}
        degraded: list[DegradedCategory] = []
        for analyzer, (facts, error) in zip(self._analyzers, outcomes, strict=True):
            if error is not None:
                degraded.append(DegradedCategory(category=analyzer.category, reason=error))
            elif facts is not None:
                found[analyzer.category] = facts

        for loader, category in _LOADER_CATEGORIES.items():
            if loader in context.load_errors and not any(d.category == category for d in degraded):
                degraded.append(
                    DegradedCategory(category=category, reason=context.load_errors[loader])
                )

        repo_governance = found.get(Category.GOVERNANCE, GovernanceFacts())
        return DiscoveredFacts(
            repository=repository.full_name,
            code=found.get(Category.CODE, CodeFacts()),
            ci=found.get(Category.CI, CIFacts()),
            access=found.get(Category.ACCESS, AccessFacts()),
            security=found.get(Category.SECURITY, SecurityFacts()),
            integrations=IntegrationFacts(installed_apps=list(context.apps)),
            governance=_merge_governance(context.governance, repo_governance, repository.name),
            degraded=degraded,
        )


def _merge_governance(org: OrgGovernance, repo: GovernanceFacts, repository_name: str) -> GovernanceFacts:
    """Org policies, the org rulesets that target this repository, and all templates."""
    applicable = [ruleset for ruleset in org.rulesets if policy_applies(ruleset, repository_name)]
    return GovernanceFacts(
        organization_policies=[*org.policies, *applicable],
        issue_templates=[*org.issue_templates, *repo.issue_templates],
        pull_request_templates=[*org.pull_request_templates, *repo.pull_request_templates],
        required_status_checks=list(repo.required_status_checks),
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _first_owner(repositories: list[str]) -> str | None:
    for identifier in repositories:
        try:
            return parse_repository(identifier).owner
        except MalformedRepositoryError:
            continue
    return None


def group_by_owner(repositories: list[str]) -> dict[str, list[str]]:
    """Group identifiers by owner, keeping first-seen order.

    Malformed identifiers are grouped under ``""`` so the batch reports them.
    """
    groups: dict[str, list[str]] = {}
    for identifier in repositories:
        try:
            owner = parse_repository(identifier).owner
        except MalformedRepositoryError:
            owner = ""
        groups.setdefault(owner, []).append(identifier)
    return groups


async def analyze_repository(client: GitHubClient, repository: str) -> DiscoveredFacts:
    """Analyze one ``owner/name`` repository through the batch path."""
    parse_repository(repository)
    [result] = await BatchAnalyzer(client).analyze_many([repository])
    if result.facts is None:
        raise MalformedRepositoryError(repository)
    return result.facts
