"""Organization-wide loaders, run once per batch before any repository is analyzed."""

from __future__ import annotations

import asyncio
import logging

from repo_transfer.analyzers.base import absent_as
from repo_transfer.analyzers.governance import first_existing
from repo_transfer.client import GitHubClient
from repo_transfer.models.context import OrgGovernance
from repo_transfer.models.github import InstallationList, OrgInfo, Ruleset, SecurityCampaign
from repo_transfer.models.policy import (
    DEPENDABOT_POLICY,
    MEMBER_MANAGEMENT_POLICY,
    SECURITY_MD_POLICY,
    Policy,
)
from repo_transfer.rulesets import describe_conditions

logger = logging.getLogger(__name__)

ORG_REPOSITORY = ".github"

ORG_ISSUE_TEMPLATE_LOCATIONS = (
    ".github/ISSUE_TEMPLATE",
    ".github/issue_template.md",
    "ISSUE_TEMPLATE",
)
ORG_PR_TEMPLATE_LOCATIONS = (
    ".github/PULL_REQUEST_TEMPLATE",
    ".github/pull_request_template.md",
    ".github/PULL_REQUEST_TEMPLATE.md",
    "PULL_REQUEST_TEMPLATE",
    "pull_request_template.md",
    "PULL_REQUEST_TEMPLATE.md",
)


# ---------------------------------------------------------------------------
# Apps
# ---------------------------------------------------------------------------


async def load_apps(client: GitHubClient, organization: str) -> tuple[str, ...]:
    listing = await client.get_as(f"orgs/{organization}/installations", InstallationList)
    apps = []
    for installation in listing.installations:
        if installation.repository_selection == "all":
            apps.append(f"{installation.display_name} (org-wide installation)")
        else:
            apps.append(f"{installation.display_name} (selective installation - verify access)")
    return tuple(apps)


# ---------------------------------------------------------------------------
# Governance
# ---------------------------------------------------------------------------


async def load_governance(client: GitHubClient, organization: str) -> OrgGovernance:
    """Repository rulesets (with their targeting), ``.github`` policies, and org templates.

    Policies implied by org settings come from the org-info loader and are
    added by :func:`with_settings_policies` once both have finished.
    """
    rulesets, security_md, dependabot, issue, pull_request = await asyncio.gather(
        absent_as(load_repository_rulesets(client, organization), ()),
        client.exists(f"repos/{organization}/{ORG_REPOSITORY}/contents/SECURITY.md"),
        client.exists(f"repos/{organization}/{ORG_REPOSITORY}/contents/.github/dependabot.yml"),
        first_existing(client, organization, ORG_REPOSITORY, ORG_ISSUE_TEMPLATE_LOCATIONS),
        first_existing(client, organization, ORG_REPOSITORY, ORG_PR_TEMPLATE_LOCATIONS),
    )

    policies = []
    if security_md:
        policies.append(SECURITY_MD_POLICY)
    if dependabot:
        policies.append(DEPENDABOT_POLICY)

    location = f"{organization}/{ORG_REPOSITORY}"
    return OrgGovernance(
        policies=tuple(policies),
        rulesets=rulesets,
        issue_templates=(f"{issue} in {location}",) if issue else (),
        pull_request_templates=(f"{pull_request} in {location}",) if pull_request else (),
    )


def with_settings_policies(governance: OrgGovernance, info: OrgInfo | None) -> OrgGovernance:
    """``governance`` with the policies implied by org settings placed first."""
    if info is None:
        return governance
    return governance.model_copy(
        update={"policies": (*settings_policies(info), *governance.policies)}
    )


def settings_policies(info: OrgInfo) -> list[Policy]:
    """The member-management and security policies implied by org settings."""
    membership: list[str] = []
    if not info.members_can_create_repositories:
        membership.append("Repository creation restricted")
    if not info.members_can_fork_private_repositories:
        membership.append("Private repository forking restricted")
    if not info.members_can_delete_repositories:
        membership.append("Repository deletion restricted")
    if not info.members_can_delete_issues:
        membership.append("Issue deletion restricted")
    if not info.members_can_create_teams:
        membership.append("Team creation restricted")

    security: list[str] = []
    if info.two_factor_requirement_enabled:
        security.append("Two-factor authentication required")
    if info.web_commit_signoff_required:
        security.append("Web commit signoff required")
    if info.default_repository_permission != "read":
        security.append(f"Default repository permission: {info.default_repository_permission}")

    policies = []
    if membership:
        policies.append(
            Policy(name=MEMBER_MANAGEMENT_POLICY, status="active", restrictions=tuple(membership))
        )
    if security:
        policies.append(Policy(name="Security Policy", status="active", restrictions=tuple(security)))
    return policies


async def load_repository_rulesets(client: GitHubClient, organization: str) -> tuple[Policy, ...]:
    """Org rulesets that target repositories, each with its structured conditions.

    The list endpoint may omit conditions, so every ruleset is fetched in
    detail; the listed form is used when the detail is not readable.
    """
    base = f"orgs/{organization}/rulesets"
    listed = [
        ruleset
        for ruleset in await client.get_as(base, list[Ruleset])
        if ruleset.target == "repository"
    ]
    details = await asyncio.gather(
        *(absent_as(client.get_as(f"{base}/{ruleset.id}", Ruleset), ruleset) for ruleset in listed)
    )
    return tuple(ruleset_policy(ruleset) for ruleset in details)


def ruleset_policy(ruleset: Ruleset) -> Policy:
    conditions = ruleset.repository_conditions()
    restrictions = [f"Enforcement: {ruleset.enforcement}", *describe_conditions(conditions)]
    if ruleset.rules:
        restrictions.append("Rules: " + ", ".join(rule.type for rule in ruleset.rules))
    return Policy(
        name=ruleset.name,
        status=ruleset.enforcement,
        restrictions=tuple(restrictions),
        conditions=conditions,
    )


# ---------------------------------------------------------------------------
# Security campaigns and org info
# ---------------------------------------------------------------------------


async def load_security_campaigns(client: GitHubClient, organization: str) -> tuple[str, ...]:
    campaigns = await absent_as(
        client.get_as(f"orgs/{organization}/security/campaigns", list[SecurityCampaign]), []
    )
    return tuple(
        f"Security campaign: {campaign.name} ({campaign.status})"
        if campaign.status
        else f"Security campaign: {campaign.name}"
        for campaign in campaigns
    )


async def load_org_info(client: GitHubClient, organization: str) -> OrgInfo | None:
    """Org settings flags; None when the organization hides them."""
    return await absent_as(client.get_as(f"orgs/{organization}", OrgInfo), None)
