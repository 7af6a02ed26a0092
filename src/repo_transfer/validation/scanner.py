"""Enumerate what already exists in a target organization.

Every sub-query is best effort. A query that fails leaves its part of
:class:`TargetCapabilities` empty and adds a line to ``warnings``; the scan
as a whole never raises.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from typing import Any

import httpx
from pydantic import ValidationError

from repo_transfer.client import GitHubClient
from repo_transfer.errors import FeatureAbsentError, RepoTransferError
from repo_transfer.models.capabilities import MemberPrivileges, TargetCapabilities
from repo_transfer.models.github import (
    InstallationList,
    OrgInfo,
    OrgPolicyEntry,
    RepositoryPolicyEntry,
    RulesetRule,
    RunnerList,
    Ruleset,
    SecretList,
    Team,
    VariableList,
)
from repo_transfer.models.policy import DEPENDABOT_POLICY, SECURITY_MD_POLICY, Policy

logger = logging.getLogger(__name__)

_SCAN_ERRORS = (RepoTransferError, httpx.HTTPError, ValidationError)

# Rule types rendered with a fixed sentence.
_FIXED_RULE_TEXT = {
    "required_linear_history": "Linear history required",
    "force_push": "Force push disabled",
    "required_signatures": "Signed commits required",
    "branch_name_pattern": "Branch naming pattern enforced",
    "commit_message_pattern": "Commit message pattern enforced",
    "commit_author_email_pattern": "Commit author email pattern enforced",
    "committer_email_pattern": "Committer email pattern enforced",
}


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------


async def scan_target_capabilities(client: GitHubClient, organization: str) -> TargetCapabilities:
    """Run the seven sub-queries concurrently and merge them into one snapshot."""
    warnings: list[str] = []

    async def attempt(label: str, query: Awaitable[Any], default: Any) -> Any:
        try:
            return await query
        except _SCAN_ERRORS as exc:
            logger.debug("Scan of %s in %s failed: %s", label, organization, exc)
            warnings.append(f"Could not scan {label}: {exc}")
            return default

    apps, teams, policies, privileges, secrets, variables, runners = await asyncio.gather(
        attempt("apps", _scan_apps(client, organization), []),
        attempt("teams", _scan_teams(client, organization), []),
        attempt(
            "repository policies", _scan_repository_policies(client, organization, warnings), []
        ),
        attempt("member privileges", _scan_member_privileges(client, organization), MemberPrivileges()),
        attempt("secrets", _scan_secrets(client, organization), []),
        attempt("variables", _scan_variables(client, organization), []),
        attempt("runners", _scan_runners(client, organization), []),
    )

    capabilities = TargetCapabilities(
        organization=organization,
        apps=apps,
        teams=teams,
        repository_policies=policies,
        member_privileges=privileges,
        secrets=secrets,
        variables=variables,
        runners=runners,
        warnings=warnings,
    )
    logger.debug(
        "Target %s: %d apps, %d teams, %d policies, %d secrets, %d variables, %d runners",
        organization,
        len(apps),
        len(teams),
        len(policies),
        len(secrets),
        len(variables),
        len(runners),
    )
    return capabilities


# ---------------------------------------------------------------------------
# Sub-queries
# ---------------------------------------------------------------------------


async def _scan_apps(client: GitHubClient, organization: str) -> list[str]:
    listing = await client.get_as(f"orgs/{organization}/installations", InstallationList)
    return [installation.display_name for installation in listing.installations]


async def _scan_teams(client: GitHubClient, organization: str) -> list[str]:
    teams = await client.get_as(f"orgs/{organization}/teams", list[Team])
    return [team.name for team in teams]


async def _scan_member_privileges(client: GitHubClient, organization: str) -> MemberPrivileges:
    info = await client.get_as(f"orgs/{organization}", OrgInfo)
    active: list[str] = []
    if not info.members_can_create_repositories:
        active.append("Repository creation restricted")
    if not info.members_can_fork_private_repositories:
        active.append("Private repository forking restricted")
    if info.two_factor_requirement_enabled:
        active.append("Two-factor authentication required")
    if info.web_commit_signoff_required:
        active.append("Web commit signoff required")
    return MemberPrivileges(
        can_create_repos=info.members_can_create_repositories,
        can_fork_private_repos=info.members_can_fork_private_repositories,
        two_factor_required=info.two_factor_requirement_enabled,
        web_commit_signoff_required=info.web_commit_signoff_required,
        default_permission=info.default_repository_permission,
        restrictions_active=active,
    )


async def _scan_secrets(client: GitHubClient, organization: str) -> list[str]:
    listing = await client.get_as(f"orgs/{organization}/actions/secrets", SecretList)
    return [secret.name for secret in listing.secrets]


async def _scan_variables(client: GitHubClient, organization: str) -> list[str]:
    listing = await client.get_as(f"orgs/{organization}/actions/variables", VariableList)
    return [variable.name for variable in listing.variables]


async def _scan_runners(client: GitHubClient, organization: str) -> list[str]:
    listing = await client.get_as(f"orgs/{organization}/actions/runners", RunnerList)
    return [runner.name for runner in listing.runners if runner.status.lower() == "online"]


# ---------------------------------------------------------------------------
# Repository policies
# ---------------------------------------------------------------------------


async def _scan_repository_policies(
    client: GitHubClient, organization: str, warnings: list[str]
) -> list[Policy]:
    """Merge the five policy sources in a fixed order, without de-duplication.

    Each source stands alone: an absent one contributes nothing, a failing
    one contributes nothing and adds its own line to ``warnings``.
    """

    async def optional(label: str, query: Awaitable[Any], default: Any) -> Any:
        try:
            return await query
        except FeatureAbsentError:
            return default
        except _SCAN_ERRORS as exc:
            logger.debug("Policy source %s in %s failed: %s", label, organization, exc)
            warnings.append(f"Could not scan {label}: {exc}")
            return default

    github = f"repos/{organization}/.github/contents"
    direct, alternate, rulesets, security_md, dependabot = await asyncio.gather(
        optional("organization policies", _org_policies(client, organization), []),
        optional("repository policies", _alternate_policies(client, organization), []),
        optional("policy rulesets", _policy_rulesets(client, organization), []),
        optional("SECURITY.md", client.exists(f"{github}/SECURITY.md"), False),
        optional("dependabot configuration", client.exists(f"{github}/.github/dependabot.yml"), False),
    )

    policies = [*direct, *alternate, *rulesets]
    if security_md:
        policies.append(SECURITY_MD_POLICY)
    if dependabot:
        policies.append(DEPENDABOT_POLICY)
    return policies


async def _org_policies(client: GitHubClient, organization: str) -> list[Policy]:
    entries = await client.get_as(f"orgs/{organization}/policies", list[OrgPolicyEntry])
    policies = []
    for entry in entries:
        restrictions: list[str] = []
        if entry.description:
            restrictions.append(entry.description)
        restrictions.extend(f"Rule: {rule.name}" for rule in entry.rules)
        if not restrictions:
            restrictions.append(f"Type: {entry.policy_type}, Scope: {entry.scope}")
        policies.append(Policy(name=entry.name, status=entry.status, restrictions=tuple(restrictions)))
    return policies


async def _alternate_policies(client: GitHubClient, organization: str) -> list[Policy]:
    entries = await client.get_as(
        f"orgs/{organization}/repository-policies", list[RepositoryPolicyEntry]
    )
    return [
        Policy(
            name=entry.name,
            status=entry.state,
            restrictions=(entry.body,) if entry.body else (),
        )
        for entry in entries
    ]


async def _policy_rulesets(client: GitHubClient, organization: str) -> list[Policy]:
    listed = await client.get_as(f"orgs/{organization}/rulesets", list[Ruleset])
    candidates = [
        ruleset
        for ruleset in listed
        if ruleset.target == "repository" and "policy" in ruleset.name.lower()
    ]
    return list(await asyncio.gather(*(_render_ruleset(client, organization, r) for r in candidates)))


async def _render_ruleset(client: GitHubClient, organization: str, listed: Ruleset) -> Policy:
    try:
        ruleset = await client.get_as(f"orgs/{organization}/rulesets/{listed.id}", Ruleset)
    except _SCAN_ERRORS as exc:
        logger.debug("Ruleset %d detail unavailable: %s", listed.id, exc)
        ruleset = None

    restrictions: list[str] = []
    if ruleset is not None:
        for rule in ruleset.rules:
            restrictions.extend(describe_rule(rule))
        ref_name = ruleset.conditions.ref_name if ruleset.conditions else None
        if ref_name and ref_name.include:
            restrictions.append("Applies to branches: " + ", ".join(ref_name.include))
    else:
        restrictions.extend(f"Rule: {rule.type}" for rule in listed.rules)

    if not restrictions:
        restrictions.append(f"Enforcement: {listed.enforcement}")

    source = ruleset or listed
    return Policy(
        name=listed.name,
        status=listed.enforcement,
        restrictions=tuple(restrictions),
        conditions=source.repository_conditions(),
    )


def describe_rule(rule: RulesetRule) -> list[str]:
    """Render one ruleset rule as restriction lines."""
    params = rule.parameters
    if rule.type == "pull_request":
        lines = []
        count = params.get("required_approving_review_count")
        if isinstance(count, int | float) and not isinstance(count, bool):
            lines.append(f"Requires {count:g} approving reviews")
        if params.get("dismiss_stale_reviews_on_push") is True:
            lines.append("Dismiss stale reviews on push")
        if params.get("require_code_owner_review") is True:
            lines.append("Require code owner review")
        return lines
    if rule.type == "required_status_checks":
        checks = params.get("required_status_checks") or []
        return [
            f"Required status check: {check['context']}"
            for check in checks
            if isinstance(check, dict) and isinstance(check.get("context"), str)
        ]
    if rule.type in ("creation", "deletion"):
        return [f"{rule.type.title()} restricted"]
    if rule.type == "update":
        if params.get("update_allows_fetch_and_merge") is False:
            return ["Force push disabled"]
        return []
    if rule.type in _FIXED_RULE_TEXT:
        return [_FIXED_RULE_TEXT[rule.type]]
    return [f"Rule: {rule.type}"]
