"""Tests for the two-phase batch analyzer."""

from __future__ import annotations

import asyncio

import pytest
from pydantic import ValidationError

from repo_transfer.analyzers import CategoryAnalyzer
from repo_transfer.batch import (
    BatchAnalyzer,
    OrganizationContextBuilder,
    analyze_repository,
    group_by_owner,
)
from repo_transfer.client import GitHubClient
from repo_transfer.errors import MalformedRepositoryError
from repo_transfer.models.facts import Category, CodeFacts

ORG_ENDPOINTS = (
    "orgs/acme",
    "orgs/acme/installations",
    "orgs/acme/rulesets",
    "orgs/acme/security/campaigns",
)


# ---------------------------------------------------------------------------
# Phase 1
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_context_holds_every_loader_result(source_org, client: GitHubClient) -> None:
    context = await OrganizationContextBuilder(client, "acme").build()

    assert context.organization == "acme"
    assert context.apps == (
        "dependabot (org-wide installation)",
        "deploy-bot (selective installation - verify access)",
    )
    assert context.security_campaigns == ("Security campaign: Q3 secrets (active)",)
    assert context.org_info is not None
    assert context.org_info.two_factor_requirement_enabled is True
    assert context.load_errors == {}

    governance = context.governance
    assert [p.name for p in governance.policies] == [
        "Member Management Policy",
        "Security Policy",
        "Organization Security Policy",
    ]
    assert governance.policies[0].restrictions == (
        "Repository creation restricted",
        "Private repository forking restricted",
    )
    assert [r.name for r in governance.rulesets] == ["Prod repos", "Everything"]
    assert governance.rulesets[0].restrictions == (
        "Enforcement: active",
        "Targets repos: api",
        "Rules: repository_delete",
    )
    assert governance.issue_templates == (".github/ISSUE_TEMPLATE in acme/.github",)
    assert governance.pull_request_templates == ()


@pytest.mark.asyncio
async def test_context_is_immutable(source_org, client: GitHubClient) -> None:
    context = await OrganizationContextBuilder(client, "acme").build()
    with pytest.raises(ValidationError):
        context.apps = ()


@pytest.mark.asyncio
async def test_failed_loader_is_recorded_and_others_complete(source_org, client: GitHubClient) -> None:
    source_org.fail("orgs/acme/installations")

    context = await OrganizationContextBuilder(client, "acme").build()

    assert set(context.load_errors) == {"apps"}
    assert "HTTP 500" in context.load_errors["apps"]
    assert context.apps == ()
    assert context.security_campaigns != ()


# ---------------------------------------------------------------------------
# Phase 2
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_org_loaders_run_once_per_batch(source_org, client: GitHubClient) -> None:
    repos = ["acme/api", "acme/legacy", "acme/api"]
    results = await BatchAnalyzer(client).analyze_many(repos)

    assert len(results) == 3
    for path in ORG_ENDPOINTS:
        assert source_org.count(path) == 1, path


@pytest.mark.asyncio
async def test_results_keep_input_order(source_org, client: GitHubClient) -> None:
    repos = ["acme/legacy", "not-a-repo", "acme/api", "acme/a/b"]
    results = await BatchAnalyzer(client).analyze_many(repos)

    assert [r.repository for r in results] == repos
    assert results[0].facts is not None and results[0].facts.repository == "acme/legacy"
    assert results[2].facts is not None and results[2].facts.repository == "acme/api"
    assert results[1].facts is None
    assert results[1].error == "repository 'not-a-repo' must be in format 'owner/repo'"
    assert results[3].error is not None


class _SlowFirstAnalyzer(CategoryAnalyzer):
    """Finishes repositories in the reverse of their input order."""

    category = Category.CODE

    def __init__(self, delays: dict[str, float]) -> None:
        self.delays = delays
        self.finished: list[str] = []

    async def analyze(self, client, repository, context) -> CodeFacts:
        await asyncio.sleep(self.delays[repository.name])
        self.finished.append(repository.full_name)
        return CodeFacts(git_submodules=[repository.name])


@pytest.mark.asyncio
async def test_input_order_survives_out_of_order_completion(source_org, client: GitHubClient) -> None:
    analyzer = _SlowFirstAnalyzer({"legacy": 0.05, "web": 0.02, "api": 0.0})
    repos = ["acme/legacy", "acme/web", "acme/api"]

    results = await BatchAnalyzer(client, analyzers=[analyzer]).analyze_many(repos)

    assert analyzer.finished == ["acme/api", "acme/web", "acme/legacy"]
    assert [r.repository for r in results] == repos
    assert [r.facts.code.git_submodules for r in results] == [["legacy"], ["web"], ["api"]]


@pytest.mark.asyncio
async def test_repository_facts(source_org, client: GitHubClient) -> None:
    [result] = await BatchAnalyzer(client).analyze_many(["acme/api"])
    facts = result.facts
    assert facts is not None
    assert facts.degraded == []

    assert facts.integrations.installed_apps[0] == "dependabot (org-wide installation)"
    assert facts.access.teams == ["backend (push)"]
    assert facts.access.individual_collaborators == ["alice (admin)"]
    assert facts.access.codeowners_requirements == ["Team: @acme/backend", "User: @alice"]
    assert facts.code.git_submodules == [
        "https://github.com/acme/lib.git (same organization)",
        "https://github.com/other/vendor.git (external dependency)",
    ]
    assert facts.ci.organization_secrets == ["NPM_TOKEN"]
    assert facts.ci.environments == ["Environment: production"]
    assert facts.security.security_campaigns == ["Security campaign: Q3 secrets (active)"]
    assert facts.governance.issue_templates == [".github/ISSUE_TEMPLATE in acme/.github"]
    assert facts.governance.pull_request_templates == [
        "PR template: .github/pull_request_template.md"
    ]


@pytest.mark.asyncio
async def test_org_rulesets_are_filtered_per_repository(source_org, client: GitHubClient) -> None:
    api, legacy, other = await BatchAnalyzer(client).analyze_many(
        ["acme/api", "acme/legacy", "acme/web"]
    )

    def policy_names(result) -> list[str]:
        return [p.name for p in result.facts.governance.organization_policies]

    base = ["Member Management Policy", "Security Policy", "Organization Security Policy"]
    assert policy_names(api) == [*base, "Prod repos", "Everything"]
    assert policy_names(legacy) == base
    assert policy_names(other) == [*base, "Everything"]


@pytest.mark.asyncio
async def test_failing_category_is_isolated(source_org, client: GitHubClient) -> None:
    source_org.fail("repos/acme/api/teams")

    api, legacy = await BatchAnalyzer(client).analyze_many(["acme/api", "acme/legacy"])

    assert api.facts is not None
    assert [d.category for d in api.facts.degraded] == [Category.ACCESS]
    assert api.facts.is_degraded(Category.ACCESS)
    assert api.facts.access.teams == []
    assert api.facts.access.individual_collaborators == []
    # Other categories of the same repository are complete.
    assert api.facts.ci.organization_secrets == ["NPM_TOKEN"]
    assert len(api.facts.code.git_submodules) == 2
    assert legacy.facts is not None and legacy.facts.degraded == []


@pytest.mark.asyncio
async def test_loader_failure_marks_category_degraded(source_org, client: GitHubClient) -> None:
    source_org.fail("orgs/acme/installations")

    [result] = await BatchAnalyzer(client).analyze_many(["acme/api"])

    assert result.facts is not None
    assert result.facts.is_degraded(Category.INTEGRATIONS)
    assert result.facts.integrations.installed_apps == []


@pytest.mark.asyncio
async def test_org_info_failure_drops_settings_policies(source_org, client: GitHubClient) -> None:
    source_org.fail("orgs/acme")

    context = await OrganizationContextBuilder(client, "acme").build()
    [result] = await BatchAnalyzer(client).analyze_many(["acme/api"])

    assert set(context.load_errors) == {"org_info"}
    assert context.org_info is None
    assert [p.name for p in context.governance.policies] == ["Organization Security Policy"]
    assert result.facts is not None
    assert result.facts.is_degraded(Category.GOVERNANCE)


@pytest.mark.asyncio
async def test_hidden_org_info_is_not_an_error(source_org, client: GitHubClient) -> None:
    source_org.fail("orgs/acme", status=404)

    context = await OrganizationContextBuilder(client, "acme").build()

    assert context.load_errors == {}
    assert context.org_info is None
    assert [p.name for p in context.governance.policies] == ["Organization Security Policy"]


@pytest.mark.asyncio
async def test_other_owner_is_an_error(source_org, client: GitHubClient) -> None:
    api, other = await BatchAnalyzer(client).analyze_many(["acme/api", "globex/site"])

    assert api.facts is not None
    assert other.facts is None
    assert other.error == "repository 'globex/site' is not owned by 'acme'"


@pytest.mark.asyncio
async def test_all_malformed_skips_loading(fake_api, client: GitHubClient) -> None:
    results = await BatchAnalyzer(client).analyze_many(["nope", "/x"])

    assert all(r.facts is None for r in results)
    assert sum(fake_api.calls.values()) == 0


@pytest.mark.asyncio
async def test_empty_input_is_rejected(client: GitHubClient) -> None:
    with pytest.raises(ValueError, match="no repositories provided"):
        await BatchAnalyzer(client).analyze_many([])


@pytest.mark.asyncio
async def test_analyze_repository(source_org, client: GitHubClient) -> None:
    facts = await analyze_repository(client, "acme/api")
    assert facts.repository == "acme/api"

    with pytest.raises(MalformedRepositoryError):
        await analyze_repository(client, "acme")


def test_group_by_owner_keeps_first_seen_order() -> None:
    groups = group_by_owner(["b/one", "a/two", "b/three", "broken"])
    assert list(groups) == ["b", "a", ""]
    assert groups["b"] == ["b/one", "b/three"]
    assert groups[""] == ["broken"]
