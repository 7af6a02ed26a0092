"""Tests for the per-category analyzers and their parsing helpers."""

from __future__ import annotations

import pytest

from repo_transfer.analyzers import CICDAnalyzer, GovernanceAnalyzer, default_analyzers
from repo_transfer.analyzers.access import codeowners_requirements
from repo_transfer.analyzers.code import decode_content, is_same_organization, submodule_urls
from repo_transfer.analyzers.org_level import ruleset_policy, settings_policies
from repo_transfer.client import GitHubClient
from repo_transfer.models.context import OrganizationContext
from repo_transfer.models.facts import Category
from repo_transfer.models.github import FileContent, OrgInfo, Ruleset
from repo_transfer.models.repository import RepositoryRef

API = RepositoryRef(owner="acme", name="api")
CONTEXT = OrganizationContext(organization="acme")


class TestCodeowners:
    def test_teams_users_and_comments(self) -> None:
        text = (
            "# Owners\n"
            "*       @acme/platform\n"
            "/docs/  @writer @acme/platform  # docs team\n"
            "*.go    dev@example.com @gopher\n"
        )
        assert codeowners_requirements(text) == [
            "Team: @acme/platform",
            "User: @writer",
            "User: @gopher",
        ]

    def test_empty_file(self) -> None:
        assert codeowners_requirements("") == []


class TestSubmodules:
    def test_urls_in_file_order(self) -> None:
        text = (
            '[submodule "a"]\n\tpath = a\n\turl = git@github.com:acme/a.git\n'
            '[submodule "b"]\n\tpath = b\n\turl=../b.git\n'
        )
        assert submodule_urls(text) == ["git@github.com:acme/a.git", "../b.git"]

    @pytest.mark.parametrize(
        ("url", "same"),
        [
            ("https://github.com/acme/lib.git", True),
            ("https://github.com/ACME/lib", True),
            ("git@github.com:acme/lib.git", True),
            ("../sibling.git", True),
            ("https://github.com/other/lib.git", False),
            ("https://gitlab.com/acme/lib.git", False),
        ],
    )
    def test_same_organization(self, url: str, same: bool) -> None:
        assert is_same_organization(url, "acme") is same

    def test_decode_content(self) -> None:
        assert decode_content(FileContent(content="aGVsbG8=\n")) == "hello"
        assert decode_content(FileContent(content=None)) == ""
        assert decode_content(FileContent(content="###")) == ""


class TestCICDAnalyzer:
    @pytest.mark.asyncio
    async def test_required_workflows_from_rulesets(self, fake_api, client: GitHubClient) -> None:
        fake_api.add("repos/acme/api/rulesets", [{"id": 5, "name": "CI gate", "source": "acme"}])
        fake_api.add(
            "repos/acme/api/rulesets/5",
            {
                "id": 5,
                "name": "CI gate",
                "rules": [
                    {
                        "type": "workflows",
                        "parameters": {
                            "workflows": [
                                {"path": ".github/workflows/build.yml", "repository_id": 42, "ref": "main"}
                            ]
                        },
                    },
                    {"type": "deletion"},
                ],
            },
        )
        fake_api.add("repos/acme/api/actions/runners", {"total_count": 1, "runners": [{"name": "gpu-1"}]})

        facts = await CICDAnalyzer().analyze(client, API, CONTEXT)

        assert facts.required_workflows == ["build.yml (ID: 42, repo: acme/api, ruleset: CI gate)"]
        assert facts.self_hosted_runners == ["gpu-1"]
        assert facts.organization_secrets == []


class TestGovernanceAnalyzer:
    @pytest.mark.asyncio
    async def test_templates_and_status_checks(self, fake_api, client: GitHubClient) -> None:
        fake_api.add("repos/acme/api/contents/.github/ISSUE_TEMPLATE", [])
        fake_api.add("repos/acme/api/contents/PULL_REQUEST_TEMPLATE.md", {"type": "file"})
        fake_api.add(
            "repos/acme/api/branches",
            [{"name": "main", "protected": True}, {"name": "dev", "protected": False}],
        )
        fake_api.add(
            "repos/acme/api/branches/main/protection",
            {
                "required_status_checks": {
                    "contexts": ["ci/build"],
                    "checks": [{"context": "ci/build"}, {"context": "lint", "app_id": 15}],
                }
            },
        )

        facts = await GovernanceAnalyzer().analyze(client, API, CONTEXT)

        assert facts.issue_templates == ["Issue template: .github/ISSUE_TEMPLATE"]
        assert facts.pull_request_templates == ["PR template: PULL_REQUEST_TEMPLATE.md"]
        assert facts.required_status_checks == ["ci/build (branch: main)", "lint (branch: main)"]
        assert facts.organization_policies == []
        assert fake_api.count("repos/acme/api/branches/dev/protection") == 0


class TestOrgLevelPolicies:
    def test_settings_policies(self) -> None:
        info = OrgInfo(
            members_can_create_repositories=True,
            members_can_fork_private_repositories=True,
            members_can_delete_repositories=False,
            members_can_delete_issues=True,
            members_can_create_teams=True,
            default_repository_permission="write",
        )
        member, security = settings_policies(info)
        assert member.name == "Member Management Policy"
        assert member.restrictions == ("Repository deletion restricted",)
        assert security.restrictions == ("Default repository permission: write",)

    def test_permissive_org_has_no_policies(self) -> None:
        info = OrgInfo(
            members_can_create_repositories=True,
            members_can_fork_private_repositories=True,
            members_can_delete_repositories=True,
            members_can_delete_issues=True,
            members_can_create_teams=True,
            default_repository_permission="read",
        )
        assert settings_policies(info) == []

    def test_ruleset_policy_keeps_structured_conditions(self) -> None:
        ruleset = Ruleset.model_validate(
            {
                "id": 1,
                "name": "Protected only",
                "enforcement": "active",
                "conditions": {"repository_name": {"protected": True}},
                "rules": [{"type": "deletion"}, {"type": "update"}],
            }
        )
        policy = ruleset_policy(ruleset)
        assert policy.status == "active"
        assert policy.restrictions == (
            "Enforcement: active",
            "Applies to protected repositories",
            "Rules: deletion, update",
        )
        assert policy.conditions is not None and policy.conditions.protected is True


def test_default_analyzers_cover_repository_categories() -> None:
    categories = [analyzer.category for analyzer in default_analyzers()]
    assert categories == [
        Category.CODE,
        Category.CI,
        Category.ACCESS,
        Category.SECURITY,
        Category.GOVERNANCE,
    ]
