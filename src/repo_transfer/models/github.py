"""Response schemas for the GitHub REST endpoints this package reads.

Each resource kind is decoded once, here, and shared by every call site.
Unknown fields are ignored; fields GitHub may send as ``null`` are optional.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator

from repo_transfer.models.policy import RulesetConditions


class _Schema(BaseModel):
    model_config = ConfigDict(extra="ignore")


# ---------------------------------------------------------------------------
# Organizations
# ---------------------------------------------------------------------------


class OrgInfo(_Schema):
    """``GET /orgs/{org}``, only the member-settings flags."""

    default_repository_permission: str = ""
    members_can_create_repositories: bool = False
    members_can_create_private_repositories: bool = False
    members_can_create_internal_repositories: bool = False
    members_can_create_public_repositories: bool = False
    members_can_create_pages: bool = False
    members_can_fork_private_repositories: bool = False
    members_can_delete_repositories: bool = False
    members_can_delete_issues: bool = False
    members_can_create_teams: bool = False
    web_commit_signoff_required: bool = False
    two_factor_requirement_enabled: bool = False

    @field_validator("*", mode="before")
    @classmethod
    def _null_as_default(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return "" if info.field_name == "default_repository_permission" else False
        return value


class InstallationApp(_Schema):
    id: int | None = None
    name: str = ""


class Installation(_Schema):
    id: int | None = None
    app_id: int | None = None
    app_slug: str | None = None
    app_name: str | None = None
    repository_selection: str | None = None
    app: InstallationApp | None = None

    @property
    def display_name(self) -> str:
        if self.app_name:
            return self.app_name
        if self.app_slug:
            return self.app_slug
        if self.app and self.app.name:
            return self.app.name
        return f"App ID {self.app_id}"


class InstallationList(_Schema):
    total_count: int = 0
    installations: list[Installation] = []


class Team(_Schema):
    name: str
    slug: str = ""
    permission: str | None = None


class Collaborator(_Schema):
    login: str
    role_name: str | None = None
    permissions: dict[str, bool] | None = None

    @property
    def permission(self) -> str:
        if self.role_name:
            return self.role_name
        for level in ("admin", "maintain", "push", "triage", "pull"):
            if self.permissions and self.permissions.get(level):
                return level
        return "unknown"


class NamedItem(_Schema):
    name: str


class SecretList(_Schema):
    total_count: int = 0
    secrets: list[NamedItem] = []


class VariableList(_Schema):
    total_count: int = 0
    variables: list[NamedItem] = []


class Runner(_Schema):
    name: str
    status: str = ""


class RunnerList(_Schema):
    total_count: int = 0
    runners: list[Runner] = []


class EnvironmentList(_Schema):
    total_count: int = 0
    environments: list[NamedItem] = []


class SecurityCampaign(_Schema):
    id: int | None = None
    name: str
    status: str | None = None


# ---------------------------------------------------------------------------
# Policies and rulesets
# ---------------------------------------------------------------------------


class PolicyRule(_Schema):
    name: str = ""
    description: str | None = None


class OrgPolicyEntry(_Schema):
    """``GET /orgs/{org}/policies``."""

    id: int | None = None
    name: str
    description: str | None = None
    status: str = ""
    policy_type: str = ""
    scope: str = ""
    rules: list[PolicyRule] = []


class RepositoryPolicyEntry(_Schema):
    """``GET /orgs/{org}/repository-policies``."""

    name: str
    url: str | None = None
    state: str = ""
    body: str | None = None


class RefNameCondition(_Schema):
    include: list[str] = []
    exclude: list[str] = []


class RepositoryNameCondition(_Schema):
    include: list[str] = []
    exclude: list[str] = []
    protected: bool = False


class RulesetConditionSet(_Schema):
    ref_name: RefNameCondition | None = None
    repository_name: RepositoryNameCondition | None = None


class RulesetRule(_Schema):
    type: str
    parameters: dict[str, Any] = {}


class Ruleset(_Schema):
    """A ruleset as listed or as fetched in detail."""

    id: int
    name: str
    target: str | None = None
    enforcement: str = ""
    source: str = ""
    source_type: str | None = None
    conditions: RulesetConditionSet | None = None
    rules: list[RulesetRule] = []

    def repository_conditions(self) -> RulesetConditions:
        names = self.conditions.repository_name if self.conditions else None
        if names is None:
            return RulesetConditions()
        return RulesetConditions(
            include=tuple(names.include),
            exclude=tuple(names.exclude),
            protected=names.protected,
        )


# ---------------------------------------------------------------------------
# Repositories
# ---------------------------------------------------------------------------


class FileContent(_Schema):
    """A single file from the contents API (base64 encoded)."""

    name: str = ""
    path: str = ""
    type: str = "file"
    encoding: str | None = None
    content: str | None = None


class Branch(_Schema):
    name: str
    protected: bool = False


class StatusCheck(_Schema):
    context: str
    app_id: int | None = None


class RequiredStatusChecks(_Schema):
    contexts: list[str] = []
    checks: list[StatusCheck] = []


class BranchProtection(_Schema):
    required_status_checks: RequiredStatusChecks | None = None
