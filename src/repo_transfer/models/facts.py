"""Discovered facts: what ties one repository to its source organization.

Facts come in six independent categories. Items are free text, usually a
name followed by a parenthesised suffix, e.g. ``"frontend (write)"``.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from repo_transfer.models.policy import Policy


class Category(StrEnum):
    CODE = "code"
    CI = "ci"
    ACCESS = "access"
    SECURITY = "security"
    INTEGRATIONS = "integrations"
    GOVERNANCE = "governance"


class CodeFacts(BaseModel):
    model_config = ConfigDict(frozen=True)

    git_submodules: list[str] = []


class CIFacts(BaseModel):
    """GitHub Actions dependencies."""

    model_config = ConfigDict(frozen=True)

    organization_secrets: list[str] = []
    organization_variables: list[str] = []
    self_hosted_runners: list[str] = []
    environments: list[str] = []
    required_workflows: list[str] = []


class AccessFacts(BaseModel):
    """Who can reach the repository.

    ``codeowners_requirements`` items are ``"Team: @org/name"`` or
    ``"User: @login"``.
    """

    model_config = ConfigDict(frozen=True)

    teams: list[str] = []
    individual_collaborators: list[str] = []
    codeowners_requirements: list[str] = []


class SecurityFacts(BaseModel):
    model_config = ConfigDict(frozen=True)

    security_campaigns: list[str] = []


class IntegrationFacts(BaseModel):
    model_config = ConfigDict(frozen=True)

    installed_apps: list[str] = []


class GovernanceFacts(BaseModel):
    """Org policies that bind the repository, plus templates and status checks."""

    model_config = ConfigDict(frozen=True)

    organization_policies: list[Policy] = []
    issue_templates: list[str] = []
    pull_request_templates: list[str] = []
    required_status_checks: list[str] = []


class DegradedCategory(BaseModel):
    """A category whose analyzer failed; its facts are empty, not "none found"."""

    model_config = ConfigDict(frozen=True)

    category: Category
    reason: str


class DiscoveredFacts(BaseModel):
    """Everything found for one repository in one analysis run. Immutable."""

    model_config = ConfigDict(frozen=True)

    repository: str
    code: CodeFacts = CodeFacts()
    ci: CIFacts = CIFacts()
    access: AccessFacts = AccessFacts()
    security: SecurityFacts = SecurityFacts()
    integrations: IntegrationFacts = IntegrationFacts()
    governance: GovernanceFacts = GovernanceFacts()
    degraded: list[DegradedCategory] = []

    def is_degraded(self, category: Category) -> bool:
        return any(d.category == category for d in self.degraded)
