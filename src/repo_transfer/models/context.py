"""Organization-wide facts shared by every repository in a batch."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from repo_transfer.models.github import OrgInfo
from repo_transfer.models.policy import Policy


class OrgGovernance(BaseModel):
    """Governance that is defined once per organization.

    ``policies`` always bind every repository. ``rulesets`` carry their
    repository conditions and are filtered per repository.
    """

    model_config = ConfigDict(frozen=True)

    policies: tuple[Policy, ...] = ()
    rulesets: tuple[Policy, ...] = ()
    issue_templates: tuple[str, ...] = ()
    pull_request_templates: tuple[str, ...] = ()


class OrganizationContext(BaseModel):
    """Immutable snapshot of one organization, loaded once per batch.

    ``load_errors`` maps a loader name to the reason it failed; the field
    that loader fills is left empty.
    """

    model_config = ConfigDict(frozen=True)

    organization: str
    apps: tuple[str, ...] = ()
    governance: OrgGovernance = OrgGovernance()
    security_campaigns: tuple[str, ...] = ()
    org_info: OrgInfo | None = None
    load_errors: dict[str, str] = {}
