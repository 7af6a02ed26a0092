"""What already exists in a target organization."""

from __future__ import annotations

from pydantic import BaseModel

from repo_transfer.models.policy import Policy


class MemberPrivileges(BaseModel):
    """Org-wide member settings."""

    can_create_repos: bool = False
    can_fork_private_repos: bool = False
    two_factor_required: bool = False
    web_commit_signoff_required: bool = False
    default_permission: str = ""
    restrictions_active: list[str] = []


class TargetCapabilities(BaseModel):
    """Snapshot of a target organization, built once per validation run.

    ``warnings`` names the sub-queries that could not be answered; the
    matching fields are left empty.
    """

    organization: str
    apps: list[str] = []
    teams: list[str] = []
    repository_policies: list[Policy] = []
    member_privileges: MemberPrivileges = MemberPrivileges()
    secrets: list[str] = []
    variables: list[str] = []
    runners: list[str] = []
    warnings: list[str] = []
