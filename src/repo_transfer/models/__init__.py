"""Data models: discovered facts, target capabilities, and validation records."""

from repo_transfer.models.capabilities import MemberPrivileges, TargetCapabilities
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
from repo_transfer.models.policy import (
    MEMBER_MANAGEMENT_POLICY,
    Policy,
    RulesetConditions,
    is_member_privilege_policy,
)
from repo_transfer.models.report import RepositoryReport
from repo_transfer.models.repository import RepositoryRef, parse_repository
from repo_transfer.models.validation import (
    MigrationValidation,
    ValidationResult,
    ValidationStatus,
    ValidationSummary,
)

__all__ = [
    "MEMBER_MANAGEMENT_POLICY",
    "AccessFacts",
    "CIFacts",
    "Category",
    "CodeFacts",
    "DegradedCategory",
    "DiscoveredFacts",
    "GovernanceFacts",
    "IntegrationFacts",
    "MemberPrivileges",
    "MigrationValidation",
    "OrgGovernance",
    "OrganizationContext",
    "Policy",
    "RepositoryRef",
    "RepositoryReport",
    "RulesetConditions",
    "SecurityFacts",
    "TargetCapabilities",
    "ValidationResult",
    "ValidationStatus",
    "ValidationSummary",
    "is_member_privilege_policy",
    "parse_repository",
]
