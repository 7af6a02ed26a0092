"""Readiness taxonomy and migration validation records."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class ValidationStatus(StrEnum):
    READY = "ready"  # already available in the target organization
    SETUP_NEEDED = "setup_needed"  # can be created or configured
    BLOCKER = "blocker"  # missing and not trivially reproducible
    WARNING = "warning"  # needs attention but does not block
    REVIEW = "review"  # always a manual decision
    UNKNOWN = "unknown"  # could not be determined


class ValidationResult(BaseModel):
    """Readiness of one discovered dependency."""

    model_config = ConfigDict(frozen=True)

    item: str
    status: ValidationStatus
    message: str = ""
    recommendation: str = ""


class ValidationSummary(BaseModel):
    """Counts by status; ``total`` is always the sum of the six counters."""

    ready: int = 0
    setup_needed: int = 0
    blockers: int = 0
    warnings: int = 0
    review: int = 0
    unknown: int = 0
    total: int = 0


class MigrationValidation(BaseModel):
    """Every dependency of one repository classified against one target organization."""

    target_organization: str
    overall_readiness: ValidationStatus
    summary: ValidationSummary
    code_dependencies: list[ValidationResult] = []
    ci_dependencies: list[ValidationResult] = []
    access_permissions: list[ValidationResult] = []
    security_compliance: list[ValidationResult] = []
    apps_integrations: list[ValidationResult] = []
    governance: list[ValidationResult] = []

    def all_results(self) -> list[ValidationResult]:
        return [
            *self.apps_integrations,
            *self.access_permissions,
            *self.ci_dependencies,
            *self.governance,
            *self.code_dependencies,
            *self.security_compliance,
        ]
