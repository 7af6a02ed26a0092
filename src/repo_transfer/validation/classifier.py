"""Classify discovered dependencies against a target organization.

Every discovered item yields exactly one ValidationResult. Classification is
a pure function of its inputs: no I/O, no shared state, and no failure mode.
"""

from __future__ import annotations

from collections.abc import Iterable

from repo_transfer.models.capabilities import MemberPrivileges, TargetCapabilities
from repo_transfer.models.facts import (
    AccessFacts,
    CIFacts,
    CodeFacts,
    DiscoveredFacts,
    GovernanceFacts,
    IntegrationFacts,
    SecurityFacts,
)
from repo_transfer.models.policy import Policy, is_member_privilege_policy
from repo_transfer.models.validation import (
    MigrationValidation,
    ValidationResult,
    ValidationStatus,
    ValidationSummary,
)

# Apps that any organization can install without special arrangements.
COMMON_APPS = ("dependabot", "github-actions", "codecov", "sonarcloud")

TEMPLATE_RECOMMENDATION = "Copy template to target organization's .github repository"

# Restriction text -> (attribute on MemberPrivileges, value that means "missing", what to ask for).
_PRIVILEGE_CHECKS = (
    ("repository creation restricted", "can_create_repos", True,
     "Repository creation needs to be restricted"),
    ("private repository forking restricted", "can_fork_private_repos", True,
     "Private repository forking needs to be restricted"),
    ("two-factor authentication required", "two_factor_required", False,
     "Two-factor authentication needs to be required"),
    ("web commit signoff required", "web_commit_signoff_required", False,
     "Web commit signoff needs to be required"),
)


def validate(
    facts: DiscoveredFacts,
    capabilities: TargetCapabilities,
    assign_teams: bool = False,
) -> MigrationValidation:
    """Classify every discovered item and aggregate the outcome.

    ``assign_teams`` is accepted for callers that pass it through and has no
    effect on classification.
    """
    validation = MigrationValidation(
        target_organization=capabilities.organization,
        overall_readiness=ValidationStatus.UNKNOWN,
        summary=ValidationSummary(),
        apps_integrations=_validate_apps(facts.integrations, capabilities),
        access_permissions=_validate_access(facts.access, capabilities),
        ci_dependencies=_validate_ci(facts.ci, capabilities),
        governance=_validate_governance(facts.governance, capabilities),
        code_dependencies=_validate_code(facts.code),
        security_compliance=_validate_security(facts.security),
    )
    summary = _calculate_summary(validation.all_results())
    validation.summary = summary
    validation.overall_readiness = _determine_overall_readiness(summary)
    return validation


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _base_name(item: str) -> str:
    """``"frontend (write)"`` -> ``"frontend"``."""
    return item.split(" (", 1)[0]


def _available(name: str, available: Iterable[str]) -> bool:
    lowered = name.lower()
    return any(lowered == candidate.lower() for candidate in available)


def _is_common_app(name: str) -> bool:
    lowered = name.lower()
    return any(common in lowered for common in COMMON_APPS)


# ---------------------------------------------------------------------------
# Per-category classification
# ---------------------------------------------------------------------------


def _validate_apps(integrations: IntegrationFacts, capabilities: TargetCapabilities) -> list[ValidationResult]:
    results = []
    for app in integrations.installed_apps:
        name = _base_name(app)
        if _available(name, capabilities.apps):
            result = ValidationResult(
                item=app,
                status=ValidationStatus.READY,
                message="App is available in target organization",
            )
        elif _is_common_app(name):
            result = ValidationResult(
                item=app,
                status=ValidationStatus.SETUP_NEEDED,
                message="Standard app, can be installed",
                recommendation=f"Install {name} in target organization",
            )
        else:
            result = ValidationResult(
                item=app,
                status=ValidationStatus.BLOCKER,
                message="Custom app, requires manual setup",
                recommendation="Review app requirements and setup in target org",
            )
        results.append(result)
    return results


def _validate_access(access: AccessFacts, capabilities: TargetCapabilities) -> list[ValidationResult]:
    results = []
    for team in access.teams:
        name = _base_name(team)
        if _available(name, capabilities.teams):
            results.append(
                ValidationResult(
                    item=team,
                    status=ValidationStatus.READY,
                    message="Team exists in target organization",
                )
            )
        else:
            results.append(
                ValidationResult(
                    item=team,
                    status=ValidationStatus.BLOCKER,
                    message="Team does not exist in target organization",
                    recommendation=f"Create team '{name}' in target organization",
                )
            )

    for collaborator in access.individual_collaborators:
        results.append(
            ValidationResult(
                item=collaborator,
                status=ValidationStatus.WARNING,
                message="Individual access requires manual setup in target organization",
                recommendation="Invite user to target organization and configure permissions",
            )
        )

    for requirement in access.codeowners_requirements:
        results.append(_validate_codeowners_entry(requirement, capabilities))
    return results


def _validate_codeowners_entry(requirement: str, capabilities: TargetCapabilities) -> ValidationResult:
    if requirement.startswith("Team: @"):
        parts = requirement.removeprefix("Team: @").split("/")
        if len(parts) == 2 and all(parts):
            team = parts[1]
            if _available(team, capabilities.teams):
                return ValidationResult(
                    item=requirement,
                    status=ValidationStatus.READY,
                    message="CODEOWNERS team exists in target organization",
                )
            return ValidationResult(
                item=requirement,
                status=ValidationStatus.BLOCKER,
                message="CODEOWNERS team does not exist in target organization",
                recommendation=f"Create team '{team}' in target organization or update CODEOWNERS",
            )
    elif requirement.startswith("User: @"):
        return ValidationResult(
            item=requirement,
            status=ValidationStatus.WARNING,
            message="CODEOWNERS user requires manual setup in target organization",
            recommendation="Invite user to target organization or update CODEOWNERS",
        )

    return ValidationResult(
        item=requirement,
        status=ValidationStatus.UNKNOWN,
        message="Unrecognized CODEOWNERS entry",
        recommendation="Check CODEOWNERS manually",
    )


def _validate_ci(ci: CIFacts, capabilities: TargetCapabilities) -> list[ValidationResult]:
    results = []
    for secret in ci.organization_secrets:
        results.append(
            _validate_named(
                secret,
                capabilities.secrets,
                ready="Secret exists in target organization",
                missing="Secret needs to be created in target organization",
                recommendation=f"Create secret '{secret}' in target organization",
            )
        )
    for variable in ci.organization_variables:
        results.append(
            _validate_named(
                variable,
                capabilities.variables,
                ready="Variable exists in target organization",
                missing="Variable needs to be created in target organization",
                recommendation=f"Create variable '{variable}' in target organization",
            )
        )
    for runner in ci.self_hosted_runners:
        results.append(
            _validate_named(
                runner,
                capabilities.runners,
                ready="Runner is available in target organization",
                missing="Self-hosted runner needs to be set up",
                recommendation=f"Configure runner '{runner}' in target organization",
            )
        )
    for workflow in ci.required_workflows:
        results.append(
            ValidationResult(
                item=workflow,
                status=ValidationStatus.REVIEW,
                message="Required workflow policy needs manual configuration",
                recommendation="Set up equivalent required workflow policy in target organization",
            )
        )
    return results


def _validate_named(
    item: str,
    available: list[str],
    *,
    ready: str,
    missing: str,
    recommendation: str,
) -> ValidationResult:
    if _available(item, available):
        return ValidationResult(item=item, status=ValidationStatus.READY, message=ready)
    return ValidationResult(
        item=item,
        status=ValidationStatus.SETUP_NEEDED,
        message=missing,
        recommendation=recommendation,
    )


def _validate_governance(governance: GovernanceFacts, capabilities: TargetCapabilities) -> list[ValidationResult]:
    results = []
    for policy in governance.organization_policies:
        if is_member_privilege_policy(policy):
            results.append(_validate_member_privilege_policy(policy, capabilities.member_privileges))
        else:
            results.append(_validate_repository_policy(policy, capabilities.repository_policies))

    for template in governance.issue_templates:
        results.append(
            ValidationResult(
                item=template,
                status=ValidationStatus.REVIEW,
                message="Issue template requires manual setup",
                recommendation=TEMPLATE_RECOMMENDATION,
            )
        )
    for template in governance.pull_request_templates:
        results.append(
            ValidationResult(
                item=template,
                status=ValidationStatus.REVIEW,
                message="PR template requires manual setup",
                recommendation=TEMPLATE_RECOMMENDATION,
            )
        )
    return results


def _validate_member_privilege_policy(policy: Policy, privileges: MemberPrivileges) -> ValidationResult:
    missing: list[str] = []
    for restriction in policy.restrictions:
        lowered = restriction.lower()
        for phrase, attribute, missing_when, request in _PRIVILEGE_CHECKS:
            if phrase in lowered:
                if getattr(privileges, attribute) is missing_when:
                    missing.append(request)
                break

    if not missing:
        return ValidationResult(
            item=policy.label,
            status=ValidationStatus.READY,
            message="Member privilege settings meet policy requirements",
        )
    if len(missing) < len(policy.restrictions):
        return ValidationResult(
            item=policy.label,
            status=ValidationStatus.SETUP_NEEDED,
            message=f"Some member privileges need adjustment ({len(missing)} missing)",
            recommendation="Configure missing restrictions: " + ", ".join(missing),
        )
    return ValidationResult(
        item=policy.label,
        status=ValidationStatus.SETUP_NEEDED,
        message="Member privileges need configuration to meet policy requirements",
        recommendation="Configure required restrictions: " + ", ".join(missing),
    )


def _validate_repository_policy(policy: Policy, target_policies: list[Policy]) -> ValidationResult:
    if _available(policy.name, (target.name for target in target_policies)):
        return ValidationResult(
            item=policy.label,
            status=ValidationStatus.REVIEW,
            message="Similar repository policy found, requires verification",
            recommendation="Verify policy configuration matches requirements",
        )
    return ValidationResult(
        item=policy.label,
        status=ValidationStatus.SETUP_NEEDED,
        message="Repository policy needs to be configured",
        recommendation=f"Set up '{policy.name}' repository policy in target organization",
    )


def _validate_code(code: CodeFacts) -> list[ValidationResult]:
    results = []
    for submodule in code.git_submodules:
        if "external dependency" in submodule:
            results.append(
                ValidationResult(
                    item=submodule,
                    status=ValidationStatus.REVIEW,
                    message="External repository access needs verification",
                    recommendation="Verify target organization has access to this external repository",
                )
            )
        else:
            results.append(
                ValidationResult(
                    item=submodule,
                    status=ValidationStatus.REVIEW,
                    message="Internal submodule, may need access setup",
                    recommendation="Ensure target org has access to submodule repository",
                )
            )
    return results


def _validate_security(security: SecurityFacts) -> list[ValidationResult]:
    return [
        ValidationResult(
            item=campaign,
            status=ValidationStatus.REVIEW,
            message="Security campaign requires manual setup",
            recommendation="Configure equivalent security measures in target organization",
        )
        for campaign in security.security_campaigns
    ]


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------


def _calculate_summary(results: list[ValidationResult]) -> ValidationSummary:
    summary = ValidationSummary()
    for result in results:
        summary.total += 1
        if result.status == ValidationStatus.READY:
            summary.ready += 1
        elif result.status == ValidationStatus.SETUP_NEEDED:
            summary.setup_needed += 1
        elif result.status == ValidationStatus.BLOCKER:
            summary.blockers += 1
        elif result.status == ValidationStatus.WARNING:
            summary.warnings += 1
        elif result.status == ValidationStatus.REVIEW:
            summary.review += 1
        else:
            summary.unknown += 1
    return summary


def _determine_overall_readiness(summary: ValidationSummary) -> ValidationStatus:
    if summary.blockers > 0:
        return ValidationStatus.BLOCKER
    if summary.setup_needed > 0 or summary.review > 0:
        return ValidationStatus.SETUP_NEEDED
    if summary.warnings > 0:
        return ValidationStatus.WARNING
    if summary.ready == summary.total:
        return ValidationStatus.READY
    return ValidationStatus.UNKNOWN
