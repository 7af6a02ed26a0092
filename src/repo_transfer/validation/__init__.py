"""Target-organization scanning and migration readiness classification."""

from repo_transfer.validation.classifier import COMMON_APPS, validate
from repo_transfer.validation.scanner import describe_rule, scan_target_capabilities

__all__ = [
    "COMMON_APPS",
    "describe_rule",
    "scan_target_capabilities",
    "validate",
]
