"""Per-category fact analyzers and organization-wide loaders."""

from repo_transfer.analyzers.access import AccessAnalyzer
from repo_transfer.analyzers.base import CategoryAnalyzer
from repo_transfer.analyzers.cicd import CICDAnalyzer
from repo_transfer.analyzers.code import CodeAnalyzer
from repo_transfer.analyzers.governance import GovernanceAnalyzer
from repo_transfer.analyzers.security import SecurityAnalyzer


def default_analyzers() -> list[CategoryAnalyzer]:
    """One analyzer per repository-level category."""
    return [
        CodeAnalyzer(),
        CICDAnalyzer(),
        AccessAnalyzer(),
        SecurityAnalyzer(),
        GovernanceAnalyzer(),
    ]


__all__ = [
    "AccessAnalyzer",
    "CICDAnalyzer",
    "CategoryAnalyzer",
    "CodeAnalyzer",
    "GovernanceAnalyzer",
    "SecurityAnalyzer",
    "default_analyzers",
]
