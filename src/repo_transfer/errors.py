"""Error taxonomy for repository analysis and validation."""

from __future__ import annotations


class RepoTransferError(Exception):
    """Base class for all repo-transfer errors."""


class MalformedRepositoryError(RepoTransferError, ValueError):
    """A repository identifier is not in ``owner/name`` form.

    Fatal for that single repository only; batch callers record it on the
    repository's result and carry on with the rest.
    """

    def __init__(self, identifier: str) -> None:
        super().__init__(f"repository '{identifier}' must be in format 'owner/repo'")
        self.identifier = identifier


class APIError(RepoTransferError):
    """The GitHub API answered with a non-success status or an unreadable body."""

    def __init__(self, method: str, path: str, status_code: int, detail: str = "") -> None:
        message = f"{method} {path} failed with HTTP {status_code}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.method = method
        self.path = path
        self.status_code = status_code


class FeatureAbsentError(APIError):
    """HTTP 403/404: the feature is absent or not visible to this token.

    Never fatal: callers treat it as "nothing there".
    """
