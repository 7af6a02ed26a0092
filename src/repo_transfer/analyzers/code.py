"""Code dependencies: git submodules."""

from __future__ import annotations

import base64
import binascii
import logging
import re

from repo_transfer.analyzers.base import CategoryAnalyzer, absent_as
from repo_transfer.client import GitHubClient
from repo_transfer.models.context import OrganizationContext
from repo_transfer.models.facts import Category, CodeFacts
from repo_transfer.models.github import FileContent
from repo_transfer.models.repository import RepositoryRef

logger = logging.getLogger(__name__)

# Matches the owner in https://github.com/owner/..., git@github.com:owner/...
_GITHUB_OWNER = re.compile(r"github\.com[/:]([^/]+)/")


def decode_content(file: FileContent) -> str:
    """Text of a file fetched from the contents API; empty if undecodable."""
    if not file.content:
        return ""
    try:
        return base64.b64decode(file.content).decode("utf-8", errors="replace")
    except (binascii.Error, ValueError):
        logger.debug("Could not decode %s", file.path)
        return ""


def submodule_urls(gitmodules: str) -> list[str]:
    """The ``url = ...`` values of a .gitmodules file, in order."""
    urls = []
    for line in gitmodules.splitlines():
        key, sep, value = line.strip().partition("=")
        if sep and key.strip() == "url" and value.strip():
            urls.append(value.strip())
    return urls


def is_same_organization(url: str, owner: str) -> bool:
    if url.startswith("../"):
        return True
    match = _GITHUB_OWNER.search(url)
    return match is not None and match.group(1).lower() == owner.lower()


class CodeAnalyzer(CategoryAnalyzer):
    category = Category.CODE

    async def analyze(
        self,
        client: GitHubClient,
        repository: RepositoryRef,
        context: OrganizationContext,
    ) -> CodeFacts:
        file = await absent_as(
            client.get_as(f"repos/{repository.full_name}/contents/.gitmodules", FileContent),
            None,
        )
        if file is None:
            return CodeFacts()

        submodules = []
        for url in submodule_urls(decode_content(file)):
            if is_same_organization(url, repository.owner):
                submodules.append(f"{url} (same organization)")
            else:
                submodules.append(f"{url} (external dependency)")
        return CodeFacts(git_submodules=submodules)
