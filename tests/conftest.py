"""Shared fixtures: an in-memory GitHub API served through httpx.MockTransport."""

from __future__ import annotations

import base64
from collections import Counter
from typing import Any

import httpx
import pytest
import pytest_asyncio

from repo_transfer.client import GitHubClient
from repo_transfer.config import Settings


class FakeGitHub:
    """Routes requests by URL path; unknown paths answer 404."""

    def __init__(self) -> None:
        self.routes: dict[str, tuple[int, Any]] = {}
        self.calls: Counter[str] = Counter()
        self.requests: list[httpx.Request] = []

    def add(self, path: str, body: Any = None, status: int = 200) -> None:
        self.routes[path] = (status, {} if body is None else body)

    def add_file(self, path: str, text: str) -> None:
        encoded = base64.b64encode(text.encode()).decode()
        self.add(path, {"type": "file", "encoding": "base64", "content": encoded})

    def fail(self, path: str, status: int = 500) -> None:
        self.add(path, {"message": "Server Error"}, status=status)

    def count(self, path: str) -> int:
        return self.calls[path]

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.lstrip("/")
        self.calls[path] += 1
        self.requests.append(request)
        if path not in self.routes:
            return httpx.Response(404, json={"message": "Not Found"})
        status, body = self.routes[path]
        return httpx.Response(status, json=body)


def seed_source_org(api: FakeGitHub) -> None:
    """Organization ``acme`` with repositories ``api`` (busy) and ``legacy`` (bare)."""
    api.add(
        "orgs/acme/installations",
        {
            "total_count": 2,
            "installations": [
                {"id": 1, "app_slug": "dependabot", "repository_selection": "all"},
                {"id": 2, "app_slug": "deploy-bot", "repository_selection": "selected"},
            ],
        },
    )
    api.add(
        "orgs/acme",
        {
            "login": "acme",
            "default_repository_permission": "read",
            "members_can_create_repositories": False,
            "members_can_fork_private_repositories": False,
            "members_can_delete_repositories": True,
            "members_can_delete_issues": True,
            "members_can_create_teams": True,
            "two_factor_requirement_enabled": True,
            "web_commit_signoff_required": False,
        },
    )
    api.add(
        "orgs/acme/rulesets",
        [
            {"id": 10, "name": "Main protection", "target": "branch", "enforcement": "active"},
            {"id": 11, "name": "Prod repos", "target": "repository", "enforcement": "active"},
            {"id": 12, "name": "Everything", "target": "repository", "enforcement": "evaluate"},
        ],
    )
    api.add(
        "orgs/acme/rulesets/11",
        {
            "id": 11,
            "name": "Prod repos",
            "target": "repository",
            "enforcement": "active",
            "conditions": {"repository_name": {"include": ["api"], "exclude": []}},
            "rules": [{"type": "repository_delete"}],
        },
    )
    api.add(
        "orgs/acme/rulesets/12",
        {
            "id": 12,
            "name": "Everything",
            "target": "repository",
            "enforcement": "evaluate",
            "conditions": {"repository_name": {"include": ["*"], "exclude": ["legacy"]}},
            "rules": [],
        },
    )
    api.add("repos/acme/.github/contents/SECURITY.md", {"type": "file"})
    api.add("repos/acme/.github/contents/.github/ISSUE_TEMPLATE", [{"name": "bug.md"}])
    api.add(
        "orgs/acme/security/campaigns",
        [{"id": 1, "name": "Q3 secrets", "status": "active"}],
    )

    api.add("repos/acme/api/teams", [{"name": "backend", "slug": "backend", "permission": "push"}])
    api.add("repos/acme/api/collaborators", [{"login": "alice", "role_name": "admin"}])
    api.add_file("repos/acme/api/contents/.github/CODEOWNERS", "* @acme/backend @alice\n")
    api.add_file(
        "repos/acme/api/contents/.gitmodules",
        '[submodule "lib"]\n\tpath = lib\n\turl = https://github.com/acme/lib.git\n'
        '[submodule "vendor"]\n\tpath = vendor\n\turl = https://github.com/other/vendor.git\n',
    )
    api.add("repos/acme/api/actions/organization-secrets", {"total_count": 1, "secrets": [{"name": "NPM_TOKEN"}]})
    api.add("repos/acme/api/environments", {"total_count": 1, "environments": [{"name": "production"}]})
    api.add("repos/acme/api/contents/.github/pull_request_template.md", {"type": "file"})


@pytest.fixture
def fake_api() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def settings() -> Settings:
    return Settings(token="test-token", api_url="https://api.github.test", max_concurrency=4)


@pytest_asyncio.fixture
async def client(fake_api: FakeGitHub, settings: Settings):
    async with GitHubClient(settings, transport=httpx.MockTransport(fake_api.handler)) as gh:
        yield gh


@pytest.fixture
def source_org(fake_api: FakeGitHub) -> FakeGitHub:
    seed_source_org(fake_api)
    return fake_api
