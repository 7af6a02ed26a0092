"""Async GitHub REST client.

A thin wrapper over ``httpx.AsyncClient`` that owns authentication, page
size, and a concurrency bound shared by every caller in a batch. 403 and 404
responses raise FeatureAbsentError, which analysis code treats as "this
capability does not exist here" rather than as a failure.
"""

from __future__ import annotations

import asyncio
import logging
from functools import lru_cache
from typing import Any, TypeVar

import httpx
from pydantic import TypeAdapter

from repo_transfer.config import Settings
from repo_transfer.errors import APIError, FeatureAbsentError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_ABSENT_STATUSES = (403, 404)


@lru_cache(maxsize=None)
def _adapter(schema: Any) -> TypeAdapter[Any]:
    return TypeAdapter(schema)


class GitHubClient:
    """Authenticated access to one GitHub API endpoint."""

    def __init__(
        self,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "repo-transfer/0.1",
        }
        if settings.token is not None:
            headers["Authorization"] = f"Bearer {settings.token.get_secret_value()}"

        self._settings = settings
        self._semaphore = asyncio.Semaphore(settings.max_concurrency)
        self._http = httpx.AsyncClient(
            base_url=settings.api_url.rstrip("/") + "/",
            headers=headers,
            params={"per_page": settings.per_page},
            timeout=settings.timeout,
            follow_redirects=True,
            transport=transport,
        )

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def close(self) -> None:
        await self._http.aclose()

    async def request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        """Send one request and return the decoded JSON body (None for 204)."""
        path = path.lstrip("/")
        async with self._semaphore:
            logger.debug("%s %s", method, path)
            response = await self._http.request(method, path, params=params, json=json)

        if response.status_code in _ABSENT_STATUSES:
            logger.debug("%s %s: HTTP %d, treating as absent", method, path, response.status_code)
            raise FeatureAbsentError(method, path, response.status_code, _error_detail(response))
        if response.status_code >= 400:
            raise APIError(method, path, response.status_code, _error_detail(response))
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            raise APIError(method, path, response.status_code, "invalid JSON body") from None

    async def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return await self.request("GET", path, params=params)

    async def get_as(
        self,
        path: str,
        schema: type[T] | Any,
        params: dict[str, Any] | None = None,
    ) -> T:
        """GET and validate the body against ``schema`` (a model or a type like ``list[Team]``)."""
        data = await self.get(path, params=params)
        return _adapter(schema).validate_python(data)

    async def exists(self, path: str) -> bool:
        """True if ``path`` answers, False on 403/404."""
        try:
            await self.get(path)
        except FeatureAbsentError:
            return False
        return True

    async def post(self, path: str, json: Any = None) -> Any:
        return await self.request("POST", path, json=json)

    async def put(self, path: str, json: Any = None) -> Any:
        return await self.request("PUT", path, json=json)

    async def patch(self, path: str, json: Any = None) -> Any:
        return await self.request("PATCH", path, json=json)


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict):
        return str(body.get("message", ""))
    return ""
