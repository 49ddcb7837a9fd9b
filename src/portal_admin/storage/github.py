"""Async GitHub Contents API client — the remote document store."""

from __future__ import annotations

import base64
import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import httpx

from portal_admin.errors import ConflictError, NetworkError, RemoteStoreError
from portal_admin.storage.base import StoredDocument

if TYPE_CHECKING:
    from portal_admin.config import GitHubConfig

logger = logging.getLogger(__name__)

_CONFLICT_STATUSES = frozenset({409, 422})


class GitHubContentsClient:
    """Read and write single files of a repository branch through the Contents API.

    Each successful write is a commit on the configured branch. Errors are
    raised as-is; retry policy belongs to the caller.
    """

    def __init__(
        self,
        config: GitHubConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        config.require()
        self._config = config
        self._client = httpx.AsyncClient(
            base_url=config.api_url,
            headers={
                "Authorization": f"Bearer {config.token}",
                "Accept": "application/vnd.github+json",
                "User-Agent": config.user_agent,
                "X-GitHub-Api-Version": "2022-11-28",
            },
            timeout=config.timeout,
            transport=transport,
        )
        logger.info("GitHub store ready — repo=%s branch=%s", config.repo, config.branch)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    def _url(self, path: str) -> str:
        return f"/repos/{self._config.repo}/contents/{quote(path.lstrip('/'))}"

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self._client.request(method, self._url(path), **kwargs)
        except httpx.TransportError as exc:
            raise NetworkError(f"{method} {path} failed: {exc}") from exc

    async def fetch_document(self, path: str) -> StoredDocument | None:
        """Return the file at ``path`` with its SHA, or ``None`` if it does not exist."""
        response = await self._request("GET", path, params={"ref": self._config.branch})
        if response.status_code == 404:
            logger.debug("Document not found — path=%s", path)
            return None
        if not response.is_success:
            raise RemoteStoreError(response.status_code, response.text, path=path)

        data = response.json()
        if not isinstance(data, dict) or data.get("type", "file") != "file":
            raise RemoteStoreError(response.status_code, f"{path} is not a file", path=path)

        if data.get("encoding") == "base64":
            content = base64.b64decode(data.get("content", ""))
        else:
            # Files over 1 MB come back without inline content
            content = await self._fetch_raw(path)
        return StoredDocument(content=content, sha=data["sha"])

    async def _fetch_raw(self, path: str) -> bytes:
        response = await self._request(
            "GET",
            path,
            params={"ref": self._config.branch},
            headers={"Accept": "application/vnd.github.raw+json"},
        )
        if not response.is_success:
            raise RemoteStoreError(response.status_code, response.text, path=path)
        return response.content

    async def put_document(self, path: str, content: bytes, sha: str | None, message: str) -> str:
        """Create or replace the file at ``path`` and return the new content SHA.

        Passing ``sha=None`` is a create; GitHub rejects it when the file
        already exists. A stale ``sha`` is rejected as well. Both surface as
        ``ConflictError``.
        """
        body: dict[str, Any] = {
            "message": message,
            "content": base64.b64encode(content).decode("ascii"),
            "branch": self._config.branch,
        }
        if sha:
            body["sha"] = sha

        response = await self._request("PUT", path, json=body)
        if response.status_code in _CONFLICT_STATUSES:
            logger.info("Write rejected — path=%s status=%d", path, response.status_code)
            raise ConflictError(response.status_code, response.text, path=path)
        if not response.is_success:
            raise RemoteStoreError(response.status_code, response.text, path=path)

        new_sha = response.json()["content"]["sha"]
        logger.info("Document written — path=%s sha=%s", path, new_sha)
        return new_sha
