"""Shared fixtures: an in-memory GitHub Contents API and component configs."""

from __future__ import annotations

import base64
import json
from collections import defaultdict
from unittest.mock import AsyncMock

import httpx
import pytest

from portal_admin.config import EditorConfig, GitHubConfig, PublishConfig
from portal_admin.storage.github import GitHubContentsClient
from portal_admin.storage.keyvalue import MemoryKeyValueStore
from portal_admin.storage.local import git_blob_sha

REPO = "owner/site"
API_URL = "https://api.github.test"


class FakeGitHub:
    """Just enough of the Contents API for one repository branch.

    ``fail(method, path, *statuses)`` queues error responses that are served
    before the normal behaviour resumes. ``large`` holds paths that answer
    like files over 1 MB (no inline content).
    """

    def __init__(self) -> None:
        self.files: dict[str, bytes] = {}
        self.requests: list[httpx.Request] = []
        self.large: set[str] = set()
        self._failures: dict[tuple[str, str], list[int]] = defaultdict(list)

    def seed(self, path: str, content: bytes | str) -> str:
        data = content.encode("utf-8") if isinstance(content, str) else content
        self.files[path] = data
        return git_blob_sha(data)

    def seed_json(self, path: str, value: object) -> str:
        return self.seed(path, json.dumps(value, ensure_ascii=False, indent=2))

    def sha(self, path: str) -> str:
        return git_blob_sha(self.files[path])

    def fail(self, method: str, path: str, *statuses: int) -> None:
        self._failures[(method, path)].extend(statuses)

    def puts(self, path: str | None = None) -> list[httpx.Request]:
        return [
            r for r in self.requests if r.method == "PUT" and (path is None or self._path(r) == path)
        ]

    @staticmethod
    def _path(request: httpx.Request) -> str:
        prefix = f"/repos/{REPO}/contents/"
        return request.url.path.removeprefix(prefix)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = self._path(request)
        queued = self._failures.get((request.method, path))
        if queued:
            return httpx.Response(queued.pop(0), json={"message": "injected failure"})
        if request.method == "GET":
            return self._get(request, path)
        if request.method == "PUT":
            return self._put(request, path)
        return httpx.Response(405, json={"message": "Method Not Allowed"})

    def _get(self, request: httpx.Request, path: str) -> httpx.Response:
        if path not in self.files:
            return httpx.Response(404, json={"message": "Not Found"})
        content = self.files[path]
        if request.headers.get("accept") == "application/vnd.github.raw+json":
            return httpx.Response(200, content=content)
        if path in self.large:
            return httpx.Response(
                200,
                json={"type": "file", "encoding": "none", "content": "", "sha": git_blob_sha(content)},
            )
        encoded = base64.encodebytes(content).decode("ascii")
        return httpx.Response(
            200,
            json={"type": "file", "encoding": "base64", "content": encoded, "sha": git_blob_sha(content)},
        )

    def _put(self, request: httpx.Request, path: str) -> httpx.Response:
        body = json.loads(request.content)
        sha = body.get("sha")
        if path in self.files:
            if sha != git_blob_sha(self.files[path]):
                return httpx.Response(409, json={"message": f"{path} does not match {sha}"})
        elif sha:
            return httpx.Response(422, json={"message": "sha supplied for a new file"})
        content = base64.b64decode(body["content"])
        self.files[path] = content
        new_sha = git_blob_sha(content)
        return httpx.Response(
            201 if sha is None else 200,
            json={"content": {"path": path, "sha": new_sha}, "commit": {"message": body["message"]}},
        )


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def github_config() -> GitHubConfig:
    return GitHubConfig(token="test-token", repo=REPO, branch="main", api_url=API_URL)


@pytest.fixture
async def github_client(fake_github: FakeGitHub, github_config: GitHubConfig):
    """GitHub store client wired to the fake API."""
    client = GitHubContentsClient(github_config, transport=httpx.MockTransport(fake_github.handler))
    yield client
    await client.close()


@pytest.fixture
def snapshots() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def no_sleep() -> AsyncMock:
    """Stand-in for ``asyncio.sleep`` that records the requested delays."""
    return AsyncMock()


@pytest.fixture
def publish_config() -> PublishConfig:
    return PublishConfig(max_attempts=3, backoff_seconds=2.0, write_interval_seconds=1.0)


@pytest.fixture
def editor_config() -> EditorConfig:
    return EditorConfig(first_record_id=1, career_description_files=False)
