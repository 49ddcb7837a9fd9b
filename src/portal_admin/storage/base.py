"""Document store protocol implemented by the GitHub and local-disk backends."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True, kw_only=True)
class StoredDocument:
    """Bytes of a stored file together with its revision token."""

    content: bytes
    sha: str


@runtime_checkable
class DocumentStore(Protocol):
    """Path-addressed file store with SHA-based optimistic concurrency.

    ``fetch_document`` returns ``None`` when the path does not exist.
    ``put_document`` creates the file when ``sha`` is ``None`` and replaces it
    otherwise; a stale or missing ``sha`` raises ``ConflictError``. Every
    successful write yields a new revision token. Implementations never retry.
    """

    async def fetch_document(self, path: str) -> StoredDocument | None: ...

    async def put_document(self, path: str, content: bytes, sha: str | None, message: str) -> str: ...

    async def close(self) -> None: ...
