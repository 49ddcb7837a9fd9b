"""Local-disk document store with the same revision semantics as GitHub."""

from __future__ import annotations

import asyncio
import hashlib
import logging
import os
import threading
from pathlib import Path
from tempfile import NamedTemporaryFile

from portal_admin.errors import ConflictError, InvalidPathError
from portal_admin.storage.base import StoredDocument

logger = logging.getLogger(__name__)


def git_blob_sha(content: bytes) -> str:
    """Compute the SHA git assigns to a blob with this content."""
    header = f"blob {len(content)}\0".encode()
    return hashlib.sha1(header + content).hexdigest()  # noqa: S324


class LocalDocumentStore:
    """Store files under ``root``; the revision token is the git blob SHA.

    Used for development and for sites served straight from a checkout.
    """

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root).resolve()
        self._lock = threading.Lock()
        logger.info("Local store ready — root=%s", self._root)

    async def close(self) -> None:
        return None

    def _resolve(self, path: str) -> Path:
        target = (self._root / path.lstrip("/")).resolve()
        if not target.is_relative_to(self._root):
            raise InvalidPathError(f"Path escapes the store root: {path}")
        return target

    async def fetch_document(self, path: str) -> StoredDocument | None:
        return await asyncio.to_thread(self._read, path)

    async def put_document(self, path: str, content: bytes, sha: str | None, message: str) -> str:
        return await asyncio.to_thread(self._write, path, content, sha, message)

    def _read(self, path: str) -> StoredDocument | None:
        target = self._resolve(path)
        if not target.is_file():
            return None
        content = target.read_bytes()
        return StoredDocument(content=content, sha=git_blob_sha(content))

    def _write(self, path: str, content: bytes, sha: str | None, message: str) -> str:
        target = self._resolve(path)
        with self._lock:
            current = target.read_bytes() if target.is_file() else None
            if current is None and sha:
                raise ConflictError(409, f"{path} does not exist at {sha}", path=path)
            if current is not None and sha != git_blob_sha(current):
                raise ConflictError(409, f"{path} does not match {sha}", path=path)

            target.parent.mkdir(parents=True, exist_ok=True)
            # Write beside the target so os.replace() stays on one filesystem
            with NamedTemporaryFile(dir=target.parent, prefix=f".{target.name}.", delete=False) as tmp:
                tmp.write(content)
            os.replace(tmp.name, target)

        new_sha = git_blob_sha(content)
        logger.info("Document written — path=%s sha=%s message=%r", path, new_sha, message)
        return new_sha
