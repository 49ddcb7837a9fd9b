"""Check-then-write with bounded re-fetch-and-retry on revision conflicts.

The store offers no real compare-and-swap across the check and the write,
so a concurrent writer can still win the race. Each rejection re-reads the
current revision and tries again, up to ``max_attempts`` writes in total.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from portal_admin.errors import ConflictError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from portal_admin.storage.base import DocumentStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class WriteResult:
    path: str
    sha: str
    written: bool
    attempts: int
    previous_sha: str | None = None


async def put_with_retry(
    store: DocumentStore,
    path: str,
    content: bytes,
    message: str,
    *,
    max_attempts: int = 3,
    backoff_seconds: float = 2.0,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> WriteResult:
    """Write ``content`` to ``path`` using whatever revision the store reports.

    Skips the write when the stored bytes are already identical. On
    ``ConflictError`` sleeps ``backoff_seconds * attempt`` and retries with a
    freshly fetched revision; the last conflict is re-raised. Any other store
    error propagates immediately.
    """
    attempt = 0
    while True:
        attempt += 1
        current = await store.fetch_document(path)
        if current is not None and current.content == content:
            logger.debug("Unchanged, skipping write — path=%s sha=%s", path, current.sha)
            return WriteResult(path=path, sha=current.sha, written=False, attempts=attempt, previous_sha=current.sha)

        previous_sha = current.sha if current else None
        try:
            sha = await store.put_document(path, content, previous_sha, message)
        except ConflictError:
            if attempt >= max(max_attempts, 1):
                logger.warning("Conflict retries exhausted — path=%s attempts=%d", path, attempt)
                raise
            delay = backoff_seconds * attempt
            logger.info(
                "Revision conflict, retrying — path=%s attempt=%d/%d delay=%.1fs",
                path,
                attempt,
                max_attempts,
                delay,
            )
            await sleep(delay)
            continue
        return WriteResult(path=path, sha=sha, written=True, attempts=attempt, previous_sha=previous_sha)
