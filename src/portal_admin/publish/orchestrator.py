"""Publish orchestrator — brings the store in line with a collection draft."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import PurePosixPath
from typing import TYPE_CHECKING

from portal_admin.errors import PortalAdminError
from portal_admin.storage.writes import put_with_retry

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from portal_admin.config import PublishConfig
    from portal_admin.drafts.cache import DraftCache
    from portal_admin.models.collection import CollectionKind
    from portal_admin.storage.base import DocumentStore
    from portal_admin.storage.writes import WriteResult

logger = logging.getLogger(__name__)


@dataclass(kw_only=True)
class PublishReport:
    """Outcome of one publish run."""

    collection: CollectionKind
    published: bool
    failed: list[int] = field(default_factory=list)
    errors: dict[int, str] = field(default_factory=dict)
    files_written: int = 0
    document_written: bool = False
    revision: str | None = None
    replaced_revision: str | None = None
    """Store revision overwritten although the draft was based on an older one."""


def document_message(kind: CollectionKind) -> str:
    return f"Update {kind.label} - {datetime.now(UTC).isoformat()}"


def description_message(path: str) -> str:
    return f"Update description file: {PurePosixPath(path).name}"


class PublishOrchestrator:
    """Sequence description-file writes, then the collection document.

    Description files are written one at a time with a pause in between so a
    run does not race its own commits on the branch. The collection document
    is written only when every description file made it; otherwise the failed
    record ids are reported and the draft stays dirty. Runs are serialized
    per process.
    """

    def __init__(
        self,
        store: DocumentStore,
        config: PublishConfig,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._store = store
        self._config = config
        self._sleep = sleep
        self._lock = asyncio.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    async def publish(self, cache: DraftCache) -> PublishReport:
        """Publish ``cache``; waits for any run already in progress."""
        if self._lock.locked():
            logger.info("Publish queued behind a running publish — collection=%s", cache.kind)
        async with self._lock:
            return await self._publish(cache)

    async def _write(self, path: str, content: bytes, message: str) -> WriteResult:
        return await put_with_retry(
            self._store,
            path,
            content,
            message,
            max_attempts=self._config.max_attempts,
            backoff_seconds=self._config.backoff_seconds,
            sleep=self._sleep,
        )

    async def _publish(self, cache: DraftCache) -> PublishReport:
        started_at = time.monotonic()
        generation = cache.generation
        base_revision = cache.revision
        records = cache.records
        document = cache.document_bytes()
        report = PublishReport(collection=cache.kind, published=False)

        logger.info(
            "Publish started — collection=%s records=%d dirty=%s",
            cache.kind,
            len(records),
            cache.dirty,
        )

        pending_pause = False
        for record in records:
            for path, text in record.auxiliary_files().items():
                if pending_pause:
                    await self._sleep(self._config.write_interval_seconds)
                pending_pause = True
                try:
                    result = await self._write(path, text.encode("utf-8"), description_message(path))
                except PortalAdminError as exc:
                    logger.warning("Description write failed — id=%s path=%s error=%s", record.id, path, exc)
                    report.errors[record.id] = str(exc)
                    break
                report.files_written += int(result.written)

        if report.errors:
            report.failed = sorted(report.errors)
            logger.error(
                "Publish aborted, collection document not written — collection=%s failed=%s",
                cache.kind,
                report.failed,
            )
            return report

        # All-or-nothing: errors here propagate to the caller
        result = await self._write(cache.document_path, document, document_message(cache.kind))
        if result.written and result.previous_sha and base_revision and result.previous_sha != base_revision:
            report.replaced_revision = result.previous_sha
            logger.warning(
                "Replaced a revision newer than the draft's base — collection=%s base=%s replaced=%s",
                cache.kind,
                base_revision,
                result.previous_sha,
            )
        report.published = True
        report.document_written = result.written
        report.revision = result.sha

        if cache.generation == generation:
            cache.mark_clean(result.sha)
            await cache.load()
        else:
            logger.warning("Draft changed during publish, left dirty — collection=%s", cache.kind)

        logger.info(
            "Publish finished — collection=%s files_written=%d document_written=%s duration_ms=%.0f",
            cache.kind,
            report.files_written,
            report.document_written,
            (time.monotonic() - started_at) * 1000,
        )
        return report
