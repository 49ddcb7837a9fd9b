"""Local draft of one collection — the optimistic copy edited before publish."""

from __future__ import annotations

import logging
from collections import Counter
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from portal_admin.errors import PortalAdminError
from portal_admin.models.collection import decode_collection, dump_collection, parse_collection

if TYPE_CHECKING:
    from collections.abc import Callable

    from portal_admin.models.collection import CollectionKind, Record
    from portal_admin.storage.base import DocumentStore
    from portal_admin.storage.keyvalue import KeyValueStore

logger = logging.getLogger(__name__)


class DraftSource(StrEnum):
    """Where the current draft was loaded from."""

    STORE = "store"
    SNAPSHOT = "snapshot"
    EMPTY = "empty"


class DraftCache:
    """In-memory collection mirrored into a durable local snapshot.

    The draft diverges from the store between a ``mutate`` and the next
    successful publish; ``dirty`` tracks exactly that window.
    """

    def __init__(
        self,
        kind: CollectionKind,
        store: DocumentStore,
        snapshots: KeyValueStore,
        *,
        document_path: str,
    ) -> None:
        self.kind = kind
        self.document_path = document_path
        self._store = store
        self._snapshots = snapshots
        self._records: list[Record] = []
        self._dirty = False
        self._revision: str | None = None
        self._source = DraftSource.EMPTY
        self._generation = 0

    @property
    def records(self) -> list[Record]:
        return list(self._records)

    @property
    def generation(self) -> int:
        """Counter bumped whenever the draft's records are replaced."""
        return self._generation

    @property
    def dirty(self) -> bool:
        return self._dirty

    @property
    def revision(self) -> str | None:
        """SHA of the collection document as last observed in the store."""
        return self._revision

    @property
    def source(self) -> DraftSource:
        return self._source

    def get(self, record_id: int) -> Record | None:
        return next((r for r in self._records if r.id == record_id), None)

    def document_bytes(self) -> bytes:
        return dump_collection(self._records)

    async def load(self) -> list[Record]:
        """Replace the draft with the store's copy, falling back to the snapshot.

        Edits made while the fetches are in flight win: the draft is then left
        as it is, still dirty.
        """
        generation = self._generation
        try:
            document = await self._store.fetch_document(self.document_path)
            records = [] if document is None else decode_collection(self.kind, document.content)
            records = await self._resolve_auxiliary(records)
        except (PortalAdminError, ValueError) as exc:
            logger.warning(
                "Store load failed, using local snapshot — collection=%s error=%s",
                self.kind,
                exc,
            )
            if self._changed_since(generation):
                return self.records
            self._restore_snapshot()
            return self.records

        if self._changed_since(generation):
            return self.records

        previous = self._snapshots.get(self.kind.snapshot_key)
        if isinstance(previous, dict) and previous.get("dirty"):
            logger.warning("Replacing unpublished local snapshot — collection=%s", self.kind)

        self._records = records
        self._generation += 1
        self._revision = document.sha if document else None
        self._dirty = False
        self._source = DraftSource.STORE
        self._save_snapshot()
        logger.info(
            "Draft loaded — collection=%s records=%d sha=%s",
            self.kind,
            len(records),
            self._revision,
        )
        return self.records

    def _changed_since(self, generation: int) -> bool:
        if self._generation == generation:
            return False
        logger.warning("Draft edited during load, keeping local edits — collection=%s", self.kind)
        return True

    async def _resolve_auxiliary(self, records: list[Record]) -> list[Record]:
        """Read description texts that live in their own files back into the records."""
        resolved = []
        for record in records:
            description_file = getattr(record, "description_file", None)
            if description_file and not record.description:
                text = await self._store.fetch_document(description_file)
                if text is None:
                    logger.warning("Description file missing — id=%s path=%s", record.id, description_file)
                else:
                    record = record.model_copy(update={"description": text.content.decode("utf-8")})
            resolved.append(record)
        return resolved

    def mutate(self, fn: Callable[[list[Record]], list[Record]]) -> list[Record]:
        """Apply a pure transformation, snapshot the result and mark the draft dirty."""
        records = list(fn(self.records))
        duplicates = [rid for rid, count in Counter(r.id for r in records).items() if count > 1]
        if duplicates:
            logger.warning("Duplicate record ids in draft — collection=%s ids=%s", self.kind, duplicates)
        self._records = records
        self._generation += 1
        self._dirty = True
        self._save_snapshot()
        return self.records

    def mark_clean(self, revision: str) -> None:
        """Record a successful publish of the current draft at ``revision``."""
        self._dirty = False
        self._revision = revision
        self._save_snapshot()

    def _save_snapshot(self) -> None:
        self._snapshots.set(
            self.kind.snapshot_key,
            {
                "records": [r.model_dump(mode="json", by_alias=True) for r in self._records],
                "dirty": self._dirty,
                "revision": self._revision,
            },
        )

    def _restore_snapshot(self) -> None:
        value: Any = self._snapshots.get(self.kind.snapshot_key)
        self._generation += 1
        if isinstance(value, list):
            # Bare arrays are treated as unpublished edits
            value = {"records": value, "dirty": True, "revision": None}
        if not isinstance(value, dict):
            self._records = []
            self._dirty = False
            self._source = DraftSource.EMPTY
            logger.info("No local snapshot, starting empty — collection=%s", self.kind)
            return
        try:
            self._records = parse_collection(self.kind, value.get("records", []))
        except ValueError:
            logger.warning("Local snapshot unreadable, starting empty — collection=%s", self.kind)
            self._records = []
            self._dirty = False
            self._source = DraftSource.EMPTY
            return
        self._dirty = bool(value.get("dirty"))
        self._revision = value.get("revision")
        self._source = DraftSource.SNAPSHOT
        logger.info(
            "Draft restored from snapshot — collection=%s records=%d dirty=%s",
            self.kind,
            len(self._records),
            self._dirty,
        )
