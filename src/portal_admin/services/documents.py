"""Direct document writes behind the save endpoints."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from portal_admin.models.collection import dump_collection, parse_collection
from portal_admin.publish.orchestrator import description_message, document_message
from portal_admin.storage.writes import put_with_retry

if TYPE_CHECKING:
    from portal_admin.config import PublishConfig
    from portal_admin.models.collection import CollectionKind
    from portal_admin.storage.base import DocumentStore
    from portal_admin.storage.writes import WriteResult

logger = logging.getLogger(__name__)


def description_path(descriptions_dir: str, file_name: str) -> str:
    """Return the store path for a description file, rejecting nested names."""
    name = file_name.strip()
    if not name or "/" in name or "\\" in name or name in {".", ".."}:
        raise ValueError(f"Invalid description file name: {file_name!r}")
    return f"{descriptions_dir.rstrip('/')}/{name}"


async def save_collection(
    store: DocumentStore,
    kind: CollectionKind,
    path: str,
    data: list[dict[str, Any]],
    config: PublishConfig,
) -> WriteResult:
    """Replace a collection document with ``data`` (validated, then serialized)."""
    records = parse_collection(kind, data)
    result = await put_with_retry(
        store,
        path,
        dump_collection(records),
        document_message(kind),
        max_attempts=config.max_attempts,
        backoff_seconds=config.backoff_seconds,
    )
    logger.info("Collection saved — collection=%s records=%d written=%s", kind, len(records), result.written)
    return result


async def save_description(
    store: DocumentStore,
    descriptions_dir: str,
    file_name: str,
    content: str,
    config: PublishConfig,
) -> WriteResult:
    """Create or replace one description text file."""
    path = description_path(descriptions_dir, file_name)
    return await put_with_retry(
        store,
        path,
        content.encode("utf-8"),
        description_message(path),
        max_attempts=config.max_attempts,
        backoff_seconds=config.backoff_seconds,
    )
