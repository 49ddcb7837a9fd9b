"""Component construction for the web process."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from portal_admin.assets.uploader import ImageUploader
from portal_admin.drafts.cache import DraftCache
from portal_admin.editor.editor import CollectionEditor
from portal_admin.models.collection import CollectionKind
from portal_admin.publish.orchestrator import PublishOrchestrator
from portal_admin.storage.github import GitHubContentsClient
from portal_admin.storage.keyvalue import FileKeyValueStore
from portal_admin.storage.local import LocalDocumentStore

if TYPE_CHECKING:
    from portal_admin.config import Settings
    from portal_admin.storage.base import DocumentStore
    from portal_admin.storage.keyvalue import KeyValueStore

logger = logging.getLogger(__name__)


def init_store(settings: Settings) -> DocumentStore:
    """Create the document store selected by ``STORAGE_BACKEND``.

    Raises ``ConfigurationError`` for the GitHub backend when the token or
    repository is missing.
    """
    if settings.storage.is_local:
        logger.info("Using local document store — root=%s", settings.storage.local_root)
        return LocalDocumentStore(settings.storage.local_root)
    logger.info(
        "Using GitHub document store — repo=%s branch=%s",
        settings.github.repo,
        settings.github.branch,
    )
    return GitHubContentsClient(settings.github)


def init_snapshots(settings: Settings) -> KeyValueStore:
    return FileKeyValueStore(settings.storage.drafts_dir)


async def init_editors(
    settings: Settings,
    store: DocumentStore,
    snapshots: KeyValueStore,
) -> dict[CollectionKind, CollectionEditor]:
    """Load a draft per collection and wrap each in an editor."""
    editors = {}
    for kind in CollectionKind:
        cache = DraftCache(kind, store, snapshots, document_path=kind.document_path(settings.storage))
        await cache.load()
        editors[kind] = CollectionEditor(
            cache,
            settings.editor,
            descriptions_dir=settings.storage.descriptions_dir,
        )
    return editors


def init_publishing(settings: Settings, store: DocumentStore) -> tuple[PublishOrchestrator, ImageUploader]:
    orchestrator = PublishOrchestrator(store, settings.publish)
    uploader = ImageUploader(
        store,
        max_bytes=settings.upload.max_image_bytes,
        root_segment=settings.storage.root_segment,
        max_attempts=settings.publish.max_attempts,
        backoff_seconds=settings.publish.backoff_seconds,
    )
    return orchestrator, uploader
