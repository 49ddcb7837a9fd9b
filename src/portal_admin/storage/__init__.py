"""Document stores (GitHub, local disk) and draft snapshot stores."""

from portal_admin.storage.base import DocumentStore, StoredDocument
from portal_admin.storage.github import GitHubContentsClient
from portal_admin.storage.keyvalue import FileKeyValueStore, KeyValueStore, MemoryKeyValueStore
from portal_admin.storage.local import LocalDocumentStore, git_blob_sha
from portal_admin.storage.writes import WriteResult, put_with_retry

__all__ = [
    "DocumentStore",
    "FileKeyValueStore",
    "GitHubContentsClient",
    "KeyValueStore",
    "LocalDocumentStore",
    "MemoryKeyValueStore",
    "StoredDocument",
    "WriteResult",
    "git_blob_sha",
    "put_with_retry",
]
