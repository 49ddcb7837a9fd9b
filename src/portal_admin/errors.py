"""Error taxonomy shared by the store clients, publisher and editor."""

from __future__ import annotations


class PortalAdminError(Exception):
    """Base class for every error raised by portal-admin."""


class ConfigurationError(PortalAdminError):
    """Required configuration (credentials, repository) is missing or malformed."""


class PayloadTooLargeError(PortalAdminError):
    """An upload exceeds the configured size limit."""

    def __init__(self, size: int, limit: int) -> None:
        super().__init__(f"Image too large: {size} bytes exceeds the {limit} byte limit")
        self.size = size
        self.limit = limit


class RemoteStoreError(PortalAdminError):
    """The document store answered with an unexpected non-2xx status."""

    def __init__(self, status_code: int, body: str, *, path: str = "") -> None:
        super().__init__(f"Store error {status_code} for {path or '<unknown>'}: {body[:200]}")
        self.status_code = status_code
        self.body = body
        self.path = path


class ConflictError(RemoteStoreError):
    """The write carried a stale (or missing) revision token."""


class InvalidPathError(PortalAdminError, ValueError):
    """A store path points outside the store root."""


class NetworkError(PortalAdminError):
    """The request never produced an HTTP response."""


class RecordNotFoundError(PortalAdminError):
    """No record with the given id exists in the collection."""

    def __init__(self, record_id: int) -> None:
        super().__init__(f"Record {record_id} not found")
        self.record_id = record_id


class EditorError(PortalAdminError):
    """The editor rejected a form."""


class EditorStateError(EditorError):
    """The operation is not allowed in the editor's current state."""
