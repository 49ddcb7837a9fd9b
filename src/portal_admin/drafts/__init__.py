"""Local drafts of collections."""

from portal_admin.drafts.cache import DraftCache, DraftSource

__all__ = ["DraftCache", "DraftSource"]
