"""Publish orchestration."""

from portal_admin.publish.orchestrator import PublishOrchestrator, PublishReport

__all__ = ["PublishOrchestrator", "PublishReport"]
