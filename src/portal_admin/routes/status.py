"""Status route — connectivity check for the dashboard and deploy probes."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter

router = APIRouter(tags=["status"])


@router.get("/api/test")
async def api_test() -> dict[str, Any]:
    """Report that the API is reachable."""
    return {
        "success": True,
        "message": "API is working",
        "timestamp": datetime.now(UTC).isoformat(),
    }
