"""Dashboard route — overview of both collections' drafts."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from portal_admin.models.collection import CollectionKind

router = APIRouter(tags=["dashboard"])


@router.get("/", response_class=HTMLResponse)
async def dashboard(request: Request):
    """Render the dashboard with per-collection draft status."""
    editors = request.app.state.editors
    collections = []
    for kind in CollectionKind:
        editor = editors[kind]
        cache = editor.cache
        collections.append(
            {
                "name": kind.value,
                "label": kind.label,
                "count": len(cache.records),
                "visible": sum(1 for r in cache.records if r.is_visible),
                "dirty": cache.dirty,
                "source": cache.source.value,
                "revision": cache.revision,
                "mode": editor.state.mode.value,
            }
        )
    templates = request.app.state.templates
    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {"collections": collections, "publishing": request.app.state.orchestrator.busy},
    )
