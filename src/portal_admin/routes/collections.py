"""Collection routes — draft editing, publishing and direct document saves."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, Body, Request, status
from fastapi.responses import JSONResponse

from portal_admin.models.collection import CollectionKind
from portal_admin.routes.contracts import SaveDocumentRequest
from portal_admin.routes.errors import error_response
from portal_admin.services.documents import save_collection

if TYPE_CHECKING:
    from portal_admin.editor.editor import CollectionEditor

router = APIRouter(prefix="/api/{collection}", tags=["collections"])
logger = logging.getLogger(__name__)


def _editor(request: Request, collection: CollectionKind) -> CollectionEditor:
    return request.app.state.editors[collection]


def _draft_view(editor: CollectionEditor) -> dict[str, Any]:
    cache = editor.cache
    form = editor.form
    return {
        "success": True,
        "collection": cache.kind.value,
        "records": [r.model_dump(mode="json", by_alias=True) for r in cache.records],
        "dirty": cache.dirty,
        "source": cache.source.value,
        "revision": cache.revision,
        "editor": {
            "mode": editor.state.mode.value,
            "recordId": editor.state.record_id,
            "form": form.model_dump(mode="json", by_alias=True) if form else None,
        },
    }


@router.get("")
async def get_draft(request: Request, collection: CollectionKind) -> dict[str, Any]:
    """Return the current draft and editor state."""
    return _draft_view(_editor(request, collection))


@router.post("/reload")
async def reload_draft(request: Request, collection: CollectionKind) -> dict[str, Any]:
    """Discard the draft and load the store's copy (or the local snapshot)."""
    editor = _editor(request, collection)
    editor.cancel()
    await editor.cache.load()
    return _draft_view(editor)


@router.post("/save")
async def save_document(
    request: Request,
    collection: CollectionKind,
    payload: SaveDocumentRequest,
) -> dict[str, Any]:
    """Replace the collection document in the store with the posted array."""
    settings = request.app.state.settings
    editor = _editor(request, collection)
    result = await save_collection(
        request.app.state.store,
        collection,
        editor.cache.document_path,
        payload.data,
        settings.publish,
    )
    await editor.cache.load()
    return {
        "success": True,
        "message": f"{collection.label.capitalize()} saved successfully",
        "revision": result.sha,
    }


@router.post("/records")
async def add_record(
    request: Request,
    collection: CollectionKind,
    body: dict[str, Any] = Body(default_factory=dict),
) -> dict[str, Any]:
    editor = _editor(request, collection)
    record = editor.add(collection.form_model.model_validate(body))
    return {"success": True, "message": "Record added", "record": record.model_dump(mode="json", by_alias=True)}


@router.delete("/records/{record_id}")
async def delete_record(request: Request, collection: CollectionKind, record_id: int) -> dict[str, Any]:
    _editor(request, collection).delete(record_id)
    return {"success": True, "message": f"Record {record_id} deleted"}


@router.post("/records/{record_id}/toggle")
async def toggle_record(request: Request, collection: CollectionKind, record_id: int) -> dict[str, Any]:
    record = _editor(request, collection).toggle_visibility(record_id)
    return {"success": True, "message": "Visibility updated", "record": record.model_dump(mode="json", by_alias=True)}


@router.post("/records/{record_id}/edit")
async def begin_edit(request: Request, collection: CollectionKind, record_id: int) -> dict[str, Any]:
    form = _editor(request, collection).begin_edit(record_id)
    return {"success": True, "recordId": record_id, "form": form.model_dump(mode="json", by_alias=True)}


@router.post("/edit/save")
async def save_edit(
    request: Request,
    collection: CollectionKind,
    body: dict[str, Any] = Body(default_factory=dict),
) -> dict[str, Any]:
    """Write the submitted form into the record being edited."""
    editor = _editor(request, collection)
    editor.update_form(collection.form_model.model_validate(body))
    record = editor.save()
    return {"success": True, "message": "Record saved", "record": record.model_dump(mode="json", by_alias=True)}


@router.post("/edit/cancel")
async def cancel_edit(request: Request, collection: CollectionKind) -> dict[str, Any]:
    _editor(request, collection).cancel()
    return {"success": True, "message": "Edit cancelled"}


@router.post("/publish", response_model=None)
async def publish(request: Request, collection: CollectionKind) -> dict[str, Any] | JSONResponse:
    """Publish the draft; names the failed records when description files could not be written."""
    editor = _editor(request, collection)
    report = await request.app.state.orchestrator.publish(editor.cache)
    if not report.published:
        ids = ", ".join(str(i) for i in report.failed)
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            f"Publish aborted: description files failed for records {ids}",
            failed=report.failed,
            errors={str(k): v for k, v in report.errors.items()},
        )
    logger.info("Published via API — collection=%s revision=%s", collection, report.revision)
    message = f"{collection.label.capitalize()} published"
    if report.replaced_revision:
        message += f"; replaced newer revision {report.replaced_revision[:10]} made outside this draft"
    return {
        "success": True,
        "message": message,
        "revision": report.revision,
        "replacedRevision": report.replaced_revision,
        "filesWritten": report.files_written,
        "documentWritten": report.document_written,
    }
