"""Upload routes — images, description files and the combined career save."""

from __future__ import annotations

import logging
from typing import Any, assert_never

from fastapi import APIRouter, Request

from portal_admin.assets.uploader import ImageDestination
from portal_admin.models.collection import CollectionKind
from portal_admin.routes.contracts import (
    GalleryUploadRequest,
    ImageUploadRequest,
    SaveCareerDescription,
    SaveCareerJson,
    SaveCareerRequest,
    SaveDescriptionRequest,
)
from portal_admin.services.documents import save_collection, save_description

router = APIRouter(prefix="/api", tags=["uploads"])
logger = logging.getLogger(__name__)


@router.post("/images/upload")
async def upload_image(request: Request, payload: ImageUploadRequest) -> dict[str, Any]:
    """Store one image and return the path the website references."""
    settings = request.app.state.settings
    destination = ImageDestination(
        folder_name=payload.folder_name,
        image_number=payload.image_number,
        base_folder=payload.base_folder or settings.upload.default_base_folder,
    )
    limit = settings.upload.max_compressed_image_bytes if payload.compressed else None
    path = await request.app.state.uploader.upload_image(payload.image, destination, max_bytes=limit)
    return {"success": True, "message": "Image uploaded successfully", "path": path}


@router.post("/activities/images")
async def attach_activity_images(request: Request, payload: GalleryUploadRequest) -> dict[str, Any]:
    """Upload an activity's main image and gallery into a folder named after its title.

    While an activity is being edited its scratch form picks up the new paths.
    """
    settings = request.app.state.settings
    editor = request.app.state.editors[CollectionKind.ACTIVITIES]
    form = await editor.attach_activity_images(
        request.app.state.uploader,
        payload.image,
        payload.additional_images,
        title=payload.title,
        base_folder=payload.base_folder or settings.upload.default_base_folder,
    )
    return {
        "success": True,
        "message": "Images uploaded successfully",
        "image": form.image or None,
        "additionalImages": form.additional_images,
        "imageTotal": form.image_total,
        "form": form.model_dump(mode="json", by_alias=True),
    }


@router.post("/descriptions/save")
async def save_description_file(request: Request, payload: SaveDescriptionRequest) -> dict[str, Any]:
    settings = request.app.state.settings
    result = await save_description(
        request.app.state.store,
        settings.storage.descriptions_dir,
        payload.file_name,
        payload.content,
        settings.publish,
    )
    return {"success": True, "message": "Description file saved successfully", "path": result.path}


@router.post("/github/save-career")
async def save_career(request: Request, payload: SaveCareerRequest) -> dict[str, Any]:
    """Save the career document or one description file, selected by ``action``."""
    settings = request.app.state.settings
    store = request.app.state.store
    command = payload.root
    match command:
        case SaveCareerJson():
            cache = request.app.state.editors[CollectionKind.CAREERS].cache
            result = await save_collection(
                store,
                CollectionKind.CAREERS,
                cache.document_path,
                command.data,
                settings.publish,
            )
            await cache.load()
            return {"success": True, "message": "Career data saved successfully", "revision": result.sha}
        case SaveCareerDescription():
            result = await save_description(
                store,
                settings.storage.descriptions_dir,
                command.file_name,
                command.content,
                settings.publish,
            )
            return {"success": True, "message": "Description file saved successfully", "path": result.path}
        case _:
            assert_never(command)
