"""Image uploads into the document store."""

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
import re
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from portal_admin.errors import PayloadTooLargeError
from portal_admin.storage.writes import put_with_retry

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from portal_admin.storage.base import DocumentStore

logger = logging.getLogger(__name__)

_DATA_URL_PREFIX = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,")
_FOLDER_UNSAFE = re.compile(r"[^a-z0-9]")

ImagePayload = bytes | str

DEFAULT_EXTENSION = ".jpg"
_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/pjpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "image/svg+xml": ".svg",
    "image/avif": ".avif",
    "image/bmp": ".bmp",
}


def extension_for(image: ImagePayload) -> str:
    """Pick the file extension from a data URL's MIME type, ``.jpg`` otherwise."""
    if isinstance(image, bytes):
        return DEFAULT_EXTENSION
    match = _DATA_URL_PREFIX.match(image.strip())
    if match is None:
        return DEFAULT_EXTENSION
    return _EXTENSIONS.get(match.group("mime").lower(), DEFAULT_EXTENSION)


def decode_image(image: ImagePayload) -> bytes:
    """Return raw image bytes from bytes, base64 text, or a base64 data URL.

    Raises ``ValueError`` for text that is not valid base64.
    """
    if isinstance(image, bytes):
        return image
    payload = _DATA_URL_PREFIX.sub("", image.strip(), count=1)
    try:
        return base64.b64decode(payload)
    except binascii.Error as exc:
        raise ValueError("Image is not valid base64") from exc


def folder_name_for(title: str) -> str:
    """Derive an image folder name from a title (``Job Fair 2024`` → ``job_fair_2024``)."""
    return _FOLDER_UNSAFE.sub("_", title.lower())


def _check_segment(value: str, what: str) -> str:
    parts = value.strip("/").split("/")
    if not value.strip("/") or any(part in {"", ".", ".."} for part in parts):
        raise ValueError(f"Invalid {what}: {value!r}")
    return value.strip("/")


@dataclass(frozen=True, kw_only=True)
class ImageDestination:
    """Where an image lands: ``{base_folder}/{folder_name}/{image_number}{extension}``.

    Without an ``extension`` the uploader takes it from the image payload.
    """

    folder_name: str
    image_number: str = "0"
    base_folder: str = "image/social"
    extension: str | None = None

    def __post_init__(self) -> None:
        _check_segment(self.folder_name, "folder name")
        _check_segment(self.base_folder, "base folder")
        if "/" in self.image_number or not self.image_number or self.image_number in {".", ".."}:
            raise ValueError(f"Invalid image number: {self.image_number!r}")
        if self.extension is not None and not re.fullmatch(r"\.[a-z0-9]+", self.extension):
            raise ValueError(f"Invalid extension: {self.extension!r}")

    @property
    def file_name(self) -> str:
        return f"{self.image_number}{self.extension or DEFAULT_EXTENSION}"

    @property
    def relative_path(self) -> str:
        """Path the website references, without the storage root segment."""
        return f"/{self.base_folder.strip('/')}/{self.folder_name.strip('/')}/{self.file_name}"

    def store_path(self, root_segment: str) -> str:
        return f"{root_segment.strip('/')}{self.relative_path}"


class ImageUploader:
    """Upload images with a size gate and check-then-write semantics."""

    def __init__(
        self,
        store: DocumentStore,
        *,
        max_bytes: int,
        root_segment: str = "public",
        max_attempts: int = 3,
        backoff_seconds: float = 2.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._store = store
        self._max_bytes = max_bytes
        self._root_segment = root_segment
        self._max_attempts = max_attempts
        self._backoff_seconds = backoff_seconds
        self._sleep = sleep

    @property
    def max_bytes(self) -> int:
        return self._max_bytes

    async def upload_image(
        self,
        image: ImagePayload,
        destination: ImageDestination,
        *,
        max_bytes: int | None = None,
    ) -> str:
        """Store the image and return its caller-facing relative path.

        Raises ``PayloadTooLargeError`` before touching the store when the
        decoded image is larger than ``max_bytes`` (the uploader's limit by
        default).
        """
        if destination.extension is None:
            destination = replace(destination, extension=extension_for(image))
        limit = self._max_bytes if max_bytes is None else max_bytes
        data = decode_image(image)
        if len(data) > limit:
            raise PayloadTooLargeError(len(data), limit)

        store_path = destination.store_path(self._root_segment)
        message = f"Upload image {destination.file_name} - {datetime.now(UTC).isoformat()}"
        result = await put_with_retry(
            self._store,
            store_path,
            data,
            message,
            max_attempts=self._max_attempts,
            backoff_seconds=self._backoff_seconds,
            sleep=self._sleep,
        )
        logger.info(
            "Image uploaded — path=%s bytes=%d written=%s",
            store_path,
            len(data),
            result.written,
        )
        return destination.relative_path

    async def upload_gallery(
        self,
        title: str,
        main_image: ImagePayload | None,
        additional_images: Sequence[ImagePayload],
        *,
        base_folder: str = "image/social",
    ) -> tuple[str | None, list[str]]:
        """Upload an activity's main image as ``0`` and the rest as ``1..n``.

        Images go one at a time into a folder named after the title.
        """
        folder = folder_name_for(title)
        main_path = None
        if main_image is not None:
            main_path = await self.upload_image(
                main_image,
                ImageDestination(folder_name=folder, image_number="0", base_folder=base_folder),
            )
        paths = []
        for index, image in enumerate(additional_images, start=1):
            paths.append(
                await self.upload_image(
                    image,
                    ImageDestination(folder_name=folder, image_number=str(index), base_folder=base_folder),
                )
            )
        return main_path, paths
