"""Collection editor — add, edit, delete and hide records in a draft."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from portal_admin.errors import EditorError, EditorStateError, RecordNotFoundError
from portal_admin.models.activity import ActivityForm
from portal_admin.models.base import format_display_date
from portal_admin.models.career import Career
from portal_admin.models.collection import CollectionKind

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from portal_admin.assets.uploader import ImagePayload, ImageUploader
    from portal_admin.config import EditorConfig
    from portal_admin.drafts.cache import DraftCache
    from portal_admin.models.collection import Record, RecordForm

logger = logging.getLogger(__name__)


class EditorMode(StrEnum):
    BROWSING = "browsing"
    EDITING = "editing"


@dataclass(frozen=True)
class EditorState:
    mode: EditorMode = EditorMode.BROWSING
    record_id: int | None = None


class CollectionEditor:
    """State machine over ``Browsing`` and ``Editing(id)`` for one collection.

    Every change to the collection goes through ``DraftCache.mutate`` so the
    local snapshot and the dirty flag stay in step with the records.
    """

    def __init__(
        self,
        cache: DraftCache,
        config: EditorConfig,
        *,
        descriptions_dir: str = "public/docs",
        today: Callable[[], date] = date.today,
    ) -> None:
        self._cache = cache
        self._config = config
        self._descriptions_dir = descriptions_dir.rstrip("/")
        self._today = today
        self._state = EditorState()
        self._form: RecordForm | None = None

    @property
    def cache(self) -> DraftCache:
        return self._cache

    @property
    def state(self) -> EditorState:
        return self._state

    @property
    def form(self) -> RecordForm | None:
        """Scratch form while editing, ``None`` while browsing."""
        return self._form

    def _require_browsing(self, action: str) -> None:
        if self._state.mode is not EditorMode.BROWSING:
            raise EditorStateError(f"Cannot {action} while editing record {self._state.record_id}")

    def _require_editing(self, action: str) -> int:
        if self._state.mode is not EditorMode.EDITING or self._state.record_id is None:
            raise EditorStateError(f"Cannot {action}: no record is being edited")
        return self._state.record_id

    def _check_form(self, form: RecordForm) -> None:
        if not isinstance(form, self._cache.kind.form_model):
            raise EditorError(f"Expected a {self._cache.kind.form_model.__name__}, got {type(form).__name__}")

    def _with_description_file(self, record: Record) -> Record:
        if not isinstance(record, Career) or not self._config.career_description_files or record.description_file:
            return record
        return record.model_copy(
            update={"description_file": f"{self._descriptions_dir}/career_{record.id}.txt"},
        )

    def next_id(self) -> int:
        """Allocate ``max(id) + 1``; ``first_record_id`` for an empty collection."""
        ids = [r.id for r in self._cache.records]
        return max(ids) + 1 if ids else self._config.first_record_id

    def begin_edit(self, record_id: int) -> RecordForm:
        """Browsing → Editing(record_id); the scratch form starts from the record."""
        self._require_browsing("start editing")
        record = self._cache.get(record_id)
        if record is None:
            raise RecordNotFoundError(record_id)
        self._form = self._cache.kind.form_model.from_record(record)
        self._state = EditorState(EditorMode.EDITING, record_id)
        return self._form

    def update_form(self, form: RecordForm | None = None, /, **changes: Any) -> RecordForm:
        """Replace the scratch form and/or change some of its fields (by field name)."""
        self._require_editing("update the form")
        if form is not None:
            self._check_form(form)
            self._form = form
        if changes:
            model = self._cache.kind.form_model
            self._form = model.model_validate({**self._form.model_dump(by_alias=False), **changes})
        return self._form

    async def attach_activity_images(
        self,
        uploader: ImageUploader,
        main_image: ImagePayload | None,
        additional_images: Sequence[ImagePayload] = (),
        *,
        title: str | None = None,
        base_folder: str = "image/social",
    ) -> ActivityForm:
        """Upload an activity's images and point a form at them.

        While editing, the scratch form is updated in place; while browsing a
        new form is returned for a later ``add``. The folder is named after
        ``title`` (defaulting to the form's title).
        """
        if self._cache.kind is not CollectionKind.ACTIVITIES:
            raise EditorError("Images can only be attached to activities")
        form = self._form if self._state.mode is EditorMode.EDITING else ActivityForm(title=title or "")
        folder_title = (title or form.title).strip()
        if not folder_title:
            raise EditorError("Please enter a title")

        main_path, paths = await uploader.upload_gallery(
            folder_title,
            main_image,
            additional_images,
            base_folder=base_folder,
        )
        changes: dict[str, Any] = {"additional_images": paths, "image_total": str(len(paths))}
        if main_path is not None:
            changes["image"] = main_path
        updated = form.model_copy(update=changes)
        if self._state.mode is EditorMode.EDITING:
            self._form = updated
        logger.info(
            "Activity images attached — folder_title=%s main=%s additional=%d",
            folder_title,
            main_path,
            len(paths),
        )
        return updated

    def save(self) -> Record:
        """Commit the scratch form into the collection; Editing → Browsing."""
        record_id = self._require_editing("save")
        record = self._cache.get(record_id)
        if record is None:
            self.cancel()
            raise RecordNotFoundError(record_id)

        updated = self._with_description_file(self._form.apply(record))
        self._cache.mutate(lambda records: [updated if r.id == record_id else r for r in records])
        self._state = EditorState()
        self._form = None
        logger.info("Record saved — collection=%s id=%d", self._cache.kind, record_id)
        return updated

    def cancel(self) -> None:
        """Discard the scratch form; Editing → Browsing."""
        self._state = EditorState()
        self._form = None

    def add(self, form: RecordForm) -> Record:
        """Append a new record built from ``form``; stays Browsing."""
        self._require_browsing("add a record")
        self._check_form(form)
        if not form.title.strip():
            raise EditorError("Please enter a title")

        record = form.build(self.next_id(), today=format_display_date(self._today()))
        record = self._with_description_file(record)
        self._cache.mutate(lambda records: [*records, record])
        logger.info("Record added — collection=%s id=%d", self._cache.kind, record.id)
        return record

    def delete(self, record_id: int) -> None:
        if self._cache.get(record_id) is None:
            raise RecordNotFoundError(record_id)
        if self._state.record_id == record_id:
            self.cancel()
        self._cache.mutate(lambda records: [r for r in records if r.id != record_id])
        logger.info("Record deleted — collection=%s id=%d", self._cache.kind, record_id)

    def toggle_visibility(self, record_id: int) -> Record:
        record = self._cache.get(record_id)
        if record is None:
            raise RecordNotFoundError(record_id)
        toggled = record.model_copy(update={"is_visible": not record.is_visible})
        self._cache.mutate(lambda records: [toggled if r.id == record_id else r for r in records])
        return toggled
