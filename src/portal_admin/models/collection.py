"""Collection kinds and (de)serialization of collection documents."""

from __future__ import annotations

import json
from enum import StrEnum
from typing import TYPE_CHECKING

from portal_admin.models.activity import Activity, ActivityForm
from portal_admin.models.career import Career, CareerForm

if TYPE_CHECKING:
    from portal_admin.config import StorageConfig
    from portal_admin.models.base import RecordBase

Record = Career | Activity
RecordForm = CareerForm | ActivityForm


class CollectionKind(StrEnum):
    CAREERS = "careers"
    ACTIVITIES = "activities"

    @property
    def record_model(self) -> type[Career] | type[Activity]:
        return Career if self is CollectionKind.CAREERS else Activity

    @property
    def form_model(self) -> type[CareerForm] | type[ActivityForm]:
        return CareerForm if self is CollectionKind.CAREERS else ActivityForm

    @property
    def snapshot_key(self) -> str:
        return self.value

    @property
    def label(self) -> str:
        return "career data" if self is CollectionKind.CAREERS else "activities"

    def document_path(self, config: StorageConfig) -> str:
        """Return the store path of this collection's JSON document."""
        return config.careers_path if self is CollectionKind.CAREERS else config.activities_path


def parse_collection(kind: CollectionKind, payload: object) -> list[Record]:
    """Validate a decoded JSON array into records of the given kind.

    Raises ``ValueError`` when the payload is not a list of objects.
    """
    if not isinstance(payload, list):
        raise ValueError(f"{kind} document must be a JSON array, got {type(payload).__name__}")
    model = kind.record_model
    return [model.model_validate(item) for item in payload]


def dump_collection(records: list[RecordBase]) -> bytes:
    """Serialize records to the stored document bytes (2-space indented UTF-8 JSON)."""
    return json.dumps([r.to_document() for r in records], ensure_ascii=False, indent=2).encode("utf-8")


def decode_collection(kind: CollectionKind, content: bytes) -> list[Record]:
    return parse_collection(kind, json.loads(content.decode("utf-8")))
