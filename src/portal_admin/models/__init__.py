"""Data models for collection documents."""

from portal_admin.models.activity import Activity, ActivityForm
from portal_admin.models.base import RecordBase, format_display_date
from portal_admin.models.career import Career, CareerForm
from portal_admin.models.collection import (
    CollectionKind,
    Record,
    RecordForm,
    decode_collection,
    dump_collection,
    parse_collection,
)

__all__ = [
    "Activity",
    "ActivityForm",
    "Career",
    "CareerForm",
    "CollectionKind",
    "Record",
    "RecordBase",
    "RecordForm",
    "decode_collection",
    "dump_collection",
    "format_display_date",
    "parse_collection",
]
