"""Career posting model and its editor form."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from portal_admin.models.base import SUITCASE_ICON, RecordBase

DEFAULT_LOCATION = "Bakı, Azərbaycan"
DEFAULT_JOB_TYPE = "Tam iş günü"


def _to_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


class Career(RecordBase):
    """A job posting. The description is inline unless ``description_file`` is set."""

    description_file: str | None = Field(default=None, alias="descriptionFile")
    expire_date: str = Field(default="", alias="expireDate")
    location: str = DEFAULT_LOCATION
    type: str = DEFAULT_JOB_TYPE
    type_image: str = Field(default=SUITCASE_ICON, alias="typeImage")
    view: int = 0
    link: str = ""

    @field_validator("view", mode="before")
    @classmethod
    def _parse_view(cls, value: Any) -> int:
        return _to_int(value)

    def auxiliary_files(self) -> dict[str, str]:
        if self.description_file:
            return {self.description_file: self.description}
        return {}

    def to_document(self) -> dict[str, Any]:
        data = super().to_document()
        if self.description_file:
            # Text is published to the description file instead
            data.pop("description", None)
        else:
            data.pop("descriptionFile", None)
        return data


class CareerForm(BaseModel):
    """Scratch form for creating or editing a career."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = ""
    description: str = ""
    date: str = ""
    expire_date: str = Field(default="", alias="expireDate")
    location: str = DEFAULT_LOCATION
    type: str = DEFAULT_JOB_TYPE
    view: int = 0
    link: str = ""
    is_visible: bool = Field(default=True, alias="isVisible")

    @field_validator("view", mode="before")
    @classmethod
    def _parse_view(cls, value: Any) -> int:
        return _to_int(value)

    @classmethod
    def from_record(cls, career: Career) -> CareerForm:
        return cls(
            title=career.title,
            description=career.description,
            date=career.date,
            expire_date=career.expire_date,
            location=career.location or DEFAULT_LOCATION,
            type=career.type or DEFAULT_JOB_TYPE,
            view=career.view,
            link=career.link,
            is_visible=career.is_visible,
        )

    def apply(self, career: Career) -> Career:
        """Return ``career`` with the form's fields written over it."""
        return career.model_copy(update=self.model_dump(by_alias=False))

    def build(self, record_id: int, *, today: str) -> Career:
        """Create a new career from the form, filling in defaults."""
        data = self.model_dump(by_alias=False)
        data["date"] = self.date or today
        return Career(id=record_id, **data)
