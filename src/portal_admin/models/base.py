"""Base record model shared by careers and activities."""

from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

_ASSETS = (
    "https://raw.githubusercontent.com/Absheron-Career-Portal/WEBSITE/"
    "b2d2fafaefad0db14296c97b360e559713dbc984/frontend/src/assets/svg"
)
CALENDAR_ICON = f"{_ASSETS}/calendar.svg"
SUITCASE_ICON = f"{_ASSETS}/suitcase.svg"
LANDSCAPE_ICON = f"{_ASSETS}/landscape.crop.rectangle.svg"

_AZ_MONTHS = (
    "yanvar",
    "fevral",
    "mart",
    "aprel",
    "may",
    "iyun",
    "iyul",
    "avqust",
    "sentyabr",
    "oktyabr",
    "noyabr",
    "dekabr",
)


def format_display_date(day: date) -> str:
    """Format a date the way the website shows it, e.g. ``19 oktyabr 2026``."""
    return f"{day.day} {_AZ_MONTHS[day.month - 1]} {day.year}"


class RecordBase(BaseModel):
    """One entry of a collection document.

    Field names follow the website's camelCase JSON keys through aliases;
    keys this model does not know about are kept so they survive a round-trip.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: int
    title: str = ""
    description: str = ""
    date: str = ""
    date_image: str = Field(default=CALENDAR_ICON, alias="dateImage")
    is_visible: bool = Field(default=True, alias="isVisible")

    @field_validator("is_visible", mode="before")
    @classmethod
    def _visible_by_default(cls, value: Any) -> Any:
        return True if value is None else value

    def auxiliary_files(self) -> dict[str, str]:
        """Return ``{store path: text}`` for files this record owns outside the document."""
        return {}

    def to_document(self) -> dict[str, Any]:
        """Serialize to the JSON object stored in the collection document."""
        return self.model_dump(mode="json", by_alias=True)
