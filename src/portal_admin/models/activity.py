"""Activity post model and its editor form."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from portal_admin.models.base import LANDSCAPE_ICON, RecordBase

DEFAULT_ACTIVITY_IMAGE = "/image/default-activity.jpg"


def _image_list(value: Any) -> Any:
    return [] if value is None else value


def _image_total(value: Any) -> Any:
    return str(value) if isinstance(value, int) else value


class Activity(RecordBase):
    """A news-style post with a main image and an optional gallery."""

    image: str = DEFAULT_ACTIVITY_IMAGE
    link_image: str = Field(default=LANDSCAPE_ICON, alias="linkImage")
    image_total: str = Field(default="0", alias="imageTotal")
    additional_images: list[str] = Field(default_factory=list, alias="additionalImages")
    extended_description: str = Field(default="", alias="extendedDescription")

    @field_validator("additional_images", mode="before")
    @classmethod
    def _images(cls, value: Any) -> Any:
        return _image_list(value)

    @field_validator("image_total", mode="before")
    @classmethod
    def _total(cls, value: Any) -> Any:
        return _image_total(value)


class ActivityForm(BaseModel):
    """Scratch form for creating or editing an activity."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = ""
    description: str = ""
    extended_description: str = Field(default="", alias="extendedDescription")
    date: str = ""
    image: str = ""
    additional_images: list[str] = Field(default_factory=list, alias="additionalImages")
    image_total: str = Field(default="", alias="imageTotal")
    is_visible: bool = Field(default=True, alias="isVisible")

    @field_validator("additional_images", mode="before")
    @classmethod
    def _images(cls, value: Any) -> Any:
        return _image_list(value)

    @field_validator("image_total", mode="before")
    @classmethod
    def _total(cls, value: Any) -> Any:
        return _image_total(value)

    @classmethod
    def from_record(cls, activity: Activity) -> ActivityForm:
        return cls(
            title=activity.title,
            description=activity.description,
            extended_description=activity.extended_description,
            date=activity.date,
            image=activity.image,
            additional_images=list(activity.additional_images),
            image_total=activity.image_total,
            is_visible=activity.is_visible,
        )

    def apply(self, activity: Activity) -> Activity:
        return activity.model_copy(update=self.model_dump(by_alias=False))

    def build(self, record_id: int, *, today: str) -> Activity:
        data = self.model_dump(by_alias=False)
        data["date"] = self.date or today
        data["image"] = self.image or DEFAULT_ACTIVITY_IMAGE
        data["image_total"] = self.image_total or str(len(self.additional_images))
        return Activity(id=record_id, **data)
