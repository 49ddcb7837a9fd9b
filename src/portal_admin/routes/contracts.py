"""Typed request bodies for the HTTP surface."""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, RootModel, field_validator


class _Body(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class SaveDocumentRequest(_Body):
    """Full replacement of a collection document."""

    data: list[dict[str, Any]]


class ImageUploadRequest(_Body):
    image: str = Field(min_length=1)
    folder_name: str = Field(default="activity_images", alias="folderName")
    image_number: str = Field(default="0", alias="imageNumber")
    base_folder: str | None = Field(default=None, alias="baseFolder")
    compressed: bool = False

    @field_validator("image_number", mode="before")
    @classmethod
    def _number_as_text(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value


class GalleryUploadRequest(_Body):
    """Main image plus gallery for an activity, named after its title."""

    title: str = Field(min_length=1)
    image: str | None = None
    additional_images: list[str] = Field(default_factory=list, alias="additionalImages")
    base_folder: str | None = Field(default=None, alias="baseFolder")


class SaveDescriptionRequest(_Body):
    file_name: str = Field(alias="fileName")
    content: str


class SaveCareerJson(_Body):
    action: Literal["save-career-json"]
    data: list[dict[str, Any]]


class SaveCareerDescription(_Body):
    action: Literal["save-description"]
    file_name: str = Field(alias="fileName")
    content: str


class SaveCareerRequest(
    RootModel[Annotated[SaveCareerJson | SaveCareerDescription, Field(discriminator="action")]]
):
    """Career save command; ``action`` selects the variant and its required fields."""
