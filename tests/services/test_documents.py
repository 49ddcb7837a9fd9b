"""Tests for direct document saves."""

from __future__ import annotations

import json

import pytest

from portal_admin.models.collection import CollectionKind
from portal_admin.services.documents import description_path, save_collection, save_description

CAREERS = "public/data/career.json"


@pytest.mark.unit
class TestDescriptionPath:
    def test_joins_directory(self) -> None:
        assert description_path("public/docs/", "career_1.txt") == "public/docs/career_1.txt"

    @pytest.mark.parametrize("name", ["", " ", "..", "a/b.txt", "a\\b.txt"])
    def test_rejects_unsafe_names(self, name) -> None:
        with pytest.raises(ValueError, match="description file name"):
            description_path("public/docs", name)


@pytest.mark.unit
class TestSaveCollection:
    async def test_validates_and_writes(self, github_client, fake_github, publish_config) -> None:
        result = await save_collection(
            github_client,
            CollectionKind.CAREERS,
            CAREERS,
            [{"id": 1, "title": "Mühasib"}],
            publish_config,
        )

        stored = json.loads(fake_github.files[CAREERS])
        assert result.written is True
        assert stored[0]["isVisible"] is True
        assert stored[0]["location"] == "Bakı, Azərbaycan"
        assert json.loads(fake_github.puts()[0].content)["message"].startswith("Update career data - ")

    async def test_invalid_record_writes_nothing(self, github_client, fake_github, publish_config) -> None:
        with pytest.raises(ValueError):
            await save_collection(github_client, CollectionKind.CAREERS, CAREERS, [{"title": "no id"}], publish_config)

        assert fake_github.requests == []


@pytest.mark.unit
async def test_save_description(github_client, fake_github, publish_config) -> None:
    result = await save_description(github_client, "public/docs", "career_2.txt", "Mətn", publish_config)

    assert result.path == "public/docs/career_2.txt"
    assert fake_github.files["public/docs/career_2.txt"] == "Mətn".encode()
    message = json.loads(fake_github.puts()[0].content)["message"]
    assert message == "Update description file: career_2.txt"
