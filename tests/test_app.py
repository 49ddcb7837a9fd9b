"""Tests for app factory and lifespan wiring."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from portal_admin.app import create_app
from portal_admin.config import Settings, StorageConfig
from portal_admin.models.collection import CollectionKind
from portal_admin.storage.keyvalue import MemoryKeyValueStore


@pytest.mark.unit
def test_lifespan_wires_components_and_closes_store(tmp_path) -> None:
    """Lifespan builds drafts per collection and closes the store on shutdown."""
    settings = Settings(storage=StorageConfig(backend="local", local_root=tmp_path, drafts_dir=tmp_path / "drafts"))
    store = MagicMock()
    store.fetch_document = AsyncMock(return_value=None)
    store.close = AsyncMock()
    snapshots = MemoryKeyValueStore()

    with (
        patch("portal_admin.app.load_settings", return_value=settings),
        patch("portal_admin.app.configure_logging") as mock_logging,
        patch("portal_admin.app.init_store", return_value=store),
        patch("portal_admin.app.init_snapshots", return_value=snapshots),
    ):
        app = create_app()
        with TestClient(app):
            assert app.state.store is store
            assert app.state.snapshots is snapshots
            assert set(app.state.editors) == set(CollectionKind)
            assert app.state.orchestrator.busy is False
            assert app.state.uploader.max_bytes == settings.upload.max_image_bytes

    mock_logging.assert_called_once_with(settings.app.log_level)
    fetched = [c.args[0] for c in store.fetch_document.await_args_list]
    assert fetched == [settings.storage.careers_path, settings.storage.activities_path]
    store.close.assert_awaited_once()


@pytest.mark.unit
def test_local_backend_serves_from_disk(tmp_path, monkeypatch) -> None:
    """With STORAGE_BACKEND=local the drafts come from files under the root."""
    data = tmp_path / "site" / "public" / "data"
    data.mkdir(parents=True)
    (data / "career.json").write_text('[{"id": 1, "title": "Mühasib"}]', encoding="utf-8")
    monkeypatch.setenv("STORAGE_BACKEND", "local")
    monkeypatch.setenv("STORAGE_LOCAL_ROOT", str(tmp_path / "site"))
    monkeypatch.setenv("DRAFTS_DIR", str(tmp_path / "drafts"))
    monkeypatch.delenv("CAREERS_DOCUMENT_PATH", raising=False)

    with (
        patch("portal_admin.app.load_settings", side_effect=Settings),
        patch("portal_admin.app.configure_logging"),
    ):
        with TestClient(create_app()) as client:
            client.post("/api/careers/records", json={"title": "Sürücü"})
            assert client.post("/api/careers/publish").status_code == 200

    assert '"Sürücü"' in (data / "career.json").read_text(encoding="utf-8")
    assert (tmp_path / "drafts" / "careers.json").is_file()
