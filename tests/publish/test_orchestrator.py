"""Tests for the publish orchestrator."""

from __future__ import annotations

import asyncio
import json
from unittest.mock import call

import pytest

from portal_admin.drafts.cache import DraftCache
from portal_admin.errors import ConflictError
from portal_admin.models.career import Career
from portal_admin.models.collection import CollectionKind
from portal_admin.publish.orchestrator import PublishOrchestrator, description_message, document_message
from portal_admin.storage.local import LocalDocumentStore

CAREERS = "public/data/career.json"


@pytest.fixture
def orchestrator(github_client, publish_config, no_sleep) -> PublishOrchestrator:
    return PublishOrchestrator(github_client, publish_config, sleep=no_sleep)


@pytest.fixture
async def cache(github_client, fake_github, snapshots) -> DraftCache:
    fake_github.seed_json(CAREERS, [{"id": 1, "title": "Mühasib"}, {"id": 2, "title": "Sürücü"}])
    draft = DraftCache(CollectionKind.CAREERS, github_client, snapshots, document_path=CAREERS)
    await draft.load()
    return draft


def _stored(fake_github) -> list[dict]:
    return json.loads(fake_github.files[CAREERS])


def _with_description_files(records: list[Career]) -> list[Career]:
    return [
        r.model_copy(
            update={"description_file": f"public/docs/career_{r.id}.txt", "description": f"Təsvir {r.id}"},
        )
        for r in records
    ]


@pytest.mark.unit
def test_commit_messages() -> None:
    assert document_message(CollectionKind.CAREERS).startswith("Update career data - ")
    assert document_message(CollectionKind.ACTIVITIES).startswith("Update activities - ")
    assert description_message("public/docs/career_3.txt") == "Update description file: career_3.txt"


@pytest.mark.unit
class TestPublish:
    async def test_writes_document_and_marks_clean(self, orchestrator, cache, fake_github) -> None:
        cache.mutate(lambda records: [r for r in records if r.id != 2])

        report = await orchestrator.publish(cache)

        assert report.published is True
        assert report.document_written is True
        assert [r["id"] for r in _stored(fake_github)] == [1]
        assert cache.dirty is False
        assert cache.revision == fake_github.sha(CAREERS)
        assert report.replaced_revision is None

    async def test_delete_everything_then_publish(self, orchestrator, cache, fake_github) -> None:
        cache.mutate(lambda records: [])

        await orchestrator.publish(cache)

        assert _stored(fake_github) == []

    async def test_document_is_pretty_printed_utf8(self, orchestrator, cache, fake_github) -> None:
        cache.mutate(lambda records: [*records, Career(id=3, title="Mühəndis")])

        await orchestrator.publish(cache)

        text = fake_github.files[CAREERS].decode("utf-8")
        assert "Mühəndis" in text
        assert '\n  {\n    "id": 1,' in text

    async def test_second_publish_writes_nothing(self, orchestrator, cache, fake_github) -> None:
        cache.mutate(lambda records: [*records, Career(id=3, title="Yeni")])
        await orchestrator.publish(cache)
        puts = len(fake_github.puts())

        report = await orchestrator.publish(cache)

        assert report.published is True
        assert report.document_written is False
        assert len(fake_github.puts()) == puts

    async def test_reloads_draft_after_publish(self, orchestrator, cache, fake_github) -> None:
        cache.mutate(lambda records: [*records, Career(id=3, title="Yeni")])

        await orchestrator.publish(cache)

        assert [r.id for r in cache.records] == [1, 2, 3]
        assert cache.dirty is False

    async def test_aggregate_conflict_retries_with_fresh_sha(self, orchestrator, cache, fake_github, no_sleep) -> None:
        cache.mutate(lambda records: records[:1])
        fake_github.fail("PUT", CAREERS, 409)

        report = await orchestrator.publish(cache)

        assert report.published is True
        assert len(fake_github.puts(CAREERS)) == 2
        no_sleep.assert_awaited_once_with(2.0)

    async def test_aggregate_failure_propagates_and_stays_dirty(self, orchestrator, cache, fake_github) -> None:
        cache.mutate(lambda records: records[:1])
        fake_github.fail("PUT", CAREERS, 409, 409, 409)

        with pytest.raises(ConflictError):
            await orchestrator.publish(cache)

        assert cache.dirty is True
        assert len(_stored(fake_github)) == 2

    async def test_edit_during_publish_keeps_draft_dirty(self, orchestrator, cache, fake_github, no_sleep) -> None:
        cache.mutate(lambda records: records[:1])

        async def edit_while_waiting(delay: float) -> None:
            cache.mutate(lambda records: [*records, Career(id=9, title="Gec")])

        no_sleep.side_effect = edit_while_waiting
        fake_github.fail("PUT", CAREERS, 409)

        report = await orchestrator.publish(cache)

        assert report.published is True
        assert cache.dirty is True
        assert [r.id for r in cache.records] == [1, 9]


@pytest.mark.unit
class TestDescriptionFiles:
    async def test_written_before_document(self, orchestrator, cache, fake_github) -> None:
        cache.mutate(_with_description_files)

        report = await orchestrator.publish(cache)

        paths = [r.url.path.rsplit("/", 1)[-1] for r in fake_github.puts()]
        assert paths == ["career_1.txt", "career_2.txt", "career.json"]
        assert report.files_written == 2
        assert fake_github.files["public/docs/career_1.txt"].decode() == "Təsvir 1"
        stored = _stored(fake_github)
        assert stored[0]["descriptionFile"] == "public/docs/career_1.txt"
        assert "description" not in stored[0]

    async def test_sequential_with_pause_between_writes(self, orchestrator, cache, no_sleep) -> None:
        cache.mutate(_with_description_files)

        await orchestrator.publish(cache)

        assert no_sleep.await_args_list == [call(1.0)]

    async def test_draft_keeps_full_text_after_reload(self, orchestrator, cache) -> None:
        cache.mutate(_with_description_files)

        await orchestrator.publish(cache)

        assert [r.description for r in cache.records] == ["Təsvir 1", "Təsvir 2"]

    async def test_failed_file_blocks_document(self, orchestrator, cache, fake_github, no_sleep) -> None:
        cache.mutate(_with_description_files)
        document_before = fake_github.files[CAREERS]
        fake_github.fail("PUT", "public/docs/career_1.txt", 409, 409, 409)

        report = await orchestrator.publish(cache)

        assert report.published is False
        assert report.failed == [1]
        assert 1 in report.errors
        assert fake_github.puts(CAREERS) == []
        assert fake_github.files[CAREERS] == document_before
        assert cache.dirty is True
        # Record 2 is still attempted after record 1 fails
        assert "public/docs/career_2.txt" in fake_github.files
        assert no_sleep.await_args_list == [call(2.0), call(4.0), call(1.0)]

    async def test_server_error_marks_record_failed(self, orchestrator, cache, fake_github) -> None:
        cache.mutate(_with_description_files)
        fake_github.fail("PUT", "public/docs/career_2.txt", 500)

        report = await orchestrator.publish(cache)

        assert report.failed == [2]
        assert fake_github.puts(CAREERS) == []

    async def test_unchanged_files_are_skipped(self, orchestrator, cache, fake_github) -> None:
        cache.mutate(_with_description_files)
        fake_github.seed("public/docs/career_1.txt", "Təsvir 1")

        report = await orchestrator.publish(cache)

        assert report.files_written == 1
        assert fake_github.puts("public/docs/career_1.txt") == []


@pytest.mark.unit
async def test_publish_runs_are_serialized(github_client, publish_config, cache) -> None:
    gate = asyncio.Event()
    events: list[str] = []

    async def slow_sleep(delay: float) -> None:
        events.append("sleep")
        await gate.wait()

    orchestrator = PublishOrchestrator(github_client, publish_config, sleep=slow_sleep)
    cache.mutate(_with_description_files)

    first = asyncio.create_task(orchestrator.publish(cache))
    await asyncio.sleep(0.01)
    assert orchestrator.busy is True
    second = asyncio.create_task(orchestrator.publish(cache))
    await asyncio.sleep(0.01)
    assert events == ["sleep"]

    gate.set()
    reports = await asyncio.gather(first, second)

    assert all(r.published for r in reports)
    assert orchestrator.busy is False


@pytest.mark.unit
async def test_edit_during_reload_after_publish_is_kept(
    orchestrator, cache, github_client, snapshots, monkeypatch
) -> None:
    cache.mutate(lambda records: records[:1])
    fetch = github_client.fetch_document
    mark_clean = cache.mark_clean
    armed = False

    async def fetch_then_edit(path):
        nonlocal armed
        document = await fetch(path)
        if armed:
            armed = False
            cache.mutate(lambda records: [*records, Career(id=7, title="Gec")])
        return document

    def mark_clean_then_arm(revision: str) -> None:
        nonlocal armed
        mark_clean(revision)
        armed = True

    monkeypatch.setattr(github_client, "fetch_document", fetch_then_edit)
    monkeypatch.setattr(cache, "mark_clean", mark_clean_then_arm)

    report = await orchestrator.publish(cache)

    assert report.published is True
    assert [r.id for r in cache.records] == [1, 7]
    assert cache.dirty is True
    assert [r["id"] for r in snapshots.get("careers")["records"]] == [1, 7]


@pytest.mark.unit
async def test_reports_replaced_remote_revision(orchestrator, cache, fake_github) -> None:
    newer = fake_github.seed_json(CAREERS, [{"id": 1}, {"id": 2}, {"id": 5, "title": "Başqa redaktor"}])
    cache.mutate(lambda records: records[:1])

    report = await orchestrator.publish(cache)

    assert report.published is True
    assert report.replaced_revision == newer
    assert [r["id"] for r in _stored(fake_github)] == [1]


@pytest.mark.unit
async def test_path_outside_store_fails_only_that_record(tmp_path, publish_config, snapshots, no_sleep) -> None:
    store = LocalDocumentStore(tmp_path / "site")
    await store.put_document(CAREERS, b'[{"id": 1}, {"id": 2}]', None, "Seed")
    cache = DraftCache(CollectionKind.CAREERS, store, snapshots, document_path=CAREERS)
    await cache.load()
    document_before = (tmp_path / "site" / CAREERS).read_bytes()
    cache.mutate(
        lambda records: [
            records[0].model_copy(update={"description_file": "../outside.txt", "description": "x"}),
            records[1].model_copy(update={"description_file": "public/docs/career_2.txt", "description": "Təsvir"}),
        ]
    )

    report = await PublishOrchestrator(store, publish_config, sleep=no_sleep).publish(cache)

    assert report.published is False
    assert report.failed == [1]
    assert "escapes" in report.errors[1]
    assert (tmp_path / "site/public/docs/career_2.txt").read_text(encoding="utf-8") == "Təsvir"
    assert (tmp_path / "site" / CAREERS).read_bytes() == document_before
    assert not (tmp_path / "outside.txt").exists()
    assert cache.dirty is True
