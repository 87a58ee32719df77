# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-05
# Description: test_stats_and_health.py
# -----------------------------------------------------------------------------
import pytest

from fakes import FakeChat, FakeEmbedder, RecordingRowStore, hashing_vector
from health.ChatHealth import ChatHealth
from health.EmbeddingHealth import EmbeddingHealth
from health.StoreHealth import StoreHealth
from health.TestRunner import TestRunner
from model.types import AttachmentEntry
from services.MPStatsService import MPStatsService


class _BrokenRepository:
    async def embedding_coverage(self, table):
        raise ConnectionError("db down")

    async def count_all_chunks(self):
        raise ConnectionError("db down")

    async def list_attachment_chunk_counts(self):
        raise ConnectionError("db down")


@pytest.mark.asyncio
async def test_stats_report_embedding_coverage(repo):
    repo.add_thread("a", "b", embed_fn=hashing_vector)
    tid = repo.add_thread("c", "d")
    repo.add_post(tid, "reply")
    att = repo.add_attachment("guide.pdf")
    repo.add_chunk(att, 0, "text", hashing_vector("text"))
    repo.add_attachment("empty.pdf")

    stats = await MPStatsService(repository=repo).get_stats()

    assert stats["threads_total"] == 2
    assert stats["threads_embedded"] == 1
    assert stats["posts_total"] == 1
    assert stats["posts_embedded"] == 0
    assert stats["knowledge_chunks"] == 1
    assert stats["attachments"][0] == AttachmentEntry(attachment_id=att, chunk_count=1, file_name="guide.pdf")
    assert stats["attachments"][1].chunk_count == 0


@pytest.mark.asyncio
async def test_stats_are_zeroed_when_store_fails():
    stats = await MPStatsService(repository=_BrokenRepository()).get_stats()

    assert stats["threads_total"] == 0
    assert stats["knowledge_chunks"] == 0
    assert stats["attachments"] == []


@pytest.mark.asyncio
async def test_embedding_health_checks_dimension():
    assert await EmbeddingHealth(FakeEmbedder()).run() is True
    assert await EmbeddingHealth(FakeEmbedder(dimension=1536)).run() is False
    assert await EmbeddingHealth(FakeEmbedder(configured=False)).run() is False


@pytest.mark.asyncio
async def test_chat_health():
    assert await ChatHealth(FakeChat("OK")).run() is True
    assert await ChatHealth(FakeChat(fail=True)).run() is False


@pytest.mark.asyncio
async def test_store_health_requires_vector_extension():
    assert await StoreHealth(RecordingRowStore([[{"ok": 1}]])).run() is True
    assert await StoreHealth(RecordingRowStore([[]])).run() is False
    assert await StoreHealth(RecordingRowStore(connected=False)).run() is False
    assert await StoreHealth(None).run() is False


@pytest.mark.asyncio
async def test_runner_collects_all_results():
    runner = TestRunner(
        embedder=FakeEmbedder(),
        chat_client=FakeChat("OK"),
        store=RecordingRowStore([[{"ok": 1}]]),
    )

    results = await runner.run_all()

    assert results == {"store_health": True, "embedding_health": True, "chat_health": True}


@pytest.mark.asyncio
async def test_runner_reports_failures_without_raising():
    runner = TestRunner(
        embedder=FakeEmbedder(configured=False),
        chat_client=FakeChat(fail=True),
        store=None,
    )

    results = await runner.run_all()

    assert results == {"store_health": False, "embedding_health": False, "chat_health": False}
