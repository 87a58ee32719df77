# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-04
# Description: test_bot_service.py
# -----------------------------------------------------------------------------
import pytest

import settings
from fakes import FakeChat, hashing_vector
from services.MPBotService import MPBotService


def _bot(repo, search_service, index_service, chat) -> MPBotService:
    return MPBotService(
        repository=repo,
        search_service=search_service,
        index_service=index_service,
        chat_client=chat,
    )


QUESTION = ("Earthing for rooftop solar", "What earthing conductor size is needed for rooftop solar inverters?")


# -----------------------------------------------------------------------------
# auto_reply
# -----------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_no_evidence_means_no_reply_and_no_writes(repo, search_service, index_service, chat):
    tid = repo.add_thread(*QUESTION, embed_fn=hashing_vector)
    # similar, but not resolved
    repo.add_thread("Earthing for rooftop solar arrays", "conductor size question", status="open",
                    embed_fn=hashing_vector)

    bot = _bot(repo, search_service, index_service, chat)

    assert await bot.auto_reply(tid) is None
    assert chat.calls == 0
    assert repo.writes == []
    assert repo.threads[tid]["reply_count"] == 0


@pytest.mark.asyncio
async def test_thread_with_posts_is_not_answered(repo, search_service, index_service, chat):
    tid = repo.add_thread(*QUESTION)
    repo.add_post(tid, "Use 6 mm2 copper")
    att = repo.add_attachment("solar-guide.pdf")
    repo.add_chunk(att, 0, "earthing conductor", hashing_vector("earthing conductor"))

    bot = _bot(repo, search_service, index_service, chat)

    assert await bot.auto_reply(tid) is None
    assert chat.calls == 0


@pytest.mark.asyncio
async def test_missing_thread_or_unconfigured_chat(repo, search_service, index_service):
    tid = repo.add_thread(*QUESTION)

    assert await _bot(repo, search_service, index_service, FakeChat()).auto_reply(12345) is None
    assert await _bot(repo, search_service, index_service, FakeChat(configured=False)).auto_reply(tid) is None


@pytest.mark.asyncio
async def test_reply_is_grounded_and_attributed(repo, search_service, index_service, chat):
    tid = repo.add_thread(*QUESTION, service_tag="Electrical")
    att = repo.add_attachment("solar-guide.pdf")
    chunk_text = "Inverter earthing conductor size shall be at least 6 mm2 copper for rooftop solar."
    cid = repo.add_chunk(att, 0, chunk_text, hashing_vector(chunk_text))
    resolved = repo.add_thread("Earthing for rooftop solar inverters", "What earthing conductor size?",
                               status="resolved", service_tag="Electrical", embed_fn=hashing_vector)

    bot = _bot(repo, search_service, index_service, chat)
    post = await bot.auto_reply(tid)

    assert post is not None
    assert post["is_bot_reply"] is True
    assert post["body"] == chat.reply
    assert repo.threads[tid]["reply_count"] == 1

    sources = post["bot_sources"]
    assert sources["knowledge_chunks"][0]["source"] == "solar-guide.pdf"
    assert sources["knowledge_chunks"][0]["chunk_id"] == cid
    assert sources["knowledge_chunks"][0]["ranked"] is True
    assert sources["verified_threads"] == [
        {"thread_id": resolved, "title": "Earthing for rooftop solar inverters"}
    ]

    system_text, prompt = chat.prompts[0]
    assert "never invent" in system_text
    assert "[Source 1: solar-guide.pdf]" in prompt
    assert chunk_text in prompt
    assert '[Thread: "Earthing for rooftop solar inverters" (Electrical)]' in prompt
    assert "uncertain" in prompt

    assert settings.BOT_EMAIL in repo.users


@pytest.mark.asyncio
async def test_resolved_thread_alone_is_enough_evidence(repo, search_service, index_service, chat):
    tid = repo.add_thread(*QUESTION)
    repo.add_thread(*QUESTION, status="resolved", embed_fn=hashing_vector)

    post = await _bot(repo, search_service, index_service, chat).auto_reply(tid)

    assert post is not None
    assert post["bot_sources"]["knowledge_chunks"] == []


@pytest.mark.asyncio
async def test_generation_failure_writes_nothing(repo, search_service, index_service):
    tid = repo.add_thread(*QUESTION)
    att = repo.add_attachment("solar-guide.pdf")
    repo.add_chunk(att, 0, "earthing conductor", hashing_vector("earthing conductor"))
    chat = FakeChat(fail=True)

    assert await _bot(repo, search_service, index_service, chat).auto_reply(tid) is None
    assert chat.calls == 1
    assert repo.writes == []
    assert repo.threads[tid]["reply_count"] == 0


@pytest.mark.asyncio
async def test_second_auto_reply_is_refused(repo, search_service, index_service, chat):
    tid = repo.add_thread(*QUESTION)
    att = repo.add_attachment("solar-guide.pdf")
    repo.add_chunk(att, 0, "earthing conductor", hashing_vector("earthing conductor"))
    bot = _bot(repo, search_service, index_service, chat)

    assert await bot.auto_reply(tid) is not None
    assert await bot.auto_reply(tid) is None
    assert chat.calls == 1
    assert repo.threads[tid]["reply_count"] == 1


# -----------------------------------------------------------------------------
# synthesize_solution
# -----------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_synthesis_orders_by_votes_saves_and_reembeds(repo, embedder, search_service, index_service, chat):
    tid = repo.add_thread("Chiller cable", "Which cable for the chiller?", service_tag="HVAC")
    repo.add_post(tid, "EARLY low-vote answer", helpful_count=1, author_name="Asha", author_level="L1")
    repo.add_post(tid, "BOT suggestion", is_bot_reply=True)
    repo.add_post(tid, "LATE high-vote answer", helpful_count=7, author_name="Ravi", author_level="L3")

    summary = await _bot(repo, search_service, index_service, chat).synthesize_solution(tid)

    assert summary == chat.reply
    _, prompt = chat.prompts[0]
    assert prompt.index("LATE high-vote answer") < prompt.index("EARLY low-vote answer")
    assert prompt.index("EARLY low-vote answer") < prompt.index("BOT suggestion")
    assert "[7 upvotes]" in prompt
    assert f"[BOT] {settings.BOT_NAME}" in prompt
    assert "Ravi (L3)" in prompt
    assert "3-5 bullet points" in prompt

    thread = repo.threads[tid]
    assert thread["verified_solution"] == chat.reply
    assert thread["status"] == "resolved"
    assert thread["embedding"] is not None
    assert chat.reply in embedder.texts[-1]
    assert [w[0] for w in repo.writes] == ["save_verified_solution", "update_thread_embedding"]


@pytest.mark.asyncio
async def test_synthesis_failure_persists_nothing(repo, search_service, index_service):
    tid = repo.add_thread("Chiller cable", "Which cable?")
    repo.add_post(tid, "Use 95 mm2")

    result = await _bot(repo, search_service, index_service, FakeChat(fail=True)).synthesize_solution(tid)

    assert result is None
    assert repo.writes == []
    assert repo.threads[tid]["verified_solution"] is None
    assert repo.threads[tid]["status"] == "open"


@pytest.mark.asyncio
async def test_synthesis_needs_posts(repo, search_service, index_service, chat):
    tid = repo.add_thread("Chiller cable", "Which cable?")

    assert await _bot(repo, search_service, index_service, chat).synthesize_solution(tid) is None
    assert await _bot(repo, search_service, index_service, chat).synthesize_solution(999) is None
    assert chat.calls == 0
