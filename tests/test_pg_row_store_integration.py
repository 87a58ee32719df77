# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-06
# Description: test_pg_row_store_integration.py
# -----------------------------------------------------------------------------
import os
import uuid

import pytest

from config.Config import Config
from fakes import HashingEmbedder, hashing_vector
from embedding.VectorCodec import VectorCodec
from model.SimilarityResult import ContentClass
from services.MPIndexService import MPIndexService
from services.MPSearchService import MPSearchService
from vectorstore.MPForumRepository import MPForumRepository
from vectorstore.PgRowStore import PgRowStore

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(not os.getenv("MP_DATABASE_URL"), reason="MP_DATABASE_URL not set"),
]

USERS_DDL = """
CREATE TABLE IF NOT EXISTS users (
    id SERIAL PRIMARY KEY,
    email VARCHAR(255) UNIQUE NOT NULL,
    full_name VARCHAR(255),
    role VARCHAR(50),
    user_level VARCHAR(50),
    organization VARCHAR(255)
)
"""


@pytest.mark.asyncio
async def test_pgvector_roundtrip_and_search():
    store = PgRowStore(Config.from_env())
    repo = MPForumRepository(store)
    try:
        assert await store.test_connection()
        await store.execute(USERS_DDL)
        await repo.ensure_schema()

        email = f"it-{uuid.uuid4().hex[:8]}@example.com"
        users = await store.fetch(
            "INSERT INTO users (email, full_name) VALUES ($1, 'IT User') RETURNING id", email
        )
        title = f"Integration {uuid.uuid4().hex[:8]} busbar trunking"
        threads = await store.fetch(
            "INSERT INTO mp_threads (title, body, author_id) VALUES ($1, $2, $3) RETURNING id",
            title,
            "Busbar trunking joint torque values",
            users[0]["id"],
        )
        tid = threads[0]["id"]

        embedder = HashingEmbedder()
        index = MPIndexService(repository=repo, embedder=embedder)
        search = MPSearchService(repository=repo, embedder=embedder)

        assert await index.index_thread(tid) is True

        results = await search.find_similar(f"{title}\n\nBusbar trunking joint torque values",
                                            ContentClass.THREAD, limit=1)
        assert results[0].entity_id == tid
        assert results[0].similarity == pytest.approx(1.0, abs=1e-4)

        # jsonb codec round-trip on the bot reply path
        sources = {"knowledge_chunks": [], "verified_threads": [{"thread_id": tid, "title": title}]}
        post = await repo.insert_bot_reply(tid, users[0]["id"], "bot body", sources)
        assert post["bot_sources"] == sources
        assert await repo.insert_bot_reply(tid, users[0]["id"], "again", sources) is None

        literal = VectorCodec.encode(hashing_vector("x"))
        rows = await store.fetch("SELECT $1::text::vector::text AS v", literal)
        assert len(VectorCodec.decode(rows[0]["v"])) == 768
    finally:
        await store.execute("DELETE FROM mp_threads WHERE title LIKE 'Integration %'")
        await store.close()
