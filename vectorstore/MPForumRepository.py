# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-21
# Updated: 2026-10-06
# Description: MPForumRepository
# -----------------------------------------------------------------------------
import logging
from typing import Any, Dict, List, Optional, Tuple

import settings
from model.SimilarityResult import ContentClass
from utility.logging_utils import get_class_logger
from vectorstore.MPRowStore import MPRowStore


SCHEMA_STATEMENTS: Tuple[str, ...] = (
    "CREATE EXTENSION IF NOT EXISTS vector",
    f"""
    CREATE TABLE IF NOT EXISTS mp_threads (
        id SERIAL PRIMARY KEY,
        title VARCHAR(500) NOT NULL,
        body TEXT NOT NULL,
        service_tag VARCHAR(50) NOT NULL DEFAULT 'General',
        author_id INTEGER NOT NULL REFERENCES users(id),
        is_anonymous BOOLEAN DEFAULT FALSE,
        anonymous_alias VARCHAR(100),
        status VARCHAR(50) DEFAULT 'open',
        is_pinned BOOLEAN DEFAULT FALSE,
        view_count INTEGER DEFAULT 0,
        reply_count INTEGER DEFAULT 0,
        verified_solution TEXT,
        embedding vector({settings.EMBEDDING_DIMENSION}),
        created_at TIMESTAMPTZ DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMPTZ DEFAULT CURRENT_TIMESTAMP
    )
    """,
    f"""
    CREATE TABLE IF NOT EXISTS mp_posts (
        id SERIAL PRIMARY KEY,
        thread_id INTEGER NOT NULL REFERENCES mp_threads(id) ON DELETE CASCADE,
        author_id INTEGER NOT NULL REFERENCES users(id),
        body TEXT NOT NULL,
        is_anonymous BOOLEAN DEFAULT FALSE,
        anonymous_alias VARCHAR(100),
        is_bot_reply BOOLEAN DEFAULT FALSE,
        bot_sources JSONB,
        helpful_count INTEGER DEFAULT 0,
        is_verified BOOLEAN DEFAULT FALSE,
        embedding vector({settings.EMBEDDING_DIMENSION}),
        created_at TIMESTAMPTZ DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMPTZ DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS mp_attachments (
        id SERIAL PRIMARY KEY,
        thread_id INTEGER REFERENCES mp_threads(id) ON DELETE CASCADE,
        post_id INTEGER REFERENCES mp_posts(id) ON DELETE CASCADE,
        file_name VARCHAR(500) NOT NULL,
        file_url TEXT NOT NULL,
        file_type VARCHAR(100),
        file_size INTEGER,
        is_indexed BOOLEAN DEFAULT FALSE,
        created_at TIMESTAMPTZ DEFAULT CURRENT_TIMESTAMP
    )
    """,
    f"""
    CREATE TABLE IF NOT EXISTS mp_knowledge_chunks (
        id SERIAL PRIMARY KEY,
        attachment_id INTEGER REFERENCES mp_attachments(id) ON DELETE CASCADE,
        chunk_index INTEGER NOT NULL,
        chunk_text TEXT NOT NULL,
        embedding vector({settings.EMBEDDING_DIMENSION}),
        metadata JSONB,
        created_at TIMESTAMPTZ DEFAULT CURRENT_TIMESTAMP
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_mp_threads_status ON mp_threads(status)",
    "CREATE INDEX IF NOT EXISTS idx_mp_posts_thread ON mp_posts(thread_id)",
    "CREATE INDEX IF NOT EXISTS idx_mp_knowledge_chunks_attachment ON mp_knowledge_chunks(attachment_id)",
)


# Per content class: selected display columns, FROM/JOIN clause, alias of
# the embedding-bearing table, lexical match predicate, recency column.
_CLASS_SQL: Dict[ContentClass, Dict[str, str]] = {
    ContentClass.THREAD: {
        "columns": (
            "t.id, t.title, t.service_tag, t.status, t.created_at, "
            "t.view_count, t.reply_count, t.is_pinned, t.is_anonymous, "
            "CASE WHEN t.is_anonymous THEN t.anonymous_alias ELSE u.full_name END AS author_name, "
            "CASE WHEN t.is_anonymous THEN 'Anonymous' ELSE u.user_level END AS author_level"
        ),
        "from": "mp_threads t JOIN users u ON t.author_id = u.id",
        "alias": "t",
        "lexical": "(t.title ILIKE $1 OR t.body ILIKE $1)",
        "recency": "t.created_at DESC",
    },
    ContentClass.POST: {
        "columns": (
            "p.id, p.thread_id, p.body, p.helpful_count, p.is_bot_reply, p.created_at, "
            "t.title AS thread_title, t.status AS thread_status, "
            "CASE WHEN p.is_anonymous THEN p.anonymous_alias ELSE u.full_name END AS author_name"
        ),
        "from": (
            "mp_posts p JOIN mp_threads t ON p.thread_id = t.id "
            "JOIN users u ON p.author_id = u.id"
        ),
        "alias": "p",
        "lexical": "p.body ILIKE $1",
        "recency": "p.created_at DESC",
    },
    ContentClass.KNOWLEDGE_CHUNK: {
        "columns": (
            "kc.id, kc.attachment_id, kc.chunk_index, kc.chunk_text, kc.metadata, "
            "a.file_name, a.file_type, t.id AS thread_id, t.title AS thread_title"
        ),
        "from": (
            "mp_knowledge_chunks kc "
            "LEFT JOIN mp_attachments a ON kc.attachment_id = a.id "
            "LEFT JOIN mp_posts ap ON a.post_id = ap.id "
            "LEFT JOIN mp_threads t ON t.id = COALESCE(a.thread_id, ap.thread_id)"
        ),
        "alias": "kc",
        "lexical": "kc.chunk_text ILIKE $1",
        "recency": "kc.created_at DESC, kc.chunk_index ASC",
    },
}


def like_pattern(text: str) -> str:
    """Substring pattern for ILIKE with the user's own % and _ escaped."""
    escaped = (
        (text or "")
        .replace("\\", "\\\\")
        .replace("%", "\\%")
        .replace("_", "\\_")
    )
    return f"%{escaped}%"


class MPForumRepository:
    """
    All SQL the knowledge engine issues against the forum tables.

    Methods raise whatever the underlying store raises; the services decide
    how failures degrade.
    """

    def __init__(self, store: MPRowStore, *, logger: logging.Logger | None = None) -> None:
        self.store = store
        self.logger = logger or get_class_logger(self.__class__)

    async def ensure_schema(self) -> None:
        for stmt in SCHEMA_STATEMENTS:
            await self.store.execute(stmt)
        self.logger.info("Knowledge engine schema ensured (%d statements)", len(SCHEMA_STATEMENTS))

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    async def get_thread(self, thread_id: int) -> Optional[Dict[str, Any]]:
        rows = await self.store.fetch(
            "SELECT id, title, body, service_tag, status, verified_solution, reply_count "
            "FROM mp_threads WHERE id = $1",
            thread_id,
        )
        return rows[0] if rows else None

    async def get_post(self, post_id: int) -> Optional[Dict[str, Any]]:
        rows = await self.store.fetch(
            "SELECT id, thread_id, body FROM mp_posts WHERE id = $1",
            post_id,
        )
        return rows[0] if rows else None

    async def count_posts(self, thread_id: int) -> int:
        rows = await self.store.fetch(
            "SELECT COUNT(*) AS cnt FROM mp_posts WHERE thread_id = $1",
            thread_id,
        )
        return int(rows[0]["cnt"]) if rows else 0

    async def list_thread_posts(self, thread_id: int) -> List[Dict[str, Any]]:
        """Most-upvoted first; ties broken by earliest post."""
        return await self.store.fetch(
            "SELECT p.id, p.body, p.helpful_count, p.is_bot_reply, p.created_at, "
            "CASE WHEN p.is_anonymous THEN p.anonymous_alias ELSE u.full_name END AS author_name, "
            "CASE WHEN p.is_anonymous THEN 'Anonymous' ELSE u.user_level END AS author_level "
            "FROM mp_posts p JOIN users u ON p.author_id = u.id "
            "WHERE p.thread_id = $1 "
            "ORDER BY p.helpful_count DESC, p.created_at ASC",
            thread_id,
        )

    async def count_chunks(self, attachment_id: int) -> int:
        rows = await self.store.fetch(
            "SELECT COUNT(*) AS cnt FROM mp_knowledge_chunks WHERE attachment_id = $1",
            attachment_id,
        )
        return int(rows[0]["cnt"]) if rows else 0

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------
    async def similar(
            self,
            content_class: ContentClass,
            vector_literal: str,
            *,
            limit: int,
            exclude_id: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        parts = _CLASS_SQL[content_class]
        alias = parts["alias"]
        params: List[Any] = [vector_literal, limit]

        sql = (
            f"SELECT {parts['columns']}, "
            f"GREATEST(0, LEAST(1, 1 - ({alias}.embedding <=> $1::text::vector))) AS similarity "
            f"FROM {parts['from']} "
            f"WHERE {alias}.embedding IS NOT NULL"
        )
        if exclude_id is not None:
            params.append(exclude_id)
            sql += f" AND {alias}.id <> ${len(params)}"

        # No secondary sort key: equal distances come back in store order
        sql += f" ORDER BY {alias}.embedding <=> $1::text::vector LIMIT $2"

        return await self.store.fetch(sql, *params)

    async def lexical(
            self,
            content_class: ContentClass,
            query_text: str,
            *,
            limit: int,
            exclude_id: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        parts = _CLASS_SQL[content_class]
        alias = parts["alias"]
        params: List[Any] = [like_pattern(query_text), limit]

        sql = f"SELECT {parts['columns']} FROM {parts['from']} WHERE {parts['lexical']}"
        if exclude_id is not None:
            params.append(exclude_id)
            sql += f" AND {alias}.id <> ${len(params)}"
        sql += f" ORDER BY {parts['recency']} LIMIT $2"

        return await self.store.fetch(sql, *params)

    # ------------------------------------------------------------------
    # Embedding writes
    # ------------------------------------------------------------------
    async def update_thread_embedding(self, thread_id: int, vector_literal: str) -> bool:
        n = await self.store.execute(
            "UPDATE mp_threads SET embedding = $1::text::vector WHERE id = $2",
            vector_literal,
            thread_id,
        )
        return n > 0

    async def update_post_embedding(self, post_id: int, vector_literal: str) -> bool:
        n = await self.store.execute(
            "UPDATE mp_posts SET embedding = $1::text::vector WHERE id = $2",
            vector_literal,
            post_id,
        )
        return n > 0

    async def insert_knowledge_chunk(
            self,
            attachment_id: int,
            chunk_index: int,
            chunk_text: str,
            vector_literal: str,
            metadata: Dict[str, Any],
    ) -> int:
        rows = await self.store.fetch(
            "INSERT INTO mp_knowledge_chunks "
            "(attachment_id, chunk_index, chunk_text, embedding, metadata) "
            "VALUES ($1, $2, $3, $4::text::vector, $5::jsonb) "
            "RETURNING id",
            attachment_id,
            chunk_index,
            chunk_text,
            vector_literal,
            metadata,
        )
        return int(rows[0]["id"])

    async def delete_chunks(self, attachment_id: int) -> int:
        return await self.store.execute(
            "DELETE FROM mp_knowledge_chunks WHERE attachment_id = $1",
            attachment_id,
        )

    async def mark_attachment_indexed(self, attachment_id: int, indexed: bool = True) -> bool:
        n = await self.store.execute(
            "UPDATE mp_attachments SET is_indexed = $1 WHERE id = $2",
            indexed,
            attachment_id,
        )
        return n > 0

    # ------------------------------------------------------------------
    # Bot writes
    # ------------------------------------------------------------------
    async def get_or_create_user(self, email: str, full_name: str) -> int:
        rows = await self.store.fetch("SELECT id FROM users WHERE email = $1 LIMIT 1", email)
        if rows:
            return int(rows[0]["id"])

        rows = await self.store.fetch(
            "INSERT INTO users (email, full_name, role, user_level, organization) "
            "VALUES ($1, $2, 'bot', 'SYSTEM', 'atelier') "
            "ON CONFLICT (email) DO UPDATE SET full_name = EXCLUDED.full_name "
            "RETURNING id",
            email,
            full_name,
        )
        self.logger.info("Created bot user %s (id=%s)", email, rows[0]["id"])
        return int(rows[0]["id"])

    async def insert_bot_reply(
            self,
            thread_id: int,
            author_id: int,
            body: str,
            bot_sources: Dict[str, Any],
    ) -> Optional[Dict[str, Any]]:
        """
        Insert the bot post and bump reply_count in one statement.

        Returns None, writing nothing, if a post appeared on the thread in
        the meantime.
        """
        rows = await self.store.fetch(
            "WITH new_post AS ("
            " INSERT INTO mp_posts (thread_id, author_id, body, is_bot_reply, bot_sources)"
            " SELECT $1::int, $2::int, $3::text, TRUE, $4::jsonb"
            " WHERE NOT EXISTS (SELECT 1 FROM mp_posts WHERE thread_id = $1::int)"
            " RETURNING id, thread_id, author_id, body, is_bot_reply, bot_sources, helpful_count, created_at"
            "), bumped AS ("
            " UPDATE mp_threads SET reply_count = reply_count + 1, updated_at = NOW()"
            " WHERE id = $1::int AND EXISTS (SELECT 1 FROM new_post)"
            " RETURNING id"
            ") "
            "SELECT * FROM new_post",
            thread_id,
            author_id,
            body,
            bot_sources,
        )
        return rows[0] if rows else None

    async def save_verified_solution(self, thread_id: int, summary: str) -> bool:
        n = await self.store.execute(
            "UPDATE mp_threads SET verified_solution = $1, status = 'resolved', updated_at = NOW() "
            "WHERE id = $2",
            summary,
            thread_id,
        )
        return n > 0

    # ------------------------------------------------------------------
    # Stats
    # ------------------------------------------------------------------
    async def embedding_coverage(self, table: str) -> Dict[str, int]:
        if table not in ("mp_threads", "mp_posts"):
            raise ValueError(f"Unsupported table for coverage: {table!r}")
        rows = await self.store.fetch(
            f"SELECT COUNT(*) AS total, COUNT(embedding) AS embedded FROM {table}"
        )
        row = rows[0] if rows else {}
        return {"total": int(row.get("total") or 0), "embedded": int(row.get("embedded") or 0)}

    async def count_all_chunks(self) -> int:
        rows = await self.store.fetch("SELECT COUNT(*) AS cnt FROM mp_knowledge_chunks")
        return int(rows[0]["cnt"]) if rows else 0

    async def list_attachment_chunk_counts(self) -> List[Dict[str, Any]]:
        return await self.store.fetch(
            "SELECT a.id AS attachment_id, a.file_name, a.is_indexed, COUNT(kc.id) AS chunk_count "
            "FROM mp_attachments a "
            "LEFT JOIN mp_knowledge_chunks kc ON kc.attachment_id = a.id "
            "GROUP BY a.id, a.file_name, a.is_indexed "
            "ORDER BY a.id"
        )
