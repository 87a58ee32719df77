# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-23
# Updated: 2026-10-04
# Description: MPIndexService.py
# -----------------------------------------------------------------------------
import asyncio
import logging
import time
from typing import Any, Dict, List, Optional

import settings
from chunking.KnowledgeChunk import KnowledgeChunk
from chunking.MPChunker import MPChunker
from embedding.MPEmbedder import MPEmbedder
from embedding.VectorCodec import VectorCodec
from utility.ProviderResult import capture
from utility.logging_utils import get_class_logger
from vectorstore.MPForumRepository import MPForumRepository


def thread_text(thread: Dict[str, Any]) -> str:
    """Embeddable text of a thread: title, body and, once present, its verified solution."""
    parts = [thread.get("title") or "", thread.get("body") or ""]
    solution = (thread.get("verified_solution") or "").strip()
    if solution:
        parts.append(solution)
    return "\n\n".join(parts).strip()


class MPIndexService:
    """
    Writes embeddings for threads and posts, and knowledge chunks for
    ingested attachments.

    Entry points return a result instead of raising: missing entities,
    embedding failures and store errors are logged and reported as
    False / 0.
    """

    def __init__(
        self,
        *,
        repository: MPForumRepository,
        embedder: MPEmbedder,
        chunker: Optional[MPChunker] = None,
        concurrency: int = settings.INDEX_CONCURRENCY,
        logger: logging.Logger | None = None,
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")

        self.repository = repository
        self.embedder = embedder
        self.chunker = chunker or MPChunker()
        self.concurrency = concurrency
        self.logger = logger or get_class_logger(self.__class__)

    async def _embed(self, text: str, label: str) -> Optional[List[float]]:
        result = await self.embedder.try_embed(text)
        if result.unconfigured:
            self.logger.debug("%s: embeddings unconfigured, skipped", label)
            return None
        if not result.ok:
            self.logger.warning("%s: embedding failed (%s), skipped", label, result.error)
            return None
        return result.value

    # ------------------------------------------------------------------
    # Threads / posts
    # ------------------------------------------------------------------
    async def index_thread(self, thread_id: int) -> bool:
        loaded = await capture(self.repository.get_thread(thread_id))
        if not loaded.ok:
            self.logger.error("index_thread(%s): load failed: %s", thread_id, loaded.error)
            return False
        if loaded.value is None:
            self.logger.info("index_thread(%s): thread not found", thread_id)
            return False

        vector = await self._embed(thread_text(loaded.value), f"index_thread({thread_id})")
        if vector is None:
            return False
        literal = VectorCodec.encode(vector, expected_dim=self.embedder.dimension)

        written = await capture(self.repository.update_thread_embedding(thread_id, literal))
        if not written.ok:
            self.logger.error("index_thread(%s): write failed: %s", thread_id, written.error)
            return False

        self.logger.info("Indexed thread #%s", thread_id)
        return bool(written.value)

    async def index_post(self, post_id: int) -> bool:
        loaded = await capture(self.repository.get_post(post_id))
        if not loaded.ok:
            self.logger.error("index_post(%s): load failed: %s", post_id, loaded.error)
            return False
        if loaded.value is None:
            self.logger.info("index_post(%s): post not found", post_id)
            return False

        vector = await self._embed(loaded.value.get("body") or "", f"index_post({post_id})")
        if vector is None:
            return False
        literal = VectorCodec.encode(vector, expected_dim=self.embedder.dimension)

        written = await capture(self.repository.update_post_embedding(post_id, literal))
        if not written.ok:
            self.logger.error("index_post(%s): write failed: %s", post_id, written.error)
            return False

        self.logger.info("Indexed post #%s", post_id)
        return bool(written.value)

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------
    async def index_document(
        self,
        attachment_id: int,
        text: str,
        metadata: Optional[Dict[str, Any]] = None,
        *,
        replace: bool = False,
    ) -> int:
        """
        Chunk, embed and store an attachment's text.

        Returns the number of chunks inserted. An attachment that already
        has chunks is skipped unless replace=True, in which case its old
        chunks are deleted first.
        """
        if not self.embedder.is_configured:
            self.logger.debug("index_document(%s): embeddings unconfigured, skipped", attachment_id)
            return 0
        if not (text or "").strip():
            self.logger.info("index_document(%s): empty text, nothing to index", attachment_id)
            return 0

        if replace:
            deleted = await capture(self.repository.delete_chunks(attachment_id))
            if not deleted.ok:
                self.logger.error("index_document(%s): delete failed: %s", attachment_id, deleted.error)
                return 0
            self.logger.info("index_document(%s): removed %d old chunk(s)", attachment_id, deleted.value)
        else:
            existing = await capture(self.repository.count_chunks(attachment_id))
            if not existing.ok:
                self.logger.error("index_document(%s): chunk count failed: %s", attachment_id, existing.error)
                return 0
            if existing.value > 0:
                self.logger.info(
                    "index_document(%s): already has %d chunk(s), skipped", attachment_id, existing.value
                )
                return 0

        chunks = self.chunker.chunk_document(attachment_id, text, metadata)
        t0 = time.perf_counter()

        semaphore = asyncio.Semaphore(self.concurrency)

        async def _one(chunk: KnowledgeChunk) -> bool:
            async with semaphore:
                return await self._index_chunk(chunk)

        if self.concurrency == 1:
            outcomes: List[bool] = [await self._index_chunk(c) for c in chunks]
        else:
            outcomes = list(await asyncio.gather(*(_one(c) for c in chunks)))

        inserted = sum(1 for ok in outcomes if ok)
        skipped = len(chunks) - inserted
        if skipped:
            self.logger.warning(
                "index_document(%s): %d of %d chunk(s) not indexed", attachment_id, skipped, len(chunks)
            )

        if inserted:
            marked = await capture(self.repository.mark_attachment_indexed(attachment_id))
            if not marked.ok:
                self.logger.error("index_document(%s): mark indexed failed: %s", attachment_id, marked.error)

        self.logger.info(
            "Indexed attachment #%s: %d/%d chunk(s) in %.2fs",
            attachment_id,
            inserted,
            len(chunks),
            time.perf_counter() - t0,
        )
        return inserted

    async def reindex_document(
        self,
        attachment_id: int,
        text: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> int:
        return await self.index_document(attachment_id, text, metadata, replace=True)

    async def _index_chunk(self, chunk: KnowledgeChunk) -> bool:
        label = f"chunk #{chunk.attachment_id}.{chunk.chunk_index}"
        chunk.embedding = await self._embed(chunk.chunk_text, label)
        if chunk.embedding is None:
            return False

        literal = VectorCodec.encode(chunk.embedding, expected_dim=self.embedder.dimension)
        inserted = await capture(
            self.repository.insert_knowledge_chunk(
                chunk.attachment_id,
                chunk.chunk_index,
                chunk.chunk_text,
                literal,
                chunk.metadata,
            )
        )
        if not inserted.ok:
            self.logger.error("%s: insert failed: %s", label, inserted.error)
            return False

        self.logger.debug("Stored %s", chunk.short_preview(60))
        return True
