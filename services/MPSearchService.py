# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-22
# Description: MPSearchService.py
# -----------------------------------------------------------------------------
import asyncio
import logging
from typing import Dict, List, Optional

import settings
from embedding.MPEmbedder import MPEmbedder
from embedding.VectorCodec import VectorCodec
from model.SimilarityResult import ContentClass, SimilarityResult
from utility.ProviderResult import capture
from utility.logging_utils import get_class_logger
from vectorstore.MPForumRepository import MPForumRepository


class MPSearchService:
    """
    Similarity search over threads, posts and knowledge chunks.

    Vector path when an embedding is available, lexical (ILIKE) fallback
    otherwise. find_similar() never raises: embedding failures and store
    errors on the vector path both drop to the fallback, and a failing
    fallback yields an empty list.
    """

    def __init__(
        self,
        *,
        repository: MPForumRepository,
        embedder: MPEmbedder,
        logger: logging.Logger | None = None,
    ) -> None:
        self.repository = repository
        self.embedder = embedder
        self.logger = logger or get_class_logger(self.__class__)

    async def find_similar(
        self,
        query_text: str,
        content_class: ContentClass,
        *,
        limit: int = settings.RETRIEVAL_DEFAULTS["knowledge_results"],
        exclude_id: Optional[int] = None,
    ) -> List[SimilarityResult]:
        if limit < 1:
            raise ValueError("limit must be >= 1")

        embedded = await self.embedder.try_embed(query_text)
        if embedded.unconfigured:
            self.logger.debug("find_similar(%s): embeddings unconfigured, lexical fallback", content_class.value)
            return await self._fallback(query_text, content_class, limit=limit, exclude_id=exclude_id)
        if not embedded.ok:
            self.logger.warning(
                "find_similar(%s): embedding unavailable (%s), lexical fallback",
                content_class.value,
                embedded.error,
            )
            return await self._fallback(query_text, content_class, limit=limit, exclude_id=exclude_id)

        literal = VectorCodec.encode(embedded.value, expected_dim=self.embedder.dimension)
        rows = await capture(
            self.repository.similar(content_class, literal, limit=limit, exclude_id=exclude_id)
        )
        if not rows.ok:
            self.logger.error(
                "find_similar(%s): vector query failed (%s), lexical fallback",
                content_class.value,
                rows.error,
            )
            return await self._fallback(query_text, content_class, limit=limit, exclude_id=exclude_id)

        results = [SimilarityResult.from_row(content_class, r) for r in rows.value]
        self.logger.info("find_similar(%s): %d vector hit(s)", content_class.value, len(results))
        return results

    async def _fallback(
        self,
        query_text: str,
        content_class: ContentClass,
        *,
        limit: int,
        exclude_id: Optional[int],
    ) -> List[SimilarityResult]:
        rows = await capture(
            self.repository.lexical(content_class, query_text, limit=limit, exclude_id=exclude_id)
        )
        if not rows.ok:
            self.logger.error("Lexical fallback (%s) failed: %s", content_class.value, rows.error)
            return []
        return [SimilarityResult.unranked(content_class, r) for r in rows.value]

    async def find_similar_threads(
        self,
        query_text: str,
        *,
        limit: int = settings.RETRIEVAL_DEFAULTS["similar_threads"],
        exclude_id: Optional[int] = None,
    ) -> List[SimilarityResult]:
        return await self.find_similar(query_text, ContentClass.THREAD, limit=limit, exclude_id=exclude_id)

    async def find_similar_posts(
        self,
        query_text: str,
        *,
        limit: int = settings.RETRIEVAL_DEFAULTS["similar_threads"],
        exclude_id: Optional[int] = None,
    ) -> List[SimilarityResult]:
        return await self.find_similar(query_text, ContentClass.POST, limit=limit, exclude_id=exclude_id)

    async def search_knowledge_base(
        self,
        query_text: str,
        *,
        limit: int = settings.RETRIEVAL_DEFAULTS["knowledge_results"],
    ) -> List[SimilarityResult]:
        return await self.find_similar(query_text, ContentClass.KNOWLEDGE_CHUNK, limit=limit)

    async def search(
        self,
        query_text: str,
        *,
        limit: int = settings.RETRIEVAL_DEFAULTS["search_limit"],
    ) -> Dict[str, List[SimilarityResult]]:
        """Threads and knowledge chunks for one query, fetched concurrently."""
        threads, knowledge = await asyncio.gather(
            self.find_similar_threads(query_text, limit=limit),
            self.search_knowledge_base(query_text, limit=limit),
        )
        return {"threads": threads, "knowledge": knowledge}
