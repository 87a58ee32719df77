# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-26
# Description: MPStatsService.py
# -----------------------------------------------------------------------------

import logging
from typing import List

from model.types import AttachmentEntry, IndexStatsDict
from utility.logging_utils import get_class_logger
from vectorstore.MPForumRepository import MPForumRepository


class MPStatsService:
    """
    Index coverage report.

    Responsibilities:
      - count threads/posts and how many carry an embedding
      - count knowledge chunks, overall and per attachment
    """

    def __init__(
        self,
        *,
        repository: MPForumRepository,
        logger: logging.Logger | None = None,
    ) -> None:
        self.repository = repository
        self.logger = logger or get_class_logger(self.__class__)

    async def get_stats(self) -> IndexStatsDict:
        # --- threads / posts ---
        try:
            threads = await self.repository.embedding_coverage("mp_threads")
            posts = await self.repository.embedding_coverage("mp_posts")
        except Exception as e:
            self.logger.error("Failed to read embedding coverage: %s", e)
            threads = {"total": 0, "embedded": 0}
            posts = {"total": 0, "embedded": 0}

        # --- knowledge chunks ---
        try:
            total_chunks = await self.repository.count_all_chunks()
            rows = await self.repository.list_attachment_chunk_counts()
        except Exception as e:
            self.logger.error("Failed to read knowledge chunk stats: %s", e)
            total_chunks = 0
            rows = []

        attachments: List[AttachmentEntry] = []
        for r in rows:
            attachment_id = r.get("attachment_id")
            if attachment_id is None:
                continue
            attachments.append(
                AttachmentEntry(
                    attachment_id=int(attachment_id),
                    chunk_count=int(r.get("chunk_count") or 0),
                    file_name=r.get("file_name"),
                    is_indexed=bool(r.get("is_indexed")),
                )
            )

        self.logger.info(
            "Stats: threads=%d/%d posts=%d/%d chunks=%d attachments=%d",
            threads["embedded"],
            threads["total"],
            posts["embedded"],
            posts["total"],
            total_chunks,
            len(attachments),
        )

        return IndexStatsDict(
            threads_total=threads["total"],
            threads_embedded=threads["embedded"],
            posts_total=posts["total"],
            posts_embedded=posts["embedded"],
            knowledge_chunks=total_chunks,
            attachments=attachments,
        )
