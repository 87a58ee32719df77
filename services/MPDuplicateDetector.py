# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-25
# Description: MPDuplicateDetector.py
# -----------------------------------------------------------------------------
import logging
from typing import List, Optional

import settings
from model.SimilarityResult import SimilarityResult
from services.MPSearchService import MPSearchService
from utility.logging_utils import get_class_logger


class MPDuplicateDetector:
    """As-you-type lookup of existing threads similar to a draft question."""

    def __init__(
        self,
        *,
        search_service: MPSearchService,
        min_chars: int = settings.DUPLICATE_MIN_CHARS,
        limit: int = settings.DUPLICATE_LIMIT,
        logger: logging.Logger | None = None,
    ) -> None:
        self.search_service = search_service
        self.min_chars = min_chars
        self.limit = limit
        self.logger = logger or get_class_logger(self.__class__)

    async def detect_duplicates(self, partial_text: Optional[str]) -> List[SimilarityResult]:
        if not partial_text or len(partial_text.strip()) < self.min_chars:
            return []

        hits = await self.search_service.find_similar_threads(partial_text, limit=self.limit)
        self.logger.debug("detect_duplicates: %d candidate(s) for %r", len(hits), partial_text[:60])
        return hits
