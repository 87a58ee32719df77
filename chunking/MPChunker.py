# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-18
# Description: MPChunker
# -----------------------------------------------------------------------------
import logging
from typing import List, Dict, Any, Optional

import settings
from chunking.KnowledgeChunk import KnowledgeChunk
from utility.logging_utils import get_class_logger


class MPChunker:
    """
    Splits document text into overlapping word windows.

    Windows start at word offsets 0, stride, 2*stride, ... where
    stride = window_words - overlap_words, and stop at the first window that
    reaches the last word. Text with N <= window_words words therefore gives
    exactly one chunk, and the last chunk always ends on the last word.
    """

    def __init__(
        self,
        *,
        window_words: int = settings.CHUNK_WINDOW_WORDS,
        overlap_words: int = settings.CHUNK_OVERLAP_WORDS,
        lang_detector=None,
        logger: logging.Logger | None = None,
    ):
        if window_words < 1:
            raise ValueError(f"window_words must be >= 1, got {window_words}")
        if overlap_words < 0:
            raise ValueError(f"overlap_words must be >= 0, got {overlap_words}")

        # guard against bad config that can cause infinite loops
        if overlap_words >= window_words:
            raise ValueError(
                f"overlap_words ({overlap_words}) must be < window_words ({window_words})"
            )

        self.window_words = window_words
        self.overlap_words = overlap_words
        self.lang_detector = lang_detector
        self.logger = logger or get_class_logger(self.__class__)

    @property
    def stride(self) -> int:
        return self.window_words - self.overlap_words

    def chunk(self, text: str) -> List[str]:
        words = (text or "").split()
        num_words = len(words)

        chunks: List[str] = []
        start_idx = 0
        while start_idx < num_words:
            end_idx = min(start_idx + self.window_words, num_words)
            chunk_text = " ".join(words[start_idx:end_idx])
            if chunk_text.strip():
                chunks.append(chunk_text)

            if end_idx == num_words:
                break

            start_idx += self.stride

        return chunks

    def chunk_document(
            self,
            attachment_id: int,
            text: str,
            doc_metadata: Optional[Dict[str, Any]] = None,
    ) -> List[KnowledgeChunk]:
        base_metadata: Dict[str, Any] = dict(doc_metadata or {})
        texts = self.chunk(text)

        chunks: List[KnowledgeChunk] = []
        for idx, chunk_text in enumerate(texts):
            metadata: Dict[str, Any] = {}
            if self.lang_detector is not None:
                lang, confidence = self.lang_detector.detect(chunk_text)
                metadata["lang"] = lang
                metadata["lang_confidence"] = round(confidence, 4)
            # caller-supplied metadata wins
            metadata.update(base_metadata)

            chunks.append(KnowledgeChunk(
                attachment_id=attachment_id,
                chunk_index=idx,
                chunk_text=chunk_text,
                metadata=metadata,
            ))

        if chunks:
            self.logger.info(
                "Chunked attachment #%s: words=%d chunks=%d window=%d overlap=%d",
                attachment_id,
                len((text or "").split()),
                len(chunks),
                self.window_words,
                self.overlap_words,
            )
        else:
            self.logger.warning("No chunks produced for attachment #%s", attachment_id)

        return chunks
