# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-18
# Description: KnowledgeChunk
# -----------------------------------------------------------------------------
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List


@dataclass
class KnowledgeChunk:
    """
    One overlapping word-window of an ingested attachment.

    `chunk_index` is the 0-based position in the chunk sequence and is kept
    even when neighbouring chunks fail to embed, so the original order can
    always be recovered.
    """

    attachment_id: int
    chunk_index: int
    chunk_text: str

    # Free-form source metadata (file name, uploader, lang, ...)
    metadata: Dict[str, Any] = field(default_factory=dict)

    # Filled in by the indexer; never persisted as null
    embedding: Optional[List[float]] = None

    @property
    def word_count(self) -> int:
        return len(self.chunk_text.split())

    def short_preview(self, n: int = 120) -> str:
        """Return a compact text preview for logging/debugging."""
        clean = " ".join(self.chunk_text.split())
        preview = (clean[:n] + "...") if len(clean) > n else clean
        lang = str(self.metadata.get("lang") or "und").upper()
        return f"[{lang} | #{self.attachment_id}.{self.chunk_index}] {preview}"
