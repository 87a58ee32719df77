# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-19
# Description: BotSources.py
# -----------------------------------------------------------------------------
from typing import List, Optional, Sequence

from pydantic import BaseModel, Field

from model.SimilarityResult import SimilarityResult


class KnowledgeSourceRef(BaseModel):
    chunk_id: Optional[int] = None
    source: Optional[str] = None
    similarity: float
    ranked: bool = True


class VerifiedThreadRef(BaseModel):
    thread_id: int
    title: Optional[str] = None


class BotSources(BaseModel):
    """Evidence a bot reply was generated from, stored in mp_posts.bot_sources."""

    knowledge_chunks: List[KnowledgeSourceRef] = Field(default_factory=list)
    verified_threads: List[VerifiedThreadRef] = Field(default_factory=list)

    @classmethod
    def from_evidence(
            cls,
            knowledge: Sequence[SimilarityResult],
            verified_threads: Sequence[SimilarityResult],
    ) -> "BotSources":
        return cls(
            knowledge_chunks=[
                KnowledgeSourceRef(
                    chunk_id=k.entity_id,
                    source=k.source_label,
                    similarity=k.similarity,
                    ranked=k.ranked,
                )
                for k in knowledge
            ],
            verified_threads=[
                VerifiedThreadRef(thread_id=t.entity_id, title=t.get("title"))
                for t in verified_threads
            ],
        )

    @property
    def is_empty(self) -> bool:
        return not self.knowledge_chunks and not self.verified_threads
