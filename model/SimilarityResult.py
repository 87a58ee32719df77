# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-19
# Description: SimilarityResult
# -----------------------------------------------------------------------------
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

import settings


class ContentClass(str, Enum):
    THREAD = "thread"
    POST = "post"
    KNOWLEDGE_CHUNK = "knowledge_chunk"


def clamp_similarity(value: Any) -> float:
    """1 - cosine distance spans [-1, 1]; scores are reported in [0, 1]."""
    if value is None:
        return 0.0
    return max(0.0, min(1.0, float(value)))


@dataclass(frozen=True)
class SimilarityResult:
    """
    One search hit. Not persisted.

    `similarity` is 1 - cosine distance clamped to [0, 1] for vector hits. Lexical fallback
    hits carry settings.FALLBACK_SIMILARITY with ranked=False; that value is
    a placeholder, not a score, and must not be compared with real ones.
    """

    content_class: ContentClass
    entity_id: int
    similarity: float
    ranked: bool = True
    fields: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_row(cls, content_class: ContentClass, row: Dict[str, Any]) -> "SimilarityResult":
        data = dict(row)
        entity_id = data.pop("id")
        similarity = data.pop("similarity", None)
        return cls(
            content_class=content_class,
            entity_id=int(entity_id),
            similarity=clamp_similarity(similarity),
            ranked=True,
            fields=data,
        )

    @classmethod
    def unranked(cls, content_class: ContentClass, row: Dict[str, Any]) -> "SimilarityResult":
        data = dict(row)
        entity_id = data.pop("id")
        data.pop("similarity", None)
        return cls(
            content_class=content_class,
            entity_id=int(entity_id),
            similarity=settings.FALLBACK_SIMILARITY,
            ranked=False,
            fields=data,
        )

    def get(self, key: str, default: Any = None) -> Any:
        return self.fields.get(key, default)

    @property
    def source_label(self) -> Optional[str]:
        """File name for chunks, thread title otherwise."""
        return self.fields.get("file_name") or self.fields.get("thread_title") or self.fields.get("title")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "content_class": self.content_class.value,
            "id": self.entity_id,
            "similarity": self.similarity,
            "ranked": self.ranked,
            **self.fields,
        }
