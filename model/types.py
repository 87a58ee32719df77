# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-26
# Description: types.py
# -----------------------------------------------------------------------------
from dataclasses import dataclass
from typing import List, Optional, TypedDict


@dataclass(frozen=True)
class AttachmentEntry:
    attachment_id: int
    chunk_count: int
    file_name: Optional[str] = None
    is_indexed: bool = False


class IndexStatsDict(TypedDict):
    threads_total: int
    threads_embedded: int
    posts_total: int
    posts_embedded: int
    knowledge_chunks: int
    attachments: List[AttachmentEntry]
