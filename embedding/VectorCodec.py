# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-15
# Description: VectorCodec
# -----------------------------------------------------------------------------
import math
from typing import Iterable, List, Optional

import numpy as np


class VectorCodec:
    """
    Converts embedding vectors to the pgvector text literal '[v1,v2,...]'
    and back.

    Values are written positionally (never in exponent form) using the
    shortest repr that round-trips, so identical input always produces
    byte-identical output.
    """

    @staticmethod
    def encode(vector: Iterable[float], *, expected_dim: Optional[int] = None) -> str:
        values = [float(v) for v in vector]
        if not values:
            raise ValueError("Cannot encode an empty vector")
        if expected_dim is not None and len(values) != expected_dim:
            raise ValueError(f"Vector has {len(values)} dimensions, expected {expected_dim}")

        parts: List[str] = []
        for i, v in enumerate(values):
            if not math.isfinite(v):
                raise ValueError(f"Vector value at index {i} is not finite: {v!r}")
            parts.append(np.format_float_positional(v, unique=True, trim="-"))

        return "[" + ",".join(parts) + "]"

    @staticmethod
    def decode(literal: str) -> List[float]:
        text = (literal or "").strip()
        if not (text.startswith("[") and text.endswith("]")):
            raise ValueError(f"Not a vector literal: {literal[:40]!r}")

        body = text[1:-1].strip()
        if not body:
            return []
        return [float(p) for p in body.split(",")]
