# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-27
# Description: EmbeddingHealth
# -----------------------------------------------------------------------------
import asyncio
import logging
import time
from typing import Optional

import settings
from embedding.MPEmbedder import MPEmbedder
from utility.logging_utils import get_logger


class EmbeddingHealth:
    """
    Smoke test for the embedding provider.

    Verifies:
      - The provider is configured
      - The embedding call completes successfully
      - The vector has the dimension the vector columns expect
    """

    def __init__(
        self,
        embedder: MPEmbedder,
        expected_dim: int = settings.EMBEDDING_DIMENSION,
        logger: Optional[logging.Logger] = None,
    ):
        self.embedder = embedder
        self.expected_dim = expected_dim
        self.logger = logger or get_logger(__name__)

    async def run(self) -> bool:
        if not self.embedder.is_configured:
            self.logger.warning("Embedding healthcheck SKIPPED: provider not configured.")
            return False

        self.logger.info("Running embedding healthcheck using model: %s", self.embedder.model)

        start = time.time()
        result = await self.embedder.try_embed("Knowledge engine embedding healthcheck")
        elapsed_ms = (time.time() - start) * 1000.0

        if not result.ok:
            self.logger.error("Embedding healthcheck FAILED after %.1f ms: %s", elapsed_ms, result.error)
            return False

        dim = len(result.value)
        self.logger.info("Embedding call succeeded in %.1f ms. Returned dimension: %d", elapsed_ms, dim)

        if dim != self.expected_dim:
            self.logger.warning("Dimension mismatch: expected %d, got %d.", self.expected_dim, dim)
            return False

        self.logger.info("Embedding healthcheck PASSED.")
        return True


if __name__ == "__main__":
    from config.Config import Config

    cfg = Config.from_env()
    eh = EmbeddingHealth(MPEmbedder(cfg, max_attempts=1))
    ok = asyncio.run(eh.run())

    eh.logger.info("EmbeddingHealth result: %s", "PASS" if ok else "FAIL")
