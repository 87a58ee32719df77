# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-16
# Description: MPEmbedder
# -----------------------------------------------------------------------------
import asyncio
import logging
from typing import Any, List, Optional

import numpy as np
from openai import AsyncAzureOpenAI, AsyncOpenAI

import settings
from config.Config import Config
from utility.ProviderResult import ProviderResult, capture
from utility.logging_utils import get_class_logger


class MPEmbedder:
    """
    Adapter over the embedding provider.

    Never raises to the caller: provider errors, timeouts and malformed
    responses come back as a FAILED ProviderResult (or None from embed()).
    When no credentials are configured there is no client and every call
    returns immediately without touching the network.
    """

    def __init__(
            self,
            cfg: Optional[Config] = None,
            *,
            client: Any = None,
            model: Optional[str] = None,
            dimension: int = settings.EMBEDDING_DIMENSION,
            normalize: bool = True,
            timeout: float = settings.PROVIDER_TIMEOUT_SECONDS,
            max_attempts: int = settings.PROVIDER_MAX_ATTEMPTS,
            retry_delay: float = 0.8,
            logger: logging.Logger | None = None,
    ):
        self.cfg = cfg
        self.dimension = dimension
        self.normalize = normalize
        self.timeout = timeout
        self.max_attempts = max(1, max_attempts)
        self.retry_delay = retry_delay
        self.logger = logger or get_class_logger(self.__class__)

        self.client = client
        self.model = model or settings.DEFAULT_EMBED_MODEL
        if self.client is None and cfg is not None:
            self._init_client(cfg, model)

        if self.client is None:
            self.logger.debug("Embedding provider not configured; semantic features degrade to fallback")
        else:
            self.logger.info("Embedder initialised (model=%s, dim=%d)", self.model, self.dimension)

    def _init_client(self, cfg: Config, model: Optional[str]) -> None:
        """
        Azure OpenAI when its key/endpoint/deployment are all present,
        otherwise OpenAI direct; leaves client as None when neither is set.
        """
        if cfg.azure_embeddings_configured:
            self.client = AsyncAzureOpenAI(
                api_key=cfg.openai_azure_api_key,
                azure_endpoint=cfg.openai_azure_endpoint.rstrip("/"),
                api_version=cfg.openai_azure_api_version or "2024-10-21",
            )
            # Azure routes by deployment name
            self.model = model or cfg.openai_azure_embed_deployment
            return

        if cfg.openai_api_key:
            self.client = AsyncOpenAI(
                api_key=cfg.openai_api_key,
                base_url=cfg.openai_base_url or None,
            )
            self.model = model or cfg.openai_embed_model or settings.DEFAULT_EMBED_MODEL

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    async def _request(self, text: str) -> List[float]:
        resp = await self.client.embeddings.create(
            model=self.model,
            input=[text],
            dimensions=self.dimension,
        )

        data = getattr(resp, "data", None)
        if not data or not getattr(data[0], "embedding", None):
            raise ValueError("embedding response contained no vector")

        arr = np.asarray(data[0].embedding, dtype=np.float32)
        if arr.shape != (self.dimension,):
            raise ValueError(f"expected {self.dimension} dimensions, got {arr.shape[0] if arr.ndim else 0}")
        if not np.all(np.isfinite(arr)):
            raise ValueError("embedding contains non-finite values")

        # Normalize vectors (cosine-friendly)
        if self.normalize:
            arr = arr / (np.linalg.norm(arr) + 1e-12)

        return arr.tolist()

    async def try_embed(self, text: str) -> ProviderResult[List[float]]:
        if self.client is None:
            return ProviderResult.not_configured()

        clean = (text or "").strip()
        if not clean:
            return ProviderResult.failure("empty text")

        delay = self.retry_delay
        result: ProviderResult[List[float]] = ProviderResult.failure("not attempted")
        for attempt in range(1, self.max_attempts + 1):
            result = await capture(self._request(clean), timeout=self.timeout)
            if result.ok:
                return result

            self.logger.warning(
                "Embedding call failed (attempt %d/%d): %s", attempt, self.max_attempts, result.error
            )
            if attempt < self.max_attempts:
                await asyncio.sleep(delay)
                delay *= 1.7  # backoff

        self.logger.error("Embedding failed after %d attempt(s): %s", self.max_attempts, result.error)
        return result

    async def embed(self, text: str) -> Optional[List[float]]:
        """Vector of `dimension` floats, or None when unavailable."""
        result = await self.try_embed(text)
        return result.value if result.ok else None
