# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-02
# Description: test_embedder.py
# -----------------------------------------------------------------------------
import asyncio
from types import SimpleNamespace

import numpy as np
import pytest

from config.Config import Config
from embedding.MPEmbedder import MPEmbedder
from utility.ProviderResult import ProviderStatus


class _FakeEmbeddings:
    def __init__(self, vector=None, exc=None, delay=0.0):
        self.vector = vector
        self.exc = exc
        self.delay = delay
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.exc is not None:
            raise self.exc
        return SimpleNamespace(data=[SimpleNamespace(embedding=self.vector)])


def _client(**kwargs):
    embeddings = _FakeEmbeddings(**kwargs)
    return SimpleNamespace(embeddings=embeddings), embeddings


@pytest.mark.asyncio
async def test_unconfigured_returns_none_without_calls():
    embedder = MPEmbedder(Config())

    assert not embedder.is_configured
    result = await embedder.try_embed("anything at all")
    assert result.status is ProviderStatus.UNCONFIGURED
    assert await embedder.embed("anything at all") is None


@pytest.mark.asyncio
async def test_success_returns_normalised_768_vector():
    client, embeddings = _client(vector=[2.0] * 768)
    embedder = MPEmbedder(client=client, max_attempts=1)

    vec = await embedder.embed("earthing for a data centre")

    assert len(vec) == 768
    assert np.isclose(np.linalg.norm(vec), 1.0, atol=1e-5)
    assert embeddings.calls[0]["dimensions"] == 768
    assert embeddings.calls[0]["input"] == ["earthing for a data centre"]


@pytest.mark.asyncio
async def test_wrong_dimension_is_a_failure():
    client, _ = _client(vector=[0.1] * 1536)
    embedder = MPEmbedder(client=client, max_attempts=1)

    result = await embedder.try_embed("text")
    assert not result.ok
    assert "768" in result.error


@pytest.mark.asyncio
async def test_provider_error_becomes_none_after_retries():
    client, embeddings = _client(exc=RuntimeError("quota exceeded"))
    embedder = MPEmbedder(client=client, max_attempts=2, retry_delay=0.0)

    assert await embedder.embed("text") is None
    assert len(embeddings.calls) == 2


@pytest.mark.asyncio
async def test_timeout_is_a_failure():
    client, _ = _client(vector=[0.1] * 768, delay=1.0)
    embedder = MPEmbedder(client=client, timeout=0.01, max_attempts=1)

    result = await embedder.try_embed("slow text")
    assert result.status is ProviderStatus.FAILED
    assert "timed out" in result.error


@pytest.mark.asyncio
async def test_blank_text_does_not_call_provider():
    client, embeddings = _client(vector=[0.1] * 768)
    embedder = MPEmbedder(client=client, max_attempts=1)

    assert await embedder.embed("   ") is None
    assert embeddings.calls == []


def test_azure_is_preferred_when_fully_configured():
    cfg = Config(
        openai_api_key="sk-direct",
        openai_azure_api_key="azure-key",
        openai_azure_endpoint="https://example.openai.azure.com/",
        openai_azure_embed_deployment="embed-768",
    )
    embedder = MPEmbedder(cfg)

    assert embedder.is_configured
    assert embedder.model == "embed-768"
    assert type(embedder.client).__name__ == "AsyncAzureOpenAI"
