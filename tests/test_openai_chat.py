# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-02
# Description: test_openai_chat.py
# -----------------------------------------------------------------------------
import os
from types import SimpleNamespace

import pytest

from chat.OpenAIChat import OpenAIChat
from config.Config import Config
from utility.ProviderResult import ProviderStatus


class _FakeCompletions:
    def __init__(self, content="OK", exc=None):
        self.content = content
        self.exc = exc
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.exc is not None:
            raise self.exc
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)], usage=None, model="fake")


def _chat(**kwargs):
    completions = _FakeCompletions(**kwargs)
    client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return OpenAIChat(client=client, model="gpt-test", max_attempts=1), completions


@pytest.mark.asyncio
async def test_try_generate_sends_system_then_user():
    chat, completions = _chat(content="Answer text")

    result = await chat.try_generate("the question", system_text="be brief")

    assert result.ok
    assert result.value == "Answer text"
    messages = completions.calls[0]["messages"]
    assert [m["role"] for m in messages] == ["system", "user"]
    assert messages[1]["content"] == "the question"
    assert completions.calls[0]["model"] == "gpt-test"


@pytest.mark.asyncio
async def test_empty_content_is_a_failure():
    chat, _ = _chat(content="   ")
    result = await chat.try_generate("q")
    assert result.status is ProviderStatus.FAILED


@pytest.mark.asyncio
async def test_provider_exception_is_captured():
    chat, _ = _chat(exc=ConnectionError("network down"))
    assert await chat.generate("q") is None


@pytest.mark.asyncio
async def test_unconfigured_chat():
    chat = OpenAIChat(cfg=Config())
    assert not chat.is_configured
    result = await chat.try_generate("q")
    assert result.unconfigured


@pytest.mark.asyncio
async def test_chat_rejects_empty_messages():
    chat, _ = _chat()
    with pytest.raises(ValueError):
        await chat.chat([])


@pytest.mark.integration
@pytest.mark.asyncio
async def test_live_openai_chat():
    if not os.getenv("OPENAI_API_KEY"):
        pytest.skip("OPENAI_API_KEY not set")

    chat = OpenAIChat(cfg=Config.from_env())
    text = await chat.generate("Reply with the single word OK.", max_tokens=5)
    assert text and text.strip()
