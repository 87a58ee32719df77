# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-17
# Description: OpenAIChat
# -----------------------------------------------------------------------------
import asyncio
from dataclasses import dataclass
from typing import Dict, Any, List, Optional

from openai import AsyncOpenAI

import settings
from utility.ProviderResult import ProviderResult, capture
from utility.logging_utils import get_class_logger

Message = Dict[str, str]  # {"role": "system"|"user"|"assistant", "content": "..."}


@dataclass
class OpenAIChat:
    """
        Async OpenAI chat wrapper used as the generation capability.

        Expected Config fields:
          cfg.openai_api_key: str (empty = generation disabled)
          cfg.openai_base_url: str (optional)
          cfg.openai_chat_model: str (optional, defaults to settings.DEFAULT_CHAT_MODEL)
    """

    cfg: Any = None
    client: Any = None
    model: Optional[str] = None
    timeout: float = settings.PROVIDER_TIMEOUT_SECONDS
    max_attempts: int = settings.PROVIDER_MAX_ATTEMPTS
    retry_delay: float = 0.8
    logger: Any = None

    def __post_init__(self) -> None:
        self.logger = self.logger or get_class_logger(self.__class__)
        self.max_attempts = max(1, self.max_attempts)

        self.model = (
            self.model
            or getattr(self.cfg, "openai_chat_model", None)
            or settings.DEFAULT_CHAT_MODEL
        )

        if self.client is None and getattr(self.cfg, "openai_api_key", None):
            self.client = AsyncOpenAI(
                api_key=self.cfg.openai_api_key,
                base_url=getattr(self.cfg, "openai_base_url", None) or None,
            )

        if self.client is None:
            self.logger.debug("Generation provider not configured; generation features disabled")
        else:
            self.logger.info("OpenAIChat initialised (model=%s)", self.model)

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    # Standard chat call
    async def chat(
            self,
            messages: List[Message],
            temperature: float = settings.GENERATION_DEFAULTS["temperature"],
            max_tokens: int = settings.GENERATION_DEFAULTS["max_tokens"],
            top_p: float = 1.0,
            extra_params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        if not messages:
            raise ValueError("messages must be non-empty.")
        if self.client is None:
            raise RuntimeError("OpenAIChat has no client configured")

        params: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "top_p": top_p,
        }
        if extra_params:
            params.update(extra_params)

        self.logger.debug(
            "Chat request: model=%s temp=%s max_tokens=%s top_p=%s",
            self.model, temperature, max_tokens, top_p
        )

        resp = await self.client.chat.completions.create(**params)
        self.logger.debug("Token usage: %r", getattr(resp, "usage", None))
        return resp

    async def _complete(self, messages: List[Message], **kwargs: Any) -> str:
        resp = await self.chat(messages, **kwargs)

        choices = getattr(resp, "choices", None)
        if not choices:
            raise ValueError("chat response contained no choices")

        content = (choices[0].message.content or "") if choices[0].message else ""
        if not content.strip():
            raise ValueError("chat response content is empty")
        return content

    async def try_generate(
            self,
            prompt: str,
            system_text: Optional[str] = None,
            **kwargs: Any,
    ) -> ProviderResult[str]:
        """
        One generation call (with retries) folded into a ProviderResult.
        """
        if self.client is None:
            return ProviderResult.not_configured()

        messages: List[Message] = []
        if system_text:
            messages.append({"role": "system", "content": system_text})
        messages.append({"role": "user", "content": prompt})

        delay = self.retry_delay
        result: ProviderResult[str] = ProviderResult.failure("not attempted")
        for attempt in range(1, self.max_attempts + 1):
            result = await capture(self._complete(messages, **kwargs), timeout=self.timeout)
            if result.ok:
                self.logger.info("Generation succeeded (model=%s, chars=%d)", self.model, len(result.value))
                return result

            self.logger.warning(
                "Generation call failed (attempt %d/%d): %s", attempt, self.max_attempts, result.error
            )
            if attempt < self.max_attempts:
                await asyncio.sleep(delay)
                delay *= 1.7

        self.logger.error("Generation failed after %d attempt(s): %s", self.max_attempts, result.error)
        return result

    async def generate(self, prompt: str, **kwargs: Any) -> Optional[str]:
        result = await self.try_generate(prompt, **kwargs)
        return result.value if result.ok else None
