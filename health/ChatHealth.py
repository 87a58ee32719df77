# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-27
# Description: ChatHealth
# -----------------------------------------------------------------------------
import asyncio
import logging
import time
from typing import Optional

from chat.OpenAIChat import OpenAIChat
from utility.logging_utils import get_logger


class ChatHealth:
    """
    Smoke test for the generation provider: one short completion must come
    back with non-empty text.
    """

    def __init__(self, chat_client: OpenAIChat, logger: Optional[logging.Logger] = None):
        self.chat_client = chat_client
        self.logger = logger or get_logger(__name__)

    def get_service_info(self) -> dict:
        cfg = self.chat_client.cfg
        key = getattr(cfg, "openai_api_key", "") or ""
        info = {
            "provider": "OpenAI",
            "endpoint": getattr(cfg, "openai_base_url", "") or "https://api.openai.com/v1",
            "model": self.chat_client.model,
            "api_key_prefix": f"{key[:4]}..." if key else None,
        }
        self.logger.info("Service info: %s", info)
        return info

    async def run(self) -> bool:
        if not self.chat_client.is_configured:
            self.logger.warning("Chat healthcheck SKIPPED: provider not configured.")
            return False

        self.logger.info("Starting chat healthcheck with model: %s", self.chat_client.model)
        start = time.time()

        result = await self.chat_client.try_generate(
            "Say OK if you can read this.",
            system_text="You are a model probe. Reply briefly to confirm connectivity.",
            max_tokens=10,
        )
        elapsed_ms = (time.time() - start) * 1000.0

        if not result.ok:
            self.logger.error("Chat healthcheck FAILED after %.1f ms: %s", elapsed_ms, result.error)
            return False

        self.logger.info("Chat call succeeded in %.1f ms. Response: %r", elapsed_ms, result.value.strip())
        self.logger.info("Chat healthcheck PASSED.")
        return True


if __name__ == "__main__":
    from config.Config import Config

    ch = ChatHealth(OpenAIChat(cfg=Config.from_env(), max_attempts=1))

    for k, v in ch.get_service_info().items():
        print(f"{k}: {v}")

    ok = asyncio.run(ch.run())
    print(f"Chat healthcheck: {'PASS' if ok else 'FAIL'}")
