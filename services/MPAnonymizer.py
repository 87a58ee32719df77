# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-25
# Description: MPAnonymizer.py
# -----------------------------------------------------------------------------
import logging

from chat.OpenAIChat import OpenAIChat
from utility.logging_utils import get_class_logger


class MPAnonymizer:
    """
    Best-effort scrubbing of identifying details from anonymous posts.

    Fails open: with no generation provider, or when the call fails, the
    original text is returned unchanged.
    """

    redaction_prompt: str = (
        "You are a privacy filter for an anonymous post on a professional forum.\n"
        "Replace identifying details with these placeholders:\n"
        "- company names -> [Company]\n"
        "- project names or codes -> [Project]\n"
        "- person names -> [Person]\n"
        "- room numbers or building identifiers -> [Location]\n"
        "- email addresses -> [email]\n"
        "- phone numbers -> [phone]\n"
        "Keep all technical content intact. Return ONLY the sanitized text.\n"
    )

    def __init__(self, *, chat_client: OpenAIChat, logger: logging.Logger | None = None) -> None:
        self.chat_client = chat_client
        self.logger = logger or get_class_logger(self.__class__)

    async def sanitize(self, text: str) -> str:
        if not self.chat_client.is_configured or not (text or "").strip():
            return text

        prompt = f"TEXT TO SANITIZE:\n{text}"
        result = await self.chat_client.try_generate(prompt, system_text=self.redaction_prompt, temperature=0.0)
        if not result.ok:
            self.logger.warning("Anonymization failed, keeping original text: %s", result.error)
            return text

        return result.value
