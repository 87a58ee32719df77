# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-24
# Updated: 2026-10-07
# Description: MPBotService.py
# -----------------------------------------------------------------------------
import logging
from typing import Any, Dict, List, Optional, Sequence

import settings
from chat.OpenAIChat import OpenAIChat
from model.BotSources import BotSources
from model.SimilarityResult import SimilarityResult
from services.MPIndexService import MPIndexService
from services.MPSearchService import MPSearchService
from utility.ProviderResult import capture
from utility.logging_utils import get_class_logger
from vectorstore.MPForumRepository import MPForumRepository


def _safe_str(x: Any) -> str:
    return "" if x is None else str(x)


class MPBotService:
    """
    Evidence-gated generation over the forum:
        - auto_reply: answers a thread that has no replies yet, only when
          the knowledge base or resolved threads provide evidence
        - synthesize_solution: summarises a thread's discussion into its
          verified solution and re-indexes the thread

    Both return None, writing nothing, when a precondition fails or the
    generation call fails. Writes happen only after a successful
    generation.
    """

    reply_system_prompt: str = (
        "You are AtelierBot, the assistant on an engineering discussion forum.\n"
        "Answer only from the supplied context and never invent facts.\n"
    )

    synthesis_system_prompt: str = (
        "You are AtelierBot. You write short, factual summaries of resolved engineering discussions.\n"
    )

    def __init__(
        self,
        *,
        repository: MPForumRepository,
        search_service: MPSearchService,
        index_service: MPIndexService,
        chat_client: OpenAIChat,
        bot_email: str = settings.BOT_EMAIL,
        bot_name: str = settings.BOT_NAME,
        logger: logging.Logger | None = None,
    ) -> None:
        self.repository = repository
        self.search_service = search_service
        self.index_service = index_service
        self.chat_client = chat_client
        self.bot_email = bot_email
        self.bot_name = bot_name
        self.logger = logger or get_class_logger(self.__class__)

    # ------------------------------------------------------------------
    # Auto-reply
    # ------------------------------------------------------------------
    async def auto_reply(self, thread_id: int) -> Optional[Dict[str, Any]]:
        """
        Post a grounded bot answer on a thread with zero replies.

        Returns the inserted post row, or None.
        """
        if not self.chat_client.is_configured:
            self.logger.debug("auto_reply(%s): generation unconfigured", thread_id)
            return None

        loaded = await capture(self.repository.get_thread(thread_id))
        if not loaded.ok:
            self.logger.error("auto_reply(%s): load failed: %s", thread_id, loaded.error)
            return None
        thread = loaded.value
        if thread is None:
            self.logger.info("auto_reply(%s): thread not found", thread_id)
            return None

        posts = await capture(self.repository.count_posts(thread_id))
        if not posts.ok:
            self.logger.error("auto_reply(%s): post count failed: %s", thread_id, posts.error)
            return None
        if posts.value > 0:
            self.logger.info("auto_reply(%s): thread already has %d reply(ies), skipped", thread_id, posts.value)
            return None

        query_text = f"{_safe_str(thread.get('title'))} {_safe_str(thread.get('body'))}".strip()
        knowledge = await self.search_service.search_knowledge_base(
            query_text, limit=settings.RETRIEVAL_DEFAULTS["knowledge_results"]
        )
        similar = await self.search_service.find_similar_threads(
            query_text, limit=settings.RETRIEVAL_DEFAULTS["similar_threads"], exclude_id=thread_id
        )
        verified = [t for t in similar if t.get("status") == "resolved"]

        if not knowledge and not verified:
            self.logger.info("auto_reply(%s): no supporting evidence, no reply", thread_id)
            return None

        prompt = self._build_reply_prompt(thread, knowledge, verified)
        generated = await self.chat_client.try_generate(prompt, system_text=self.reply_system_prompt)
        if not generated.ok:
            self.logger.warning("auto_reply(%s): generation failed: %s", thread_id, generated.error)
            return None

        sources = BotSources.from_evidence(knowledge, verified)

        written = await capture(self._write_reply(thread_id, generated.value, sources))
        if not written.ok:
            self.logger.error("auto_reply(%s): write failed: %s", thread_id, written.error)
            return None
        if written.value is None:
            self.logger.info("auto_reply(%s): a reply arrived first, bot reply discarded", thread_id)
            return None

        self.logger.info(
            "Bot replied to thread #%s (knowledge=%d verified_threads=%d)",
            thread_id,
            len(knowledge),
            len(verified),
        )
        return written.value

    async def _write_reply(self, thread_id: int, body: str, sources: BotSources) -> Optional[Dict[str, Any]]:
        bot_id = await self.repository.get_or_create_user(self.bot_email, self.bot_name)
        return await self.repository.insert_bot_reply(thread_id, bot_id, body, sources.model_dump())

    def _build_reply_prompt(
        self,
        thread: Dict[str, Any],
        knowledge: Sequence[SimilarityResult],
        verified: Sequence[SimilarityResult],
    ) -> str:
        parts: List[str] = []

        if knowledge:
            parts.append("KNOWLEDGE BASE EXCERPTS:")
            for i, k in enumerate(knowledge, start=1):
                label = k.source_label or "Unknown source"
                parts.append(f"[Source {i}: {label}]\n{_safe_str(k.get('chunk_text'))}")

        if verified:
            parts.append("RESOLVED DISCUSSIONS:")
            for t in verified:
                parts.append(f'[Thread: "{_safe_str(t.get("title"))}" ({_safe_str(t.get("service_tag"))})]')

        context = "\n\n".join(parts)

        return (
            f"CATEGORY: {_safe_str(thread.get('service_tag'))}\n"
            f"TITLE: {_safe_str(thread.get('title'))}\n"
            f"QUESTION:\n{_safe_str(thread.get('body'))}\n\n"
            f"CONTEXT:\n{context}\n\n"
            f"INSTRUCTIONS:\n"
            f"- Use only the context above; do not make up facts.\n"
            f"- Cite what you use, e.g. [Source 1: <name>] or the thread title.\n"
            f"- If the context does not fully answer the question, say what is known and what is uncertain.\n"
            f"- Keep the answer concise and technically precise.\n"
        )

    # ------------------------------------------------------------------
    # Solution synthesis
    # ------------------------------------------------------------------
    async def synthesize_solution(self, thread_id: int) -> Optional[str]:
        """
        Summarise the thread's replies into its verified solution, mark it
        resolved and re-embed it. Returns the summary, or None.
        """
        if not self.chat_client.is_configured:
            self.logger.debug("synthesize_solution(%s): generation unconfigured", thread_id)
            return None

        loaded = await capture(self.repository.get_thread(thread_id))
        if not loaded.ok:
            self.logger.error("synthesize_solution(%s): load failed: %s", thread_id, loaded.error)
            return None
        thread = loaded.value
        if thread is None:
            self.logger.info("synthesize_solution(%s): thread not found", thread_id)
            return None

        listed = await capture(self.repository.list_thread_posts(thread_id))
        if not listed.ok:
            self.logger.error("synthesize_solution(%s): post load failed: %s", thread_id, listed.error)
            return None
        posts = listed.value
        if not posts:
            self.logger.info("synthesize_solution(%s): no replies to summarise", thread_id)
            return None

        prompt = self._build_synthesis_prompt(thread, posts)
        generated = await self.chat_client.try_generate(prompt, system_text=self.synthesis_system_prompt)
        if not generated.ok:
            self.logger.warning("synthesize_solution(%s): generation failed: %s", thread_id, generated.error)
            return None

        summary = generated.value
        saved = await capture(self.repository.save_verified_solution(thread_id, summary))
        if not saved.ok:
            self.logger.error("synthesize_solution(%s): save failed: %s", thread_id, saved.error)
            return None

        # thread text now includes the solution
        reindexed = await self.index_service.index_thread(thread_id)
        if not reindexed:
            self.logger.warning("synthesize_solution(%s): re-embedding did not complete", thread_id)

        self.logger.info("Verified solution saved for thread #%s (%d posts)", thread_id, len(posts))
        return summary

    def _build_synthesis_prompt(self, thread: Dict[str, Any], posts: Sequence[Dict[str, Any]]) -> str:
        entries: List[str] = []
        for p in posts:
            if p.get("is_bot_reply"):
                who = f"[BOT] {self.bot_name}"
            else:
                who = f"{_safe_str(p.get('author_name')) or 'Member'} ({_safe_str(p.get('author_level'))})"
            helpful = int(p.get("helpful_count") or 0)
            votes = f" [{helpful} upvotes]" if helpful > 0 else ""
            entries.append(f"{who}{votes}:\n{_safe_str(p.get('body'))}")

        conversation = "\n\n---\n\n".join(entries)

        return (
            f"CATEGORY: {_safe_str(thread.get('service_tag'))}\n"
            f"TITLE: {_safe_str(thread.get('title'))}\n"
            f"ORIGINAL QUESTION:\n{_safe_str(thread.get('body'))}\n\n"
            f"DISCUSSION ({len(posts)} replies, most upvoted first):\n{conversation}\n\n"
            f"INSTRUCTIONS:\n"
            f"- Write a verified solution of 3-5 bullet points.\n"
            f"- State the final conclusion and the key values or parameters agreed on.\n"
            f"- Reference any standards or documents the discussion cites.\n"
            f"- Include only what was discussed.\n"
        )
