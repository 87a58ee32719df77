# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-29
# Description: AppContainer.py
# -----------------------------------------------------------------------------
from typing import Optional

import settings
from chat.OpenAIChat import OpenAIChat
from chunking.LangDetectDetector import LangDetectDetector
from chunking.MPChunker import MPChunker
from config.Config import Config
from embedding.MPEmbedder import MPEmbedder
from health.TestRunner import TestRunner
from services.MPAnonymizer import MPAnonymizer
from services.MPBotService import MPBotService
from services.MPDuplicateDetector import MPDuplicateDetector
from services.MPIndexService import MPIndexService
from services.MPSearchService import MPSearchService
from services.MPStatsService import MPStatsService
from utility.logging_utils import get_class_logger
from vectorstore.MPForumRepository import MPForumRepository
from vectorstore.MPRowStore import MPRowStore
from vectorstore.PgRowStore import PgRowStore


class AppContainer:
    """
    Owns object instantiation and wiring for the knowledge engine.

    Every provider client is built once here and handed to the services
    that need it; nothing is module-global. Pass `store`, `repository`,
    `embedder` or `chat_client` to substitute collaborators (tests, scripts).
    """

    def __init__(
        self,
        cfg: Config,
        *,
        store: Optional[MPRowStore] = None,
        repository: Optional[MPForumRepository] = None,
        embedder: Optional[MPEmbedder] = None,
        chat_client: Optional[OpenAIChat] = None,
    ) -> None:
        self.cfg = cfg
        self.logger = get_class_logger(self.__class__)

        # Core infrastructure
        self.store = store if store is not None else PgRowStore(cfg=cfg)
        self.repository = repository if repository is not None else MPForumRepository(self.store)
        self.embedder = embedder if embedder is not None else MPEmbedder(cfg)
        self.chat_client = chat_client if chat_client is not None else OpenAIChat(cfg=cfg)

        # Ingestion
        self.lang_detector = LangDetectDetector()
        self.chunker = MPChunker(lang_detector=self.lang_detector)

        self.search_service = MPSearchService(
            repository=self.repository,
            embedder=self.embedder,
        )

        self.index_service = MPIndexService(
            repository=self.repository,
            embedder=self.embedder,
            chunker=self.chunker,
            concurrency=settings.INDEX_CONCURRENCY,
        )

        self.bot_service = MPBotService(
            repository=self.repository,
            search_service=self.search_service,
            index_service=self.index_service,
            chat_client=self.chat_client,
        )

        self.anonymizer = MPAnonymizer(chat_client=self.chat_client)
        self.duplicate_detector = MPDuplicateDetector(search_service=self.search_service)
        self.stats_service = MPStatsService(repository=self.repository)

        # Smoke tests / health
        self.test_runner = TestRunner(
            embedder=self.embedder,
            chat_client=self.chat_client,
            store=self.store,
        )

        self.logger.info("AppContainer wired: %s", cfg.summary())

    @classmethod
    def from_config(cls, cfg: Optional[Config] = None) -> "AppContainer":
        return cls(cfg or Config.from_env())

    async def ensure_schema(self) -> None:
        await self.repository.ensure_schema()

    async def close(self) -> None:
        await self.store.close()
