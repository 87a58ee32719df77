# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-28
# Description: TestRunner
# -----------------------------------------------------------------------------

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Dict, Optional

from chat.OpenAIChat import OpenAIChat
from embedding.MPEmbedder import MPEmbedder
from health.ChatHealth import ChatHealth
from health.EmbeddingHealth import EmbeddingHealth
from health.StoreHealth import StoreHealth
from utility.logging_utils import get_class_logger
from vectorstore.MPRowStore import MPRowStore


class TestRunner:
    """
    Orchestrates all smoke tests and reports a consolidated result.

    Tests included:
      - StoreHealth     (Postgres reachable, pgvector installed)
      - EmbeddingHealth (768-dimension embedding)
      - ChatHealth      (non-empty completion)
    """

    __test__ = False  # not a pytest class

    def __init__(
        self,
        *,
        embedder: MPEmbedder,
        chat_client: OpenAIChat,
        store: Optional[MPRowStore],
        logger: Optional[logging.Logger] = None,
    ):
        self.logger = logger or get_class_logger(self.__class__)

        self.store_health = StoreHealth(store)
        self.embedding_health = EmbeddingHealth(embedder)
        self.chat_health = ChatHealth(chat_client)

    # -------------------------------------------------------------------------
    async def run_all(self) -> Dict[str, bool]:
        """
        Run all configured smoke tests.

        :return: Dict mapping test names to True/False.
        """
        self.logger.info("Starting smoke test suite")

        checks: Dict[str, Callable[[], Awaitable[bool]]] = {
            "store_health": self.store_health.run,
            "embedding_health": self.embedding_health.run,
            "chat_health": self.chat_health.run,
        }

        results: Dict[str, bool] = {}
        for name, check in checks.items():
            try:
                ok = bool(await check())
            except Exception as e:
                self.logger.exception("%s raised an exception: %s", name, e)
                ok = False
            results[name] = ok
            self._log_result(name, ok)

        self._log_summary(results)
        return results

    # -------------------------------------------------------------------------
    def _log_result(self, name: str, ok: bool) -> None:
        if ok:
            self.logger.info("%s: PASS", name)
        else:
            self.logger.error("%s: FAIL", name)

    def _log_summary(self, results: Dict[str, bool]) -> None:
        total = len(results)
        passed = sum(1 for v in results.values() if v)
        failed = total - passed

        self.logger.info("Smoke test summary: %d total, %d passed, %d failed", total, passed, failed)


if __name__ == "__main__":
    from config.Config import Config
    from vectorstore.PgRowStore import PgRowStore

    async def _main() -> Dict[str, bool]:
        cfg = Config.from_env()
        store = PgRowStore(cfg) if cfg.database_url else None
        try:
            runner = TestRunner(
                embedder=MPEmbedder(cfg, max_attempts=1),
                chat_client=OpenAIChat(cfg=cfg, max_attempts=1),
                store=store,
            )
            return await runner.run_all()
        finally:
            if store is not None:
                await store.close()

    results = asyncio.run(_main())

    print("\n=== Smoke Test Results ===")
    for name, ok in results.items():
        print(f"{name}: {'PASS' if ok else 'FAIL'}")

    overall_ok = all(results.values())
    print(f"\nOverall smoke test result: {'PASS' if overall_ok else 'FAIL'}")
