# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-27
# Description: StoreHealth
# -----------------------------------------------------------------------------
import asyncio
import logging
from typing import Optional

from utility.logging_utils import get_logger
from vectorstore.MPRowStore import MPRowStore


class StoreHealth:
    """
    Healthcheck for the Postgres row store.

    - the store answers a trivial query
    - the pgvector extension is installed
    """

    def __init__(self, store: Optional[MPRowStore], logger: Optional[logging.Logger] = None):
        self.store = store
        self.logger = logger or get_logger(__name__)

    async def has_vector_extension(self) -> bool:
        rows = await self.store.fetch("SELECT 1 AS ok FROM pg_extension WHERE extname = 'vector'")
        return bool(rows)

    async def run(self) -> bool:
        if self.store is None:
            self.logger.warning("Store healthcheck SKIPPED: no database configured.")
            return False

        if not await self.store.test_connection():
            self.logger.error("Store healthcheck FAILED: connection test did not pass.")
            return False

        try:
            has_vector = await self.has_vector_extension()
        except Exception as e:
            self.logger.exception("Store healthcheck FAILED while checking extensions: %s", e)
            return False

        if not has_vector:
            self.logger.error("Store healthcheck FAILED: pgvector extension 'vector' is not installed.")
            return False

        self.logger.info("Store healthcheck PASSED.")
        return True


if __name__ == "__main__":
    from config.Config import Config
    from vectorstore.PgRowStore import PgRowStore

    async def _main() -> bool:
        store = PgRowStore(Config.from_env())
        try:
            return await StoreHealth(store).run()
        finally:
            await store.close()

    ok = asyncio.run(_main())
    print(f"Store healthcheck: {'PASS' if ok else 'FAIL'}")
