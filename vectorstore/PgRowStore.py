# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-20
# Description: PgRowStore
# -----------------------------------------------------------------------------
import asyncio
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import asyncpg

import settings
from config.Config import Config
from utility.logging_utils import get_class_logger
from vectorstore.MPRowStore import MPRowStore


def _affected_rows(status: str) -> int:
    """'UPDATE 3' -> 3, 'INSERT 0 1' -> 1, 'CREATE TABLE' -> 0."""
    last = (status or "").rsplit(" ", 1)[-1]
    return int(last) if last.isdigit() else 0


@dataclass
class PgRowStore(MPRowStore):
    """
    asyncpg-backed row store for Postgres + pgvector.

    The pool is created lazily on first use. jsonb values are exchanged as
    Python dicts/lists; vector values are sent as text literals and cast in
    SQL ($n::text::vector), so no pgvector client codec is needed.
    """

    cfg: Config
    min_size: int = settings.DB_POOL_MIN_SIZE
    max_size: int = settings.DB_POOL_MAX_SIZE
    command_timeout: float = settings.DB_COMMAND_TIMEOUT
    logger: Any = None
    pool: Optional[asyncpg.Pool] = field(default=None, init=False)

    def __post_init__(self) -> None:
        self.logger = self.logger or get_class_logger(self.__class__)
        self.cfg.validate("database_url")
        self._pool_lock = asyncio.Lock()

    @staticmethod
    async def _init_connection(conn: asyncpg.Connection) -> None:
        await conn.set_type_codec(
            "jsonb",
            encoder=json.dumps,
            decoder=json.loads,
            schema="pg_catalog",
        )

    async def connect(self) -> asyncpg.Pool:
        async with self._pool_lock:
            if self.pool is None:
                self.logger.info(
                    "Creating Postgres pool (min=%d, max=%d)", self.min_size, self.max_size
                )
                self.pool = await asyncpg.create_pool(
                    dsn=self.cfg.database_url,
                    min_size=self.min_size,
                    max_size=self.max_size,
                    command_timeout=self.command_timeout,
                    init=self._init_connection,
                )
        return self.pool

    async def test_connection(self) -> bool:
        """
        Simple health check: can we reach Postgres at all?
        """
        try:
            rows = await self.fetch("SELECT 1 AS ok")
            return bool(rows) and rows[0].get("ok") == 1
        except Exception as e:
            self.logger.error("Postgres connection failed: %s", e)
            return False

    async def fetch(self, sql: str, *params: Any) -> List[Dict[str, Any]]:
        pool = self.pool or await self.connect()
        async with pool.acquire() as conn:
            rows = await conn.fetch(sql, *params)
        return [dict(r) for r in rows]

    async def execute(self, sql: str, *params: Any) -> int:
        pool = self.pool or await self.connect()
        async with pool.acquire() as conn:
            status = await conn.execute(sql, *params)
        self.logger.debug("execute -> %s", status)
        return _affected_rows(status)

    async def close(self) -> None:
        if self.pool is not None:
            await self.pool.close()
            self.pool = None
            self.logger.info("Postgres pool closed")
