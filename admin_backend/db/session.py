import asyncio
import logging
from typing import Any, Dict, List, Optional

import asyncpg

logger = logging.getLogger(__name__)


class DatabaseError(Exception):
    """Raised for connectivity problems and failed statements."""


_DB_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)


class Database:
    """Thin wrapper around a lazily created asyncpg pool."""

    def __init__(self, dsn: str, pool_size: int = 5) -> None:
        self._dsn = dsn
        self._pool_size = max(pool_size, 1)
        self._pool: Optional[asyncpg.pool.Pool] = None
        self._lock = asyncio.Lock()

    async def _get_pool(self) -> asyncpg.pool.Pool:
        if self._pool is not None:
            return self._pool
        async with self._lock:
            if self._pool is None:
                logger.info("Creating Postgres connection pool")
                try:
                    self._pool = await asyncpg.create_pool(dsn=self._dsn, min_size=1, max_size=self._pool_size)
                except _DB_ERRORS as e:
                    raise DatabaseError(f"Could not connect to database: {e}") from e
        return self._pool

    async def query(self, sql: str, *params: Any) -> List[Dict[str, Any]]:
        pool = await self._get_pool()
        try:
            async with pool.acquire() as conn:
                rows = await conn.fetch(sql, *params)
        except _DB_ERRORS as e:
            raise DatabaseError(str(e)) from e
        return [dict(r) for r in rows]

    async def init_tables(self) -> None:
        pool = await self._get_pool()
        try:
            async with pool.acquire() as conn:
                await conn.execute(
                    '''
                    CREATE TABLE IF NOT EXISTS messages (
                        id BIGSERIAL PRIMARY KEY,
                        user_id TEXT NOT NULL,
                        text TEXT,
                        status TEXT NOT NULL DEFAULT 'new',
                        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
                        updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
                    );
                    '''
                )
                await conn.execute("CREATE INDEX IF NOT EXISTS idx_messages_status ON messages(status);")
                await conn.execute("CREATE INDEX IF NOT EXISTS idx_messages_created ON messages(created_at DESC);")
        except _DB_ERRORS as e:
            raise DatabaseError(f"Failed to initialize tables: {e}") from e
        logger.info("DB schema ensured")

    async def close(self) -> None:
        pool, self._pool = self._pool, None
        if pool is None:
            return
        logger.info("Closing Postgres connection pool")
        await pool.close()
