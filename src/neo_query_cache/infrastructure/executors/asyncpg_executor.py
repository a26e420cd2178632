"""Asyncpg query executor.

Runs queries against a PostgreSQL connection pool; the underlying
execution path the interceptor wraps.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

import asyncpg

logger = logging.getLogger(__name__)


class AsyncpgQueryExecutor:
    """Query executor over an asyncpg pool."""

    def __init__(self, pool: asyncpg.Pool):
        self._pool = pool

    @classmethod
    async def connect(cls, dsn: str, min_size: int = 1, max_size: int = 10, **pool_kwargs: Any) -> "AsyncpgQueryExecutor":
        """Create executor with a new pool."""
        pool = await asyncpg.create_pool(dsn, min_size=min_size, max_size=max_size, **pool_kwargs)
        return cls(pool)

    async def fetch(self, sql: str, bindings: Sequence[Any]) -> List[Dict[str, Any]]:
        """Run a select and return rows as dicts."""
        try:
            async with self._pool.acquire() as conn:
                rows = await conn.fetch(sql, *bindings)
                return [dict(row) for row in rows]
        except Exception as e:
            logger.error(f"Query failed: {e}")
            raise

    async def execute(self, sql: str, bindings: Sequence[Any]) -> Optional[str]:
        """Run a command (INSERT, UPDATE, DELETE, TRUNCATE) and return status."""
        try:
            async with self._pool.acquire() as conn:
                return await conn.execute(sql, *bindings)
        except Exception as e:
            logger.error(f"Command failed: {e}")
            raise

    async def close(self) -> None:
        await self._pool.close()
