from .asyncpg_executor import AsyncpgQueryExecutor

__all__ = ["AsyncpgQueryExecutor"]
