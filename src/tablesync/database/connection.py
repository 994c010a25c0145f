"""
Database connection management for tablesync.

Provides an async MySQL connection pool that the schema inspector and
statement executor share. The pool is always injected; nothing in the
package holds a process-wide connection.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Dict, Optional, Any, AsyncIterator, List
from urllib.parse import urlparse, parse_qs, unquote

import aiomysql
from pydantic import BaseModel, Field, field_validator

from ..exceptions import DatabaseConnectionError, DatabaseConfigurationError


logger = logging.getLogger(__name__)


def quote_identifier(name: str) -> str:
    """Quote a table, column or index name with backticks."""
    return "`" + name.replace("`", "``") + "`"


class ConnectionConfig(BaseModel):
    """Database connection configuration."""

    host: str = Field("localhost", description="Database host")
    port: int = Field(3306, description="Database port")
    database: str = Field(..., description="Database name")
    user: str = Field(..., description="Database user")
    password: str = Field("", description="Database password")
    charset: str = Field("utf8mb4", description="Connection character set")

    # Connection pool settings
    min_size: int = Field(1, description="Minimum connections in pool")
    max_size: int = Field(5, description="Maximum connections in pool")

    connect_timeout: float = Field(10.0, description="Connect timeout in seconds")

    @field_validator("database")
    @classmethod
    def validate_database(cls, v):
        if not v or not v.strip():
            raise ValueError("Database name is required")
        return v

    @classmethod
    def from_url(cls, url: str) -> "ConnectionConfig":
        """Create configuration from a mysql:// URL."""
        parsed = urlparse(url)

        if parsed.scheme not in ("mysql", "mysql+aiomysql"):
            raise DatabaseConfigurationError(f"Invalid database URL scheme: {parsed.scheme}")

        if not parsed.path or parsed.path == "/":
            raise DatabaseConfigurationError("Database name is required")

        query_params = parse_qs(parsed.query) if parsed.query else {}

        config_data = {
            "host": parsed.hostname or "localhost",
            "port": parsed.port or 3306,
            "database": parsed.path.lstrip("/"),
            "user": unquote(parsed.username or ""),
            "password": unquote(parsed.password or ""),
        }

        if "charset" in query_params:
            config_data["charset"] = query_params["charset"][0]

        return cls(**config_data)

    def to_connection_kwargs(self) -> Dict[str, Any]:
        """Convert to aiomysql connection kwargs."""
        return {
            "host": self.host,
            "port": self.port,
            "db": self.database,
            "user": self.user,
            "password": self.password,
            "charset": self.charset,
            "connect_timeout": self.connect_timeout,
            # Every DDL statement commits on its own; nothing is wrapped in a transaction
            "autocommit": True,
        }


class ConnectionPool:
    """Async MySQL connection pool wrapper."""

    def __init__(self, config: ConnectionConfig):
        self.config = config
        self._pool: Optional[aiomysql.Pool] = None
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        """Initialize the connection pool."""
        async with self._lock:
            if self._pool is not None:
                return

            try:
                logger.info(
                    f"Initializing connection pool to {self.config.host}:{self.config.port}"
                    f"/{self.config.database} (min={self.config.min_size}, max={self.config.max_size})"
                )

                self._pool = await aiomysql.create_pool(
                    **self.config.to_connection_kwargs(),
                    minsize=self.config.min_size,
                    maxsize=self.config.max_size,
                )

                logger.info("Connection pool initialized successfully")

            except Exception as e:
                logger.error(f"Failed to initialize connection pool: {e}")
                raise DatabaseConnectionError(f"Failed to initialize connection pool: {e}") from e

    async def close(self) -> None:
        """Close the connection pool."""
        async with self._lock:
            if self._pool is not None:
                logger.info("Closing connection pool")
                self._pool.close()
                await self._pool.wait_closed()
                self._pool = None

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[aiomysql.Connection]:
        """Acquire a connection from the pool."""
        if self._pool is None:
            raise DatabaseConnectionError("Pool is not connected")

        async with self._pool.acquire() as connection:
            yield connection

    async def execute(self, query: str, *args) -> int:
        """Execute a statement and return the affected row count."""
        async with self.acquire() as conn:
            async with conn.cursor() as cur:
                return await cur.execute(query, args or None)

    async def fetch(self, query: str, *args) -> List[Dict[str, Any]]:
        """Fetch all rows of a query as dicts."""
        async with self.acquire() as conn:
            async with conn.cursor(aiomysql.DictCursor) as cur:
                await cur.execute(query, args or None)
                return list(await cur.fetchall())

    async def fetchrow(self, query: str, *args) -> Optional[Dict[str, Any]]:
        """Fetch a single row of a query as a dict."""
        async with self.acquire() as conn:
            async with conn.cursor(aiomysql.DictCursor) as cur:
                await cur.execute(query, args or None)
                return await cur.fetchone()

    async def fetchval(self, query: str, *args, column: int = 0) -> Any:
        """Fetch a single value from a query."""
        async with self.acquire() as conn:
            async with conn.cursor() as cur:
                await cur.execute(query, args or None)
                row = await cur.fetchone()
                return row[column] if row is not None else None

    def get_stats(self) -> Dict[str, Any]:
        """Get connection pool statistics."""
        if self._pool is None:
            return {
                "size": 0,
                "free": 0,
                "acquired": 0,
                "initialized": False
            }

        return {
            "size": self._pool.size,
            "free": self._pool.freesize,
            "acquired": self._pool.size - self._pool.freesize,
            "initialized": True
        }

    @property
    def is_initialized(self) -> bool:
        """Check if pool is initialized."""
        return self._pool is not None

    async def __aenter__(self) -> "ConnectionPool":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
