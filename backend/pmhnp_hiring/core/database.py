"""
Database Configuration and Session Management

Async SQLAlchemy engine/session management plus an optional Redis client
used by the rate limiter.
"""

from typing import Optional, Dict, Any

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
    AsyncEngine
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool
from sqlalchemy import text
import redis.asyncio as redis

from pmhnp_hiring.core.config import get_settings
from pmhnp_hiring.utils.logger import get_logger

# Initialize logger
logger = get_logger(__name__)

# Get settings
settings = get_settings()


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""
    pass


def engine_options(url: str) -> Dict[str, Any]:
    """
    Keyword arguments for ``create_async_engine``.

    SQLite (including the in-memory test database) shares one connection
    through ``StaticPool``; server databases get a sized, pre-pinged pool.
    """
    if url.startswith("sqlite"):
        return {
            "echo": settings.DEBUG,
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        }
    return {
        "echo": settings.DEBUG,
        "pool_size": settings.DATABASE_POOL_SIZE,
        "max_overflow": settings.DATABASE_MAX_OVERFLOW,
        "pool_pre_ping": True,
    }


async def _connect_redis(url: str) -> Optional[redis.Redis]:
    """Connected Redis client, or ``None`` when Redis cannot be reached."""
    client = redis.from_url(url, encoding="utf-8", decode_responses=True)
    try:
        await client.ping()
    except Exception as e:
        logger.warning(f"Redis unavailable, rate limiting falls back to memory: {e}")
        await client.aclose()
        return None
    logger.info("Redis connection test successful")
    return client


class DatabaseManager:
    """Database connection and session management."""

    def __init__(self) -> None:
        """Initialize database manager."""
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None
        self._redis_client: Optional[redis.Redis] = None

    @property
    def engine(self) -> AsyncEngine:
        """Get database engine."""
        if self._engine is None:
            raise RuntimeError("Database not initialized. Call init_database() first.")
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        """Get session factory."""
        if self._session_factory is None:
            raise RuntimeError("Database not initialized. Call init_database() first.")
        return self._session_factory

    @property
    def redis(self) -> Optional[redis.Redis]:
        """Get Redis client."""
        return self._redis_client

    @property
    def is_initialized(self) -> bool:
        return self._engine is not None

    async def init_database(
        self,
        database_url: Optional[str] = None,
        use_redis: bool = True
    ) -> None:
        """
        Initialize database connections.

        Args:
            database_url: Override for settings.DATABASE_URL
            use_redis: Whether to try connecting to Redis
        """
        url = database_url or settings.DATABASE_URL

        try:
            self._engine = create_async_engine(url, **engine_options(url))

            self._session_factory = async_sessionmaker(
                bind=self._engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )

            if use_redis:
                self._redis_client = await _connect_redis(settings.REDIS_URL)

            await self._test_database_connection()

            logger.info("Database connections initialized successfully")

        except Exception as e:
            logger.error(f"Failed to initialize database: {e}")
            raise

    async def _test_database_connection(self) -> None:
        """Test database connection."""
        async with self._engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Database connection test successful")

    async def create_tables(self) -> None:
        """Create database tables."""
        # Register all models on Base.metadata
        import pmhnp_hiring.models  # noqa: F401

        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info("Database tables created successfully")
        except Exception as e:
            logger.error(f"Failed to create database tables: {e}")
            raise

    async def check_health(self) -> Dict[str, Dict[str, str]]:
        """
        Check database and Redis connectivity.

        Returns:
            Dict[str, Dict[str, str]]: Per-dependency status and message
        """
        checks: Dict[str, Dict[str, str]] = {}

        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            checks["database"] = {"status": "healthy", "message": "Database connection successful"}
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            checks["database"] = {"status": "unhealthy", "message": f"Database connection failed: {e}"}

        if self._redis_client is None:
            checks["cache"] = {"status": "unhealthy", "message": "Redis not configured, using in-memory fallback"}
        else:
            try:
                await self._redis_client.ping()
                checks["cache"] = {"status": "healthy", "message": "Redis connection successful"}
            except Exception as e:
                logger.error(f"Redis health check failed: {e}")
                checks["cache"] = {"status": "unhealthy", "message": f"Redis connection failed: {e}"}

        return checks

    async def close_connections(self) -> None:
        """Close database connections."""
        if self._engine:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info("Database engine disposed")

        if self._redis_client:
            await self._redis_client.aclose()
            self._redis_client = None
            logger.info("Redis connection closed")


# Global database manager instance
db_manager = DatabaseManager()

