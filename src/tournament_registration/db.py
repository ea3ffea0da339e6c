"""
Async engine and session handling for the registration database.

The API reaches the database through ``get_db_session`` (one session per
request, committed when the handler returns). Scripts and tests build
their own ``Database`` and use ``get_session`` directly.
"""

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy import event, inspect, text
from sqlalchemy.pool import StaticPool
from contextlib import asynccontextmanager
import logging
import time
import asyncio
from datetime import datetime, timezone
from typing import AsyncGenerator, List, Optional
from .models import Base
from .config import config

logger = logging.getLogger(__name__)

# Tables the API cannot serve without; checked at startup
CRITICAL_TABLES = (
    "users",
    "tournaments",
    "choreographies",
    "coaches",
    "judges",
    "support_staff",
)

SLOW_QUERY_SECONDS = 1.0


class Database:
    """
    Owns the async engine and the session factory for one database URL.

    Args:
        database_url: Async SQLAlchemy URL (postgresql+asyncpg or sqlite+aiosqlite)
        echo: Log every SQL statement
        pool_size: Size of the asyncpg pool, ignored for SQLite
    """

    def __init__(self, database_url: str, echo: bool = False, pool_size: int = 10):
        self.database_url = database_url
        self.echo = echo
        self.pool_size = pool_size
        self.engine = None
        self.async_session = None

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    def _engine_options(self) -> dict:
        if self.is_sqlite:
            # One shared connection, otherwise every session sees its own :memory: db
            return {
                "poolclass": StaticPool,
                "connect_args": {"check_same_thread": False},
            }

        return {
            "pool_pre_ping": True,
            "pool_recycle": 3600,
            "pool_size": self.pool_size,
            "max_overflow": 20,
            "connect_args": {
                "command_timeout": 60,
                "server_settings": {"application_name": "tournament_registration"},
            },
        }

    async def initialize(self, max_retries: int = 3, retry_delay: float = 2.0):
        """Create the engine, retrying with exponential backoff until ``SELECT 1`` succeeds."""
        delay = retry_delay
        for attempt in range(1, max_retries + 1):
            try:
                logger.info(f"Connecting to database (attempt {attempt}/{max_retries})")
                self.engine = create_async_engine(self.database_url, echo=self.echo, **self._engine_options())
                self.async_session = async_sessionmaker(
                    self.engine,
                    class_=AsyncSession,
                    expire_on_commit=False,
                    autoflush=True,
                )
                if self.is_sqlite:
                    self._enforce_foreign_keys()
                await self._ping()
                self._watch_slow_queries()
                logger.info("Database ready")
                return
            except Exception as e:
                logger.error(f"Database connection attempt {attempt} failed: {e}")
                if self.engine is not None:
                    await self.engine.dispose()
                    self.engine = None
                if attempt == max_retries:
                    raise
                logger.info(f"Retrying database connection in {delay:.1f}s")
                await asyncio.sleep(delay)
                delay *= 2

    async def _ping(self):
        async with self.engine.connect() as conn:
            if (await conn.execute(text("SELECT 1"))).scalar() != 1:
                raise RuntimeError("Unexpected answer to SELECT 1")

    def _enforce_foreign_keys(self):
        # SQLite ignores ON DELETE CASCADE unless every connection opts in
        @event.listens_for(self.engine.sync_engine, "connect")
        def enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    def _watch_slow_queries(self):
        @event.listens_for(self.engine.sync_engine, "before_cursor_execute")
        def start_timer(conn, cursor, statement, parameters, context, executemany):
            context._query_start_time = time.perf_counter()

        @event.listens_for(self.engine.sync_engine, "after_cursor_execute")
        def log_slow_query(conn, cursor, statement, parameters, context, executemany):
            elapsed = time.perf_counter() - context._query_start_time
            if elapsed > SLOW_QUERY_SECONDS:
                logger.warning(f"Slow query ({elapsed:.2f}s): {statement[:100]}...")

    async def create_tables(self, drop_first: bool = False):
        """
        Create every table from the ORM metadata.

        Used by tests and local experiments; deployed databases are
        managed with ``alembic upgrade head``.
        """
        if not self.engine:
            await self.initialize()

        async with self.engine.begin() as conn:
            if drop_first:
                await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)
        logger.info(f"Created {len(Base.metadata.tables)} tables")

    async def drop_tables(self):
        if not self.engine:
            await self.initialize()

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        logger.info("Dropped all tables")

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Session that commits when the block exits cleanly and rolls back otherwise."""
        if not self.async_session:
            await self.initialize()

        async with self.async_session() as session:
            try:
                yield session
                await session.commit()
            except Exception as e:
                await session.rollback()
                logger.debug(f"Session rolled back: {e!r}")
                raise

    async def table_names(self) -> List[str]:
        async with self.engine.connect() as conn:
            return await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())

    async def close(self):
        if self.engine:
            await self.engine.dispose()
            self.engine = None
            self.async_session = None
            logger.info("Database engine disposed")

    async def health_check(self) -> dict:
        """
        Connectivity, pool and schema report.

        Returns:
            dict with ``status`` ("healthy" or "unhealthy"), ``timestamp``
            and per-check details under ``checks``
        """
        report = {
            "status": "unhealthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "checks": {},
        }

        try:
            started = time.perf_counter()
            await self._ping()
            report["checks"]["connectivity"] = {
                "status": "pass",
                "response_time_ms": round((time.perf_counter() - started) * 1000, 2),
            }

            pool = self.engine.pool
            if hasattr(pool, "checkedout"):
                report["checks"]["connection_pool"] = {
                    "status": "pass",
                    "size": self.pool_size,
                    "checked_out": pool.checkedout(),
                }

            tables = await self.table_names()
            report["checks"]["tables"] = {"status": "pass", "count": len(tables)}
            report["status"] = "healthy"

        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            report["error"] = str(e)

        return report


# Process-wide instance used by the API and the scripts
db: Optional[Database] = None


async def get_database() -> Database:
    global db
    if db is None:
        db = Database(
            config.get_database_url(),
            echo=config.db_echo,
            pool_size=config.db_pool_size,
        )
        await db.initialize()
    return db


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one committed-or-rolled-back session per request."""
    database = await get_database()
    async with database.get_session() as session:
        yield session


async def validate_database_startup() -> bool:
    """True when the database answers and the migrated schema is present."""
    try:
        database = await get_database()
        health = await database.health_check()
        if health["status"] != "healthy":
            logger.error(f"Database health check failed: {health}")
            return False

        present = set(await database.table_names())
        missing = [name for name in CRITICAL_TABLES if name not in present]
        if missing:
            logger.error(f"Missing tables: {', '.join(missing)}. Run 'alembic upgrade head' first.")
            return False

        logger.info("Database schema validated")
        return True

    except Exception as e:
        logger.error(f"Database startup validation failed: {e}")
        return False


async def close_database():
    """Dispose the process-wide engine, if one was created."""
    global db
    if db is not None:
        await db.close()
        db = None
