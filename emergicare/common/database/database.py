from typing import AsyncGenerator
from sqlalchemy import event, text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from emergicare.common.config import settings
from emergicare.common.logging import get_logger

logger = get_logger(__name__)


def _connect_args(database_url: str) -> dict:
    """Driver-level timeouts so no database call blocks indefinitely."""
    backend = make_url(database_url).get_backend_name()
    timeout = settings.DB_STATEMENT_TIMEOUT_SECONDS
    if backend == "postgresql":
        return {"command_timeout": timeout}
    if backend == "sqlite":
        # Busy timeout while another writer holds the lock
        return {"timeout": timeout}
    return {}


engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    future=True,
    pool_pre_ping=True,
    pool_recycle=1800,
    connect_args=_connect_args(settings.DATABASE_URL),
)

if engine.dialect.name == "sqlite":
    # Take the write lock when a transaction begins, so competing writers
    # queue on the busy timeout instead of failing to upgrade a read lock.
    @event.listens_for(engine.sync_engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

async_session = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)

async def connect_to_db():
    """Connect to the database."""
    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("database_connected")
    except Exception:
        logger.exception("database_connection_failed")
        raise

async def close_db_connection():
    """Close the database connection."""
    try:
        await engine.dispose()
        logger.info("database_disconnected")
    except Exception:
        logger.exception("database_disconnect_failed")
        raise

async def check_db_connection() -> bool:
    """Return True if the database answers a trivial query."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception:
        logger.warning("database_health_check_failed", exc_info=True)
        return False

# Dependency for using a session in routes
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield a database session for use in FastAPI routes."""
    async with async_session() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
