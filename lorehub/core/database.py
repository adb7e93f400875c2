"""
Database setup and session handling
"""

from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.engine import URL, make_url
from sqlalchemy import MetaData, event, text, types
from sqlalchemy.dialects.postgresql import JSONB, UUID as PostgresUUID
from typing import AsyncGenerator, Dict, Tuple
from pathlib import Path
import logging
import uuid
import ssl

from lorehub.core.config import settings

logger = logging.getLogger(__name__)


class UUID(types.TypeDecorator):
    """UUID column: native on PostgreSQL, 36-char text on SQLite."""
    impl = types.CHAR(36)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(PostgresUUID(as_uuid=True))
        return dialect.type_descriptor(types.CHAR(36))

    def process_bind_param(self, value, dialect):
        if value is None or dialect.name == "postgresql":
            return value
        return str(value if isinstance(value, uuid.UUID) else uuid.UUID(str(value)))

    def process_result_value(self, value, dialect):
        if value is None or isinstance(value, uuid.UUID):
            return value
        return uuid.UUID(str(value))


class JSON(types.TypeDecorator):
    """JSONB on PostgreSQL, JSON text elsewhere."""
    impl = types.JSON
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(JSONB())
        return dialect.type_descriptor(types.JSON())


# libpq sslmode / ssl flag values
_SSL_ENABLED = {"1", "true", "yes", "on", "require", "prefer", "verify-ca", "verify-full"}
_SSL_VERIFIED = {"verify-ca", "verify-full"}


def _postgres_url_and_args(raw_url: str) -> Tuple[URL, Dict]:
    """Point a libpq-style URL at asyncpg.

    asyncpg rejects ``sslmode``/``ssl`` query parameters, so they are taken out
    of the URL and turned into an SSLContext in ``connect_args``.
    """
    url = make_url(raw_url).set(drivername="postgresql+asyncpg")
    query = dict(url.query)
    ssl_options = {key.lower(): str(query.pop(key)).strip().lower()
                   for key in list(query) if key.lower() in ("sslmode", "ssl")}
    mode = ssl_options.get("sslmode") or ssl_options.get("ssl") or ""

    connect_args: Dict = {}
    if mode in _SSL_ENABLED:
        ctx = ssl.create_default_context()
        if mode not in _SSL_VERIFIED:
            ctx.check_hostname = False
            ctx.verify_mode = ssl.CERT_NONE
        connect_args["ssl"] = ctx
    return url.set(query=query), connect_args


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine for SQLite (aiosqlite) or PostgreSQL (asyncpg)."""
    if database_url.startswith("sqlite"):
        if database_url.startswith("sqlite://") and "+aiosqlite" not in database_url:
            database_url = database_url.replace("sqlite://", "sqlite+aiosqlite://", 1)
        _ensure_sqlite_dir(database_url)
        new_engine = create_async_engine(database_url, echo=echo, future=True)
        event.listen(new_engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        return new_engine

    url, connect_args = _postgres_url_and_args(database_url)
    return create_async_engine(
        url,
        echo=echo,
        future=True,
        pool_pre_ping=True,
        pool_recycle=300,
        connect_args=connect_args,
    )


def _ensure_sqlite_dir(database_url: str) -> None:
    path = database_url.split(":///", 1)[-1]
    if not path or path.startswith(":memory:"):
        return
    Path(path).expanduser().parent.mkdir(parents=True, exist_ok=True)


def build_sessionmaker(bind: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)

# Session factory
AsyncSessionLocal = build_sessionmaker(engine)


# Declarative base
class Base(DeclarativeBase):
    """SQLAlchemy declarative base"""
    metadata = MetaData(
        naming_convention={
            "ix": "ix_%(column_0_label)s",
            "uq": "uq_%(table_name)s_%(column_0_name)s",
            "ck": "ck_%(table_name)s_%(constraint_name)s",
            "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
            "pk": "pk_%(table_name)s"
        }
    )


# Request-scoped session dependency
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Database session dependency"""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db(bind: AsyncEngine | None = None) -> None:
    """Create all tables (idempotent)."""
    # Registers every model on Base.metadata
    import lorehub.models  # noqa: F401

    async with (bind if bind is not None else engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ensured")


async def check_db_connection(bind: AsyncEngine | None = None) -> bool:
    """Round-trip a trivial query; used by the health endpoint"""
    try:
        async with (bind if bind is not None else engine).connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database connection check failed: {e}")
        return False
