# app/core/db.py

import ssl
from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

from app.core.config import (
    DATABASE_URL,
    DB_TYPE,
    DB_POOL_SIZE,
    DB_MAX_OVERFLOW,
    DB_POOL_TIMEOUT,
    DB_SSL_VERIFY,
    DB_ECHO_POOL,
    APP_ENV,
)

Base = declarative_base()


def _postgres_connect_args() -> dict:
    ssl_ctx = ssl.create_default_context()
    if not DB_SSL_VERIFY:
        ssl_ctx.check_hostname = False
        ssl_ctx.verify_mode = ssl.CERT_NONE

    return {
        "ssl": ssl_ctx,
        # pgbouncer in transaction mode cannot hold prepared statements
        "statement_cache_size": 0,
        "prepared_statement_cache_size": 0,
    }


def enable_sqlite_foreign_keys(dbapi_connection, _):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str = DATABASE_URL, db_type: str = DB_TYPE, **overrides) -> AsyncEngine:
    """
    Async engine with per-backend connect and pool options.

    Quote items and notes are removed through ON DELETE CASCADE, so SQLite
    connections get the foreign key pragma.
    """
    options: dict = {"echo": False, "echo_pool": DB_ECHO_POOL}

    if db_type == "postgres":
        options.update(
            connect_args=_postgres_connect_args(),
            pool_size=DB_POOL_SIZE,
            max_overflow=DB_MAX_OVERFLOW,
            pool_timeout=DB_POOL_TIMEOUT,
            pool_pre_ping=True,
        )
    else:
        options["connect_args"] = {"check_same_thread": False}

    options.update(overrides)
    engine = create_async_engine(url, **options)

    if db_type == "sqlite":
        event.listen(engine.sync_engine, "connect", enable_sqlite_foreign_keys)

    return engine


def build_sessionmaker(bind: AsyncEngine) -> async_sessionmaker:
    # services reload quotes explicitly after writes
    return async_sessionmaker(
        bind=bind,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )


engine = build_engine()
AsyncSessionLocal = build_sessionmaker(engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        yield session


import app.models  # noqa


async def init_models():
    if APP_ENV != "development":
        raise RuntimeError("init_models() is forbidden outside development")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
