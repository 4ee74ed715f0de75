# app/db/session.py

from contextlib import asynccontextmanager
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine, AsyncSession, async_sessionmaker

SessionFactory = async_sessionmaker[AsyncSession]


def create_engine(database_url: str, **engine_kwargs) -> AsyncEngine:
    """
    Builds the process-wide async engine. Called once by the entry point
    (FastAPI lifespan, Alembic, scripts); never at import time.
    """
    if database_url.startswith("postgresql"):
        # 连接池配置：取连接前先探活，每小时回收一次，防止拿到被服务端断开的连接
        engine_kwargs.setdefault("pool_pre_ping", True)
        engine_kwargs.setdefault("pool_recycle", 3600)
    return create_async_engine(database_url, **engine_kwargs)


def create_session_factory(engine: AsyncEngine) -> SessionFactory:
    return async_sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=engine,
        class_=AsyncSession
    )


@asynccontextmanager
async def unit_of_work(session_factory: SessionFactory) -> AsyncGenerator[AsyncSession, None]:
    """
    A short, self-contained transaction: commits when the block completes,
    rolls back if it raises. Billing and credential writes each run in their
    own unit of work so they commit independently of the outbound calls
    that follow them.
    """
    async with session_factory() as session:
        async with session.begin():
            yield session
