# maintenix/database.py
from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

# Base class for all models
Base = declarative_base()


def build_engine(database_url: str) -> AsyncEngine:
    if database_url.startswith("sqlite"):
        if database_url.endswith("://") or ":memory:" in database_url:
            # In-memory SQLite only lives as long as its single connection
            return create_async_engine(
                database_url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
                echo=False,
            )
        return create_async_engine(
            database_url, connect_args={"check_same_thread": False}, echo=False
        )

    return create_async_engine(
        database_url,
        echo=False,  # Set to True for SQL query logging in development
        pool_pre_ping=True,  # Validate connections before use
        pool_recycle=300,  # Recycle connections every 5 minutes
    )


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,  # Manual control over when to flush
    )


async def get_async_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
