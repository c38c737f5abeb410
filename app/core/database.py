import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from app.core.config import settings
from app.core.exceptions import StorageError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


engine = create_async_engine(settings.DATABASE_URL, echo=False, pool_pre_ping=True)
AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncIterator[AsyncSession]:
    async with AsyncSessionLocal() as session:
        yield session


@asynccontextmanager
async def read_guard() -> AsyncIterator[None]:
    """Map database failures during reads to StorageError. Never commits."""
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error("Database read failed: %s", exc)
        raise StorageError("Database operation failed") from exc


@asynccontextmanager
async def atomic(db: AsyncSession) -> AsyncIterator[AsyncSession]:
    """Commit on success, roll back on any failure.

    Database errors are re-raised as StorageError so callers see one error
    kind for persistence failures; domain errors propagate unchanged.
    """
    try:
        yield db
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("Transaction rolled back: %s", exc)
        raise StorageError("Database operation failed") from exc
    except Exception:
        await db.rollback()
        raise
