# app/models/base.py
"""
SQLAlchemy Base and database connection management
"""

from datetime import datetime, timezone
from typing import AsyncGenerator
from sqlalchemy import DateTime
from sqlalchemy.dialects import mysql
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from app.config import settings
from app.utils.logger import logger

# Base model
Base = declarative_base()

# Millisecond precision on MySQL so approval timestamps round-trip exactly
PreciseDateTime = DateTime().with_variant(mysql.DATETIME(fsp=3), "mysql")


def utc_now() -> datetime:
    """Current UTC time as a naive datetime truncated to milliseconds."""
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


# Async engine
engine = create_async_engine(
    settings.sqlalchemy_url,
    echo=settings.debug,
    pool_pre_ping=True,
    pool_recycle=3600
)

# Async session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False
)

async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide an async session per request."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()

async def init_db():
    """Create tables (initial setup)."""
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info(" Database tables created")
    except Exception as e:
        logger.error(f" Table creation failed: {e}")
