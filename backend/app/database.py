"""Async SQLAlchemy engine, session factory, and declarative base."""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import DDL, event, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from app.config import settings
from app.exceptions import ConflictError

engine = create_async_engine(
    settings.async_database_url,
    echo=settings.debug,
    pool_pre_ping=True,
    pool_size=10,
    max_overflow=20,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


# The booking overlap exclusion constraint needs GiST support for "=" on plain columns.
event.listen(
    Base.metadata,
    "before_create",
    DDL("CREATE EXTENSION IF NOT EXISTS btree_gist").execute_if(dialect="postgresql"),
)


# Money columns are NUMERIC(10, 2); amounts above MAX_MONEY do not fit.
MONEY_DIGITS = 10
MONEY_PLACES = 2
MAX_MONEY = Decimal("99999999.99")


class TimestampMixin:
    """Mixin that adds created_at and updated_at columns."""

    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        onupdate=func.now(),
    )


class UUIDPrimaryKeyMixin:
    """Mixin that adds a UUID primary key column."""

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)


async def get_db() -> AsyncSession:  # type: ignore[misc]
    """Yield an async database session for FastAPI dependency injection.

    The session is the unit of work for one request: everything flushed while
    handling the request is committed together, and any exception rolls the
    whole request back. Multi-row writes (bulk availability overrides,
    verification decisions that also flip ``User.verified``) rely on this.

    Usage::

        @app.get("/items")
        async def get_items(db: AsyncSession = Depends(get_db)):
            ...
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def create_tables() -> None:
    """Create all tables (and PostgreSQL extensions) if they do not exist."""
    # Import models so every table is registered on Base.metadata.
    import app.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def flush_or_conflict(db: AsyncSession, detail: str) -> None:
    """Flush pending writes, reporting a unique/exclusion constraint violation as 409.

    The session is unusable afterwards; ``get_db`` rolls the request back.
    """
    try:
        await db.flush()
    except IntegrityError:
        raise ConflictError(detail) from None
