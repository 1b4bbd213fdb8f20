"""SQLAlchemy database models for the rating system.

This module defines the persisted layout using SQLAlchemy 2.0 patterns. The
same models serve PostgreSQL, MySQL and SQLite; dialect differences are
limited to column type variants.

Constraint names are derived from the naming convention so every backend
reports the same names in its violation messages.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    inspect,
)
from sqlalchemy.dialects import mysql
from sqlalchemy.ext.asyncio import AsyncAttrs, AsyncEngine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from rating_system.config import get_logger

# Create module logger
logger = get_logger(__name__)

# Define naming convention for constraints
convention = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",  # Index
    "uq": "uq_%(table_name)s_%(column_0_N_name)s",  # Unique constraint
    "ck": "ck_%(table_name)s_%(constraint_name)s",  # Check constraint
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",  # Foreign key
    "pk": "pk_%(table_name)s",  # Primary key
}

# Create metadata with naming convention
metadata = MetaData(naming_convention=convention)

# MySQL DATETIME defaults to whole seconds
Timestamp = DateTime(timezone=True).with_variant(mysql.DATETIME(fsp=6), "mysql")


class RatingSystemDBBase(AsyncAttrs, DeclarativeBase):
    """Base class for all database models with UUID keys and timestamps.

    Timestamps are set by the domain entities, never by the database.
    """

    # Use the metadata with naming convention
    metadata = metadata

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    created_at: Mapped[datetime] = mapped_column(Timestamp, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(Timestamp, nullable=False)


class DBUser(RatingSystemDBBase):
    """Registered user with a bcrypt password hash."""

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(64), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    __table_args__ = (
        UniqueConstraint("email"),
        UniqueConstraint("username"),
    )


class DBRating(RatingSystemDBBase):
    """A user's 1-5 score for a service, at most one per pair."""

    __tablename__ = "ratings"

    user_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    service_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    score: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "service_id"),
        CheckConstraint("score >= 1 AND score <= 5", name="score_range"),
        Index(None, "service_id"),
        Index(None, "user_id"),
    )


class DBReview(RatingSystemDBBase):
    """Review text attached to exactly one rating."""

    __tablename__ = "reviews"

    user_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    service_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    rating_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("ratings.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)

    __table_args__ = (
        UniqueConstraint("rating_id"),
        Index(None, "service_id"),
        Index(None, "user_id"),
    )


class DBComment(RatingSystemDBBase):
    """Comment on a review."""

    __tablename__ = "comments"

    user_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    review_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("reviews.id", ondelete="CASCADE"), nullable=False
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)

    __table_args__ = (
        Index(None, "review_id"),
        Index(None, "user_id"),
    )


async def init_db(engine: AsyncEngine) -> None:
    """Initialize database schema.

    Creates all tables if they don't exist.
    This is a safe operation that won't affect existing data.
    """
    try:
        async with engine.connect() as conn:
            existing_tables = await conn.run_sync(
                lambda sync_conn: inspect(sync_conn).get_table_names()
            )
            if existing_tables:
                logger.info(f"Found existing tables: {existing_tables}")

        # Create tables - SQLAlchemy will skip tables that already exist
        async with engine.begin() as conn:
            await conn.run_sync(RatingSystemDBBase.metadata.create_all)

    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        raise
    else:
        logger.info("Database schema initialization complete")


async def drop_db(engine: AsyncEngine) -> None:
    """Drop every table owned by the rating system."""
    async with engine.begin() as conn:
        await conn.run_sync(RatingSystemDBBase.metadata.drop_all)
    logger.info("Database schema dropped")
