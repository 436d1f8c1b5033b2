"""
SQLAlchemy declarative base and common model utilities.

All catalog models should inherit from Base.
"""
from datetime import datetime
from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from ulid import ULID


def generate_ulid() -> str:
    """Generate a new ULID string."""
    return str(ULID())


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy models.

    Usage:
        from catalog.core.database.base import Base

        class Sample(Base):
            __tablename__ = "samples"

            id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)
    """

    # Columns searched by the ``text`` key of a fullquery
    __text_search__ = ()


class TimestampMixin:
    """
    Mixin to add created_at and updated_at timestamps to models.
    """
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class OwnershipMixin:
    """
    Mixin recording which principal created and last updated a document.

    ``created_by`` is the field the own-resource permission rules compare
    against the requesting username.
    """
    created_by: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    updated_by: Mapped[str] = mapped_column(String(255), nullable=False)
