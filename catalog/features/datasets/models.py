"""
Dataset SQLAlchemy model.
"""
from datetime import datetime
from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from catalog.core.database.base import Base, OwnershipMixin, TimestampMixin, generate_ulid


class Dataset(Base, TimestampMixin, OwnershipMixin):
    """
    A set of files produced by a measurement (raw) or by processing (derived).

    ``pid`` is a ULID assigned on creation. ``created_by`` is what the
    own-dataset rules match against.
    """
    __tablename__ = "datasets"
    __text_search__ = ("dataset_name", "description", "source_folder")

    pid: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)
    type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    dataset_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    owner: Mapped[str] = mapped_column(String(255), nullable=False)
    owner_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    contact_email: Mapped[str] = mapped_column(String(255), nullable=False)
    owner_group: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    access_groups: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    source_folder: Mapped[str] = mapped_column(String(1000), nullable=False)
    size: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    number_of_files: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    creation_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    keywords: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    scientific_metadata: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    proposal_id: Mapped[str | None] = mapped_column(
        String(255),
        ForeignKey("proposals.proposal_id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<Dataset(pid={self.pid}, type={self.type!r})>"
