"""
Datablock SQLAlchemy model.
"""
from sqlalchemy import JSON, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from catalog.core.database.base import Base, OwnershipMixin, TimestampMixin, generate_ulid


class Datablock(Base, TimestampMixin, OwnershipMixin):
    """
    An archive unit holding part of a dataset's files.

    Attributes:
        dataset_id: Dataset the files belong to
        archive_id: Identifier of the packed archive file
        data_file_list: File entries (path, size, time, chk, ...) as JSON
    """
    __tablename__ = "datablocks"
    __text_search__ = ("archive_id",)

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)
    dataset_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("datasets.pid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    archive_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    size: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    packed_size: Mapped[int | None] = mapped_column(Integer, nullable=True)
    chk_alg: Mapped[str | None] = mapped_column(String(50), nullable=True)
    version: Mapped[str] = mapped_column(String(50), nullable=False)
    data_file_list: Mapped[list[dict]] = mapped_column(JSON, nullable=False, default=list)
    owner_group: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    access_groups: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    def __repr__(self) -> str:
        return f"<Datablock(id={self.id}, archive_id={self.archive_id!r})>"
