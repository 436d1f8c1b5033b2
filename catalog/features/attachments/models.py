"""
Attachment SQLAlchemy model.
"""
from sqlalchemy import JSON, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from catalog.core.database.base import Base, OwnershipMixin, TimestampMixin, generate_ulid


class Attachment(Base, TimestampMixin, OwnershipMixin):
    """
    A small image (thumbnail) with caption attached to a proposal, dataset or sample.
    """
    __tablename__ = "attachments"
    __text_search__ = ("caption",)

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)
    thumbnail: Mapped[str] = mapped_column(Text, nullable=False)
    caption: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    proposal_id: Mapped[str | None] = mapped_column(
        String(255),
        ForeignKey("proposals.proposal_id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    dataset_id: Mapped[str | None] = mapped_column(
        String(26),
        ForeignKey("datasets.pid", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    sample_id: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    owner_group: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    access_groups: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    def __repr__(self) -> str:
        return f"<Attachment(id={self.id}, caption={self.caption!r})>"
