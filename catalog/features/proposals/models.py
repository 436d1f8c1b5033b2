"""
Proposal SQLAlchemy model.
"""
from datetime import datetime
from sqlalchemy import JSON, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from catalog.core.database.base import Base, OwnershipMixin, TimestampMixin


class Proposal(Base, TimestampMixin, OwnershipMixin):
    """
    An experiment proposal granted beam time at the facility.

    Attributes:
        proposal_id: Facility-assigned proposal number (primary key)
        email: Contact e-mail of the main proposer
        title: Proposal title
        owner_group: Access group owning the proposal's data
        access_groups: Additional groups allowed to read it
        measurement_period_list: Scheduled measurement periods (JSON)
    """
    __tablename__ = "proposals"
    __text_search__ = ("proposal_id", "title", "abstract", "email")

    proposal_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    pi_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    pi_firstname: Mapped[str | None] = mapped_column(String(255), nullable=True)
    pi_lastname: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    firstname: Mapped[str | None] = mapped_column(String(255), nullable=True)
    lastname: Mapped[str | None] = mapped_column(String(255), nullable=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    abstract: Mapped[str | None] = mapped_column(Text, nullable=True)
    start_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    end_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    owner_group: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    access_groups: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    measurement_period_list: Mapped[list[dict]] = mapped_column(JSON, nullable=False, default=list)

    def __repr__(self) -> str:
        return f"<Proposal(proposal_id={self.proposal_id!r}, title={self.title!r})>"
