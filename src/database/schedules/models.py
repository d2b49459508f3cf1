"""SQLAlchemy ORM model for digest schedules."""

import uuid as uuid_module
from datetime import UTC, datetime

from sqlalchemy import Boolean, DateTime, Index, String, Text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from src.database.core import Base
from src.enums import SummaryLength


class DigestSchedule(Base):
    """ORM model for digest schedules.

    A named recurring digest: which topics, how often (cron_schedule) and where
    to deliver. next_run_at is set on creation and only ever moved forward by
    automatic runs; manual triggers touch last_run_at alone.
    """

    __tablename__ = "digest_schedules"

    id: Mapped[uuid_module.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid_module.uuid4,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    topics: Mapped[list[str]] = mapped_column(JSONB, nullable=False, default=list)
    cron_schedule: Mapped[str] = mapped_column(String(100), nullable=False)
    delivery_email: Mapped[str] = mapped_column(String(320), nullable=False)
    summary_length: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=SummaryLength.MEDIUM.value,
    )
    include_links: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    custom_prompt: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    last_run_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    next_run_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )

    __table_args__ = (Index("idx_digest_schedules_next_run", "next_run_at", "is_active"),)

    def __repr__(self) -> str:
        """Return string representation of the schedule."""
        return (
            f"<DigestSchedule(id={self.id}, name={self.name!r}, "
            f"cron={self.cron_schedule}, active={self.is_active})>"
        )
