"""SQLAlchemy ORM model for the processing run ledger."""

import uuid as uuid_module
from datetime import UTC, datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from src.database.core import Base
from src.enums import RunStatus


class ProcessingRun(Base):
    """ORM model for processing runs.

    One row per extraction batch or digest attempt. Rows are created in
    PROCESSING, move to COMPLETED or FAILED once, and are never changed again.
    """

    __tablename__ = "processing_runs"

    id: Mapped[uuid_module.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid_module.uuid4,
    )
    run_type: Mapped[str] = mapped_column(String(30), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=RunStatus.PENDING.value,
    )
    triggered_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    newsletter_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    newsletter_ids: Mapped[list[str]] = mapped_column(JSONB, nullable=False, default=list)
    summary_html: Mapped[str | None] = mapped_column(Text, nullable=True)
    summary_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    sent_to_email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    provider_message_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    schedule_id: Mapped[uuid_module.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("digest_schedules.id", ondelete="SET NULL"),
        nullable=True,
    )

    __table_args__ = (
        Index("idx_processing_runs_status", "status"),
        Index("idx_processing_runs_triggered_at", "triggered_at"),
        Index("idx_processing_runs_schedule_id", "schedule_id"),
    )

    @property
    def is_terminal(self) -> bool:
        """Check if the run has reached COMPLETED or FAILED."""
        return self.status in (RunStatus.COMPLETED.value, RunStatus.FAILED.value)

    def __repr__(self) -> str:
        """Return string representation of the run."""
        return (
            f"<ProcessingRun(id={self.id}, type={self.run_type}, status={self.status}, "
            f"newsletters={self.newsletter_count})>"
        )
