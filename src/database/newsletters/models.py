"""SQLAlchemy ORM model for ingested newsletters."""

import uuid as uuid_module
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import Boolean, DateTime, Index, String, Text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from src.database.core import Base


class Newsletter(Base):
    """ORM model for newsletters table.

    One row per provider message. The sync path owns the body fields; digest
    processing owns extracted_content and topics, which are always written
    together.
    """

    __tablename__ = "newsletters"

    id: Mapped[uuid_module.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid_module.uuid4,
    )
    message_id: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    sender_address: Mapped[str] = mapped_column(String(320), nullable=False)
    sender_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    subject: Mapped[str] = mapped_column(String(1000), nullable=False)
    received_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    body_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    body_html: Mapped[str | None] = mapped_column(Text, nullable=True)
    extracted_content: Mapped[dict[str, Any] | None] = mapped_column(JSONB, nullable=True)
    topics: Mapped[list[str] | None] = mapped_column(JSONB, nullable=True)
    is_processed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
    )

    __table_args__ = (
        Index("idx_newsletters_received_at", "received_at"),
        Index("idx_newsletters_is_processed", "is_processed"),
    )

    @property
    def is_extracted(self) -> bool:
        """Check whether structured content has been extracted."""
        return self.extracted_content is not None

    def __repr__(self) -> str:
        """Return string representation of the newsletter."""
        return (
            f"<Newsletter(id={self.id}, sender={self.sender_address!r}, "
            f"subject={self.subject!r}, processed={self.is_processed})>"
        )
