"""SQLAlchemy ORM model for the single preferences row."""

from datetime import UTC, datetime

from sqlalchemy import Boolean, CheckConstraint, DateTime, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from src.database.core import Base
from src.enums import FormatPreference, SummaryLength

# The preferences table only ever holds this row
PREFERENCES_ROW_ID = 1


class Preferences(Base):
    """ORM model for user preferences.

    Defaults used to prefill new schedules. Exactly one row exists, enforced by
    a check constraint on the primary key.
    """

    __tablename__ = "preferences"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=PREFERENCES_ROW_ID)
    delivery_email: Mapped[str] = mapped_column(String(320), nullable=False)
    interests: Mapped[list[str]] = mapped_column(JSONB, nullable=False, default=list)
    format_preference: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=FormatPreference.DIGEST.value,
    )
    summary_length: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=SummaryLength.MEDIUM.value,
    )
    include_links: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    custom_prompt: Mapped[str | None] = mapped_column(Text, nullable=True)
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

    __table_args__ = (CheckConstraint(f"id = {PREFERENCES_ROW_ID}", name="single_row"),)

    def __repr__(self) -> str:
        """Return string representation of the preferences."""
        return f"<Preferences(email={self.delivery_email!r}, interests={self.interests})>"
