"""Central enum definitions for the project."""

from enum import StrEnum


class SummaryLength(StrEnum):
    """How long each per-newsletter summary in a digest should be."""

    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


class FormatPreference(StrEnum):
    """How the user prefers digests to be laid out."""

    DIGEST = "digest"
    BULLETS = "bullets"
    DETAILED = "detailed"


class RunStatus(StrEnum):
    """Status of a processing run in the ledger."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class RunType(StrEnum):
    """What kind of work a processing run records."""

    EXTRACTION = "extraction"  # Ad-hoc extraction-only batch
    SCHEDULED_DIGEST = "scheduled_digest"  # Fired by the timer loop
    MANUAL_DIGEST = "manual_digest"  # Schedule triggered by a user
