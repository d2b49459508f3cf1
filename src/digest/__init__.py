"""Digest core: extraction, matching, generation, rendering and orchestration."""

from src.digest.exceptions import (
    DigestDeliveryError,
    DigestError,
    DigestGenerationError,
    ExtractionError,
    InvalidCronExpressionError,
    NoCandidatesError,
    NoMatchesError,
    NothingToProcessError,
    ProcessingInProgressError,
    ScheduleNotFoundError,
)
from src.digest.orchestrator import (
    DigestOrchestrator,
    DigestRunResult,
    ProcessingRequestResult,
    ScheduleTickStats,
)

__all__ = [
    "DigestDeliveryError",
    "DigestError",
    "DigestGenerationError",
    "DigestOrchestrator",
    "DigestRunResult",
    "ExtractionError",
    "InvalidCronExpressionError",
    "NoCandidatesError",
    "NoMatchesError",
    "NothingToProcessError",
    "ProcessingInProgressError",
    "ProcessingRequestResult",
    "ScheduleNotFoundError",
    "ScheduleTickStats",
]
