"""Exceptions raised by digest processing."""


class DigestError(Exception):
    """Base class for digest failures.

    :param message: Human-readable description, recorded on the run.
    :param error_code: Stable machine-readable code.
    """

    error_code = "digest_error"

    def __init__(self, message: str, error_code: str | None = None) -> None:
        """Initialise the error.

        :param message: Human-readable description.
        :param error_code: Overrides the class-level error code.
        """
        super().__init__(message)
        self.message = message
        if error_code is not None:
            self.error_code = error_code


class NoCandidatesError(DigestError):
    """No newsletters were received inside the candidate window."""

    error_code = "no_candidates"


class NoMatchesError(DigestError):
    """Candidates exist but none match the schedule's topics."""

    error_code = "no_matches"


class NothingToProcessError(DigestError):
    """An ad-hoc processing request resolved to zero newsletters."""

    error_code = "nothing_to_process"


class ProcessingInProgressError(DigestError):
    """Another ad-hoc processing run is still in flight."""

    error_code = "processing_in_progress"


class ExtractionError(DigestError):
    """The content extractor failed for a single newsletter."""

    error_code = "extraction_failed"


class DigestGenerationError(DigestError):
    """The digest generator failed or returned an invalid digest."""

    error_code = "generation_failed"


class DigestDeliveryError(DigestError):
    """The rendered digest could not be sent."""

    error_code = "delivery_failed"


class ScheduleNotFoundError(DigestError):
    """The requested schedule does not exist."""

    error_code = "schedule_not_found"


class InvalidCronExpressionError(DigestError):
    """A cron expression could not be parsed."""

    error_code = "invalid_cron"
