"""Mapping of digest failures to HTTP errors."""

from fastapi import HTTPException, status
from pydantic import BaseModel, Field

from src.digest.exceptions import (
    DigestError,
    InvalidCronExpressionError,
    NoCandidatesError,
    NoMatchesError,
    NothingToProcessError,
    ProcessingInProgressError,
    ScheduleNotFoundError,
)


class ErrorResponse(BaseModel):
    """Body of every error response."""

    detail: str = Field(..., description="Error description")


_STATUS_BY_ERROR: dict[type[DigestError], int] = {
    ScheduleNotFoundError: status.HTTP_404_NOT_FOUND,
    ProcessingInProgressError: status.HTTP_409_CONFLICT,
    NothingToProcessError: status.HTTP_400_BAD_REQUEST,
    NoCandidatesError: status.HTTP_400_BAD_REQUEST,
    NoMatchesError: status.HTTP_400_BAD_REQUEST,
    InvalidCronExpressionError: status.HTTP_400_BAD_REQUEST,
}


def to_http_exception(error: DigestError) -> HTTPException:
    """Convert a digest failure to an HTTPException.

    Failures of collaborators (generation, delivery) map to 502.

    :param error: The failure.
    :returns: The HTTP exception to raise.
    """
    status_code = _STATUS_BY_ERROR.get(type(error), status.HTTP_502_BAD_GATEWAY)
    return HTTPException(status_code=status_code, detail=error.message)
