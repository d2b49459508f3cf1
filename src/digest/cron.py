"""Cron expression evaluation for digest schedules."""

from datetime import UTC, datetime

from croniter import croniter

from src.digest.exceptions import InvalidCronExpressionError

# Presets offered when creating a schedule
CRON_PRESETS: list[dict[str, str]] = [
    {"name": "Daily at 8am", "cron": "0 8 * * *", "description": "Every day at 8:00 AM"},
    {"name": "Daily at 6pm", "cron": "0 18 * * *", "description": "Every day at 6:00 PM"},
    {"name": "Weekdays at 8am", "cron": "0 8 * * 1-5", "description": "Monday-Friday at 8:00 AM"},
    {"name": "Monday & Wednesday", "cron": "0 8 * * 1,3", "description": "Mon & Wed at 8:00 AM"},
    {"name": "Monday & Friday", "cron": "0 8 * * 1,5", "description": "Mon & Fri at 8:00 AM"},
    {"name": "Weekly on Monday", "cron": "0 8 * * 1", "description": "Every Monday at 8:00 AM"},
    {"name": "Weekly on Sunday", "cron": "0 10 * * 0", "description": "Every Sunday at 10:00 AM"},
]

CRON_FIELD_COUNT = 5


def validate_cron_expression(cron_expression: str) -> str:
    """Validate a standard five-field cron expression.

    :param cron_expression: The expression to validate.
    :returns: The expression with surrounding whitespace removed.
    :raises InvalidCronExpressionError: If the expression is not valid.
    """
    expression = cron_expression.strip()
    if len(expression.split()) != CRON_FIELD_COUNT:
        raise InvalidCronExpressionError(
            f"Cron expression must have {CRON_FIELD_COUNT} fields: '{cron_expression}'"
        )
    if not croniter.is_valid(expression):
        raise InvalidCronExpressionError(f"Invalid cron expression: '{cron_expression}'")
    return expression


def calculate_next_cron_trigger(cron_expression: str, after: datetime | None = None) -> datetime:
    """Calculate the next trigger time for a cron expression.

    The result is strictly later than ``after``.

    :param cron_expression: Standard cron expression (5 fields).
    :param after: Calculate next trigger after this time. Defaults to now.
    :returns: Next trigger datetime in UTC.
    :raises InvalidCronExpressionError: If the expression is not valid.
    """
    expression = validate_cron_expression(cron_expression)

    if after is None:
        after = datetime.now(UTC)
    elif after.tzinfo is None:
        after = after.replace(tzinfo=UTC)

    cron = croniter(expression, after.astimezone(UTC))
    next_time = cron.get_next(datetime)

    # Ensure timezone awareness
    if next_time.tzinfo is None:
        next_time = next_time.replace(tzinfo=UTC)

    return next_time
