"""Setup Sentry."""

import logging
import os

import sentry_sdk
from sentry_sdk.integrations.logging import LoggingIntegration


def init_sentry() -> None:
    """Initialise Sentry if SENTRY_DSN is configured.

    Failed digest runs are logged at ERROR, so they surface as Sentry events.
    """
    dsn = os.environ.get("SENTRY_DSN")
    if not dsn:
        return

    logging_integration = LoggingIntegration(
        level=logging.INFO,  # breadcrumbs
        event_level=logging.ERROR,  # events
    )

    sentry_sdk.init(
        dsn=dsn,
        integrations=[logging_integration],
        environment=os.environ.get("APP_ENV", "local"),
        send_default_pii=False,
        traces_sample_rate=float(os.environ.get("SENTRY_TRACES_SAMPLE_RATE", "0.1")),
    )
