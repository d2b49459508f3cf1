"""Run the digest scheduler without the API.

Usage: python -m src.scheduler
"""

import logging

from dotenv import load_dotenv

from src.observability.sentry import init_sentry
from src.services import build_services
from src.utils.logging import configure_logging

logger = logging.getLogger(__name__)


def main() -> None:
    """Build the services and block running the timer loop."""
    load_dotenv()
    configure_logging()
    init_sentry()

    logger.info("Starting standalone digest scheduler")
    services = build_services()
    try:
        services.scheduler.run()
    finally:
        services.close()


if __name__ == "__main__":
    main()
