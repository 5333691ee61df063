"""Main application entry point."""

import logging

import uvicorn
from dotenv import load_dotenv

# Load environment variables before settings are first read
load_dotenv()

from rentbook.config import get_settings  # noqa: E402
from rentbook.services.logging import setup_server_logging  # noqa: E402

logger = logging.getLogger(__name__)


def main() -> None:
    """Configure logging and serve the API with uvicorn."""
    settings = get_settings()
    setup_server_logging(settings.log_file, settings.log_level)

    from rentbook.api.app import app

    logger.info("Starting Rentbook API on %s:%d", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
