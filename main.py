"""
Main entrypoint: Crypto Monetizer API server.

Env: API_HOST, API_PORT, MONETIZER_STORAGE_PROFILE, MONETIZER_DB_PATH, DATABASE_URL,
MONETIZER_FAILURE_INJECTION, LOG_LEVEL, LOG_FORMAT.

Equivalent: uvicorn crypto_monetizer.api_server.app:app --host 0.0.0.0 --port 3000
"""

import os
import sys

# Configure structured JSON logging before other imports that may log
from crypto_monetizer.logging import get_logger

logger = get_logger("main")


def main() -> None:
    """Validate configuration, then run the FastAPI server in the main thread."""
    from crypto_monetizer.config import get_settings
    from crypto_monetizer.core.exceptions import ConfigurationError

    try:
        settings = get_settings()
    except ConfigurationError as e:
        logger.error("main_config_error", message=e.message)
        sys.exit(1)

    if settings.resolved_database_url() is None:
        logger.warning(
            "main_storage_unconfigured",
            message="DATABASE_URL not set for hosted profile; settings reads return defaults and writes fail",
        )

    from crypto_monetizer.api_server.app import app
    import uvicorn

    logger.info("main_server_starting", host=settings.api_host, port=settings.api_port)
    uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_level=os.getenv("LOG_LEVEL", "info").lower())


if __name__ == "__main__":
    main()
