"""
Run the Notes API with uvicorn: `python -m notes_api`.

Settings are validated before the app is imported, so a missing DATABASE_URL
ends the process with exit status 1 and a readable log line.
"""

import logging
import sys

import uvicorn
from pydantic import ValidationError

from notes_api.config import get_settings

logger = logging.getLogger("notes_api")


def run() -> None:
    try:
        settings = get_settings()
    except ValidationError as e:
        logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
        logger.critical("Invalid configuration, DATABASE_URL must be set:\n%s", e)
        sys.exit(1)

    uvicorn.run(
        "notes_api.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
