"""Run the handler with uvicorn: ``python -m artto_handler``."""

from __future__ import annotations

import logging
import os

import uvicorn

from .config import Settings
from .errors import ConfigurationError
from .server import create_app_from_env

logger = logging.getLogger("artto_handler")


def main() -> None:
    try:
        settings = Settings.from_env()
    except ConfigurationError as err:
        raise SystemExit(str(err)) from err

    logging.basicConfig(
        level=settings.log_level,
        format="artto_handler %(levelname)s: %(message)s",
    )
    try:
        app = create_app_from_env(settings)
    except ConfigurationError as err:
        raise SystemExit(str(err)) from err

    logger.info("Artto OpenSea API Handler listening on port %d", settings.port)
    uvicorn.run(
        app,
        host=os.getenv("HOST", "0.0.0.0"),
        port=settings.port,
        timeout_keep_alive=120,
    )


if __name__ == "__main__":
    main()
