import sys

import uvicorn
from loguru import logger

from agenda.api.app import create_app
from agenda.config import AppConfig


def main() -> None:
    """Run the clinic agenda API with uvicorn."""
    config = AppConfig()

    logger.remove()
    logger.add(sys.stderr, level=config.log_level.upper())
    logger.info(
        "Starting clinic agenda API on {}:{} (store backend: {})",
        config.api.host,
        config.api.port,
        config.store.backend.value,
    )

    app = create_app(config)
    uvicorn.run(app, host=config.api.host, port=config.api.port, log_level="warning")


if __name__ == "__main__":
    main()
