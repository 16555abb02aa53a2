from __future__ import annotations

import uvicorn
from loguru import logger

from config import get_settings
from relay.app import create_app


def configure_logging(level: str) -> None:
    logger.remove()
    logger.add(lambda msg: print(msg, end=""), level=level.upper(), backtrace=False, diagnose=False)


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    app = create_app(settings)
    logger.info("Listening on {}:{}", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
