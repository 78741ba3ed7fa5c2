"""Root logging configuration, applied once at session start."""

import logging

from config.settings import settings

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_configured = False


def configure_logging(level: str | None = None) -> None:
    global _configured  # noqa: PLW0603
    if _configured:
        return
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format=_FORMAT,
    )
    if settings.DEBUG:
        logging.getLogger("dl").setLevel(logging.DEBUG)
    _configured = True
