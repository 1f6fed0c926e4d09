"""Console logging setup for the HTTP source."""

import logging
import os
import sys

__all__ = ["configure_logs"]

_HANDLER_NAME = "http-source-console"


def configure_logs(level: str | None = None) -> None:
    """Configure console logging.

    Sets up:
    - Root logger at INFO level, writing to stderr (stdout carries records).
    - Framework loggers (aiohttp, asyncio) at WARNING level.
    - Application loggers (src) at `level`, else LOG_LEVEL, else DEBUG.
    - Format with timestamp, level, module, and line number.

    Calling it twice does not add a second handler.

    Args:
        level: Level name for application loggers.
    """
    log_format = "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d - %(message)s"
    date_format = "%d/%m/%y %H:%M:%S"

    root = logging.getLogger()
    root.setLevel(logging.INFO)
    if not any(h.get_name() == _HANDLER_NAME for h in root.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(log_format, date_format))
        root.addHandler(handler)

    # Suppress verbose framework loggers
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    app_level = (level or os.getenv("LOG_LEVEL") or "DEBUG").upper()
    logging.getLogger("src").setLevel(getattr(logging, app_level, logging.DEBUG))
