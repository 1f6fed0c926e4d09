"""Healthcheck validator for container orchestration."""

import logging

from src.adapters.driven.config.settings import load_settings
from src.adapters.driven.logging.logging_config import configure_logs
from src.adapters.driven.offsets.file_store import FileOffsetStore

__all__ = ["main"]

logger = logging.getLogger(__name__)


def main() -> int:
    """Run health check for container orchestration.

    Validates:
    - Every option loads and passes validation.
    - The offset file, if it exists, holds a valid JSON object.

    Returns:
        0 if healthy, 1 if unhealthy.
    """
    configure_logs()

    try:
        settings = load_settings()
        offsets = FileOffsetStore(settings.offset_file_path).load()
    except Exception as exc:
        logger.error(f"HTTP source healthcheck FAILED: {exc}")
        return 1

    logger.info(f"HTTP source healthcheck OK ({len(offsets)} stored offsets)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
