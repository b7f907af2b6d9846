"""Logging setup for scripts and the local server of record."""

import logging

from leadconsole.core.settings import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str | None = None) -> None:
    logger = logging.getLogger("leadconsole")
    if logger.handlers or logging.getLogger().handlers:
        logger.setLevel(level or get_settings().log_level)
        return
    logging.basicConfig(level=level or get_settings().log_level, format=LOG_FORMAT)
