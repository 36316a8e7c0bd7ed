"""Console logging for the relay process."""

from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s %(levelname)s:%(name)s:%(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_LOG_LEVEL = "INFO"


def _clean_env_value(value: str | None, default: str) -> str:
    if value is None:
        return default
    return value.strip().strip('"').strip("'") or default


def configure_logging(service_name: str) -> None:
    """Configure the root logger once, before the app is built."""
    level_name = _clean_env_value(os.getenv("LOG_LEVEL"), DEFAULT_LOG_LEVEL).upper()
    level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATE_FORMAT, force=True)
    # stripe logs every request at INFO
    logging.getLogger("stripe").setLevel(max(level, logging.WARNING))
    logging.getLogger(service_name).info("Logging configured (level=%s)", logging.getLevelName(level))
