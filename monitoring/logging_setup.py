"""
Logging Setup

Applies the logging level from ``MonitoringSettings``.
"""

import logging

from config.settings import MonitoringSettings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(settings: MonitoringSettings) -> None:
    """
    Configure root logging from monitoring settings.

    Args:
        settings: Monitoring settings carrying ``log_level``

    Raises:
        ValueError: If the log level name is unknown
    """
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {settings.log_level}")

    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)
