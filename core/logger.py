"""
Service Logger Setup

Configures the root handlers for a service from LoggingConfig.

Usage:
    from core.logger import setup_service_logger

    logger = setup_service_logger("campaign_wizard")
"""

import logging
import sys
from typing import Optional

from core.config import LoggingConfig, get_settings


def setup_service_logger(
    service_name: str,
    config: Optional[LoggingConfig] = None,
) -> logging.Logger:
    """
    Configure logging for a service and return its logger.

    Handlers are attached to the root logger once, so module-level
    ``logging.getLogger(__name__)`` loggers inherit them.
    """
    config = config or get_settings().logging
    level = getattr(logging, config.log_level.upper(), logging.INFO)
    formatter = logging.Formatter(config.log_format)

    root = logging.getLogger()
    root.setLevel(level)

    if not getattr(root, "_service_configured", False):
        if config.enable_console:
            console = logging.StreamHandler(sys.stdout)
            console.setFormatter(formatter)
            root.addHandler(console)
        if config.log_file:
            file_handler = logging.FileHandler(config.log_file)
            file_handler.setFormatter(formatter)
            root.addHandler(file_handler)
        root._service_configured = True

    logger = logging.getLogger(service_name)
    logger.info(f"Logging configured for {service_name} ({config.environment}, level={config.log_level})")
    return logger


__all__ = ["setup_service_logger"]
