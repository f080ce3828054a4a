#!/usr/bin/env python3
"""
Core Module for the Campaign Wizard

Shared infrastructure used by the wizard service.

COMPONENTS:
    - config/: Dataclass configuration loaded from the environment
    - logger.py: Service logger setup
    - service_client_base.py: Base HTTP client for peer services

USAGE:
    from core.config import get_settings
    from core.logger import setup_service_logger

    settings = get_settings()
    logger = setup_service_logger("campaign_wizard")
"""

__version__ = "1.0.0"
