#!/usr/bin/env python3
"""Modular configuration system for the campaign wizard

Configuration hierarchy:
- logging_config: Logging configuration
- wizard_config: Autosave, estimation constants, draft store and peer services
"""
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from .logging_config import LoggingConfig
from .wizard_config import DraftStoreConfig, EstimationConfig, WizardConfig

# Load environment file based on ENV
env = os.getenv("ENV") or os.getenv("ENVIRONMENT", "development")
env_files = {
    "development": "deployment/environments/dev.env",
    "dev": "deployment/environments/dev.env",
    "testing": "deployment/environments/test.env",
    "test": "deployment/environments/test.env",
    "staging": "deployment/environments/staging.env",
    "production": "deployment/environments/production.env",
}
env_file = env_files.get(env, "deployment/environments/dev.env")
load_dotenv(env_file, override=False)


@dataclass
class Settings:
    """Complete configuration with all sub-configs"""
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    wizard: WizardConfig = field(default_factory=WizardConfig)

    @classmethod
    def from_env(cls) -> 'Settings':
        return cls(
            logging=LoggingConfig.from_env(),
            wizard=WizardConfig.from_env(),
        )


# Create global settings instance
settings = Settings.from_env()

def get_settings() -> Settings:
    """Get global settings instance"""
    return settings

def reload_settings() -> Settings:
    """Reload settings from environment"""
    global settings
    settings = Settings.from_env()
    return settings

__all__ = [
    'Settings',
    'get_settings',
    'reload_settings',
    'settings',
    'LoggingConfig',
    'WizardConfig',
    'EstimationConfig',
    'DraftStoreConfig',
]
