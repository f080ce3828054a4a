#!/usr/bin/env python3
"""Campaign wizard configuration

Autosave timing, draft rules, coverage-estimation constants and the
endpoints of the collaborating services.
"""
import os
from dataclasses import dataclass, field
from typing import Dict, Optional

def _int(val: str, default: int) -> int:
    try:
        return int(val) if val else default
    except ValueError:
        return default

def _float(val: str, default: float) -> float:
    try:
        return float(val) if val else default
    except ValueError:
        return default


@dataclass
class EstimationConfig:
    """Coverage-estimation constants (uncalibrated averages)"""
    population_density: float = 5000.0
    impressions_per_person: int = 3
    km_per_degree: float = 111.0

    @classmethod
    def from_env(cls) -> 'EstimationConfig':
        return cls(
            population_density=_float(os.getenv("WIZARD_POPULATION_DENSITY", ""), 5000.0),
            impressions_per_person=_int(os.getenv("WIZARD_IMPRESSIONS_PER_PERSON", ""), 3),
            km_per_degree=_float(os.getenv("WIZARD_KM_PER_DEGREE", ""), 111.0),
        )


@dataclass
class DraftStoreConfig:
    """PostgreSQL connection for the draft repository"""
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_db: str = "campaign_wizard_db"
    postgres_user: str = "postgres"
    postgres_password: str = "postgres"
    schema: str = "campaign_wizard"
    pool_min_size: int = 1
    pool_max_size: int = 5

    @classmethod
    def from_env(cls) -> 'DraftStoreConfig':
        return cls(
            postgres_host=os.getenv("POSTGRES_HOST", "localhost"),
            postgres_port=_int(os.getenv("POSTGRES_PORT", "5432"), 5432),
            postgres_db=os.getenv("WIZARD_POSTGRES_DB", "campaign_wizard_db"),
            postgres_user=os.getenv("POSTGRES_USER", "postgres"),
            postgres_password=os.getenv("POSTGRES_PASSWORD", "postgres"),
            schema=os.getenv("WIZARD_DB_SCHEMA", "campaign_wizard"),
            pool_min_size=_int(os.getenv("WIZARD_DB_POOL_MIN", "1"), 1),
            pool_max_size=_int(os.getenv("WIZARD_DB_POOL_MAX", "5"), 5),
        )


@dataclass
class WizardConfig:
    """Main campaign wizard configuration"""

    environment: str = "development"

    # Autosave / drafts
    autosave_debounce_ms: int = 2000
    min_draft_title_length: int = 3
    navigation_mode: str = "free"

    # Peer services (BalancesProvider, MediaUploader, FinalizeCampaign)
    wallet_service_url: str = "http://localhost:8208"
    media_service_url: str = "http://localhost:8222"
    campaign_service_url: str = "http://localhost:8240"
    http_timeout: float = 30.0
    internal_service_token: Optional[str] = None

    estimation: EstimationConfig = field(default_factory=EstimationConfig)
    draft_store: DraftStoreConfig = field(default_factory=DraftStoreConfig)

    @property
    def service_urls(self) -> Dict[str, str]:
        return {
            "wallet_service": self.wallet_service_url,
            "media_service": self.media_service_url,
            "campaign_service": self.campaign_service_url,
        }

    @classmethod
    def from_env(cls) -> 'WizardConfig':
        """Load wizard configuration from environment"""
        env = os.getenv("ENV") or os.getenv("ENVIRONMENT", "development")
        return cls(
            environment=env,
            autosave_debounce_ms=_int(os.getenv("WIZARD_AUTOSAVE_DEBOUNCE_MS", "2000"), 2000),
            # Drafts never go below a 3-character title
            min_draft_title_length=max(3, _int(os.getenv("WIZARD_MIN_DRAFT_TITLE_LENGTH", "3"), 3)),
            navigation_mode=os.getenv("WIZARD_NAVIGATION_MODE", "free"),
            wallet_service_url=os.getenv("WALLET_SERVICE_URL", "http://localhost:8208"),
            media_service_url=os.getenv("MEDIA_SERVICE_URL", "http://localhost:8222"),
            campaign_service_url=os.getenv("CAMPAIGN_SERVICE_URL", "http://localhost:8240"),
            http_timeout=_float(os.getenv("WIZARD_HTTP_TIMEOUT", "30"), 30.0),
            internal_service_token=os.getenv("INTERNAL_SERVICE_TOKEN"),
            estimation=EstimationConfig.from_env(),
            draft_store=DraftStoreConfig.from_env(),
        )
