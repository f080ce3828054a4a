"""
Campaign Wizard Factory

Factory for creating wizard sessions with proper dependency injection.
"""

import logging
from datetime import date
from typing import Callable, Optional

from core.config import Settings, get_settings
from core.logger import setup_service_logger

from .autosave_controller import AutosaveController
from .clients.campaign_client import CampaignClient
from .clients.media_client import MediaClient
from .clients.wallet_client import WalletClient
from .coverage_estimator import EstimationParameters
from .draft_repository import DraftRepository
from .models import DraftStatus, NavigationMode, WizardSnapshot
from .observers import LoggingErrorObserver
from .protocols import (
    BalancesProviderProtocol,
    DraftNotFoundError,
    ErrorObserverProtocol,
    FinalizeCampaignProtocol,
    MediaUploaderProtocol,
)
from .resume_step_resolver import ResumeStepResolver
from .step_schemas import build_default_steps
from .wizard_controller import WizardController

logger = logging.getLogger(__name__)


class DraftClosingFinalizer:
    """Finalizes through the campaign service, then closes the source draft"""

    def __init__(self, campaigns: FinalizeCampaignProtocol, repository: DraftRepository):
        self.campaigns = campaigns
        self.repository = repository

    async def finalize(
        self,
        snapshot: WizardSnapshot,
        owner_id: str,
        draft_id: Optional[str] = None,
    ) -> str:
        campaign_id = await self.campaigns.finalize(snapshot, owner_id, draft_id=draft_id)
        if draft_id is not None:
            try:
                await self.repository.mark_finalized(draft_id, campaign_id)
            except DraftNotFoundError:
                logger.warning(f"Draft {draft_id} was already closed when campaign {campaign_id} was created")
        return campaign_id


class CampaignWizardFactory:
    """Factory for creating campaign wizard components"""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        repository: Optional[DraftRepository] = None,
        balances: Optional[BalancesProviderProtocol] = None,
        media_uploader: Optional[MediaUploaderProtocol] = None,
        finalizer: Optional[FinalizeCampaignProtocol] = None,
        error_observer: Optional[ErrorObserverProtocol] = None,
        today: Callable[[], date] = date.today,
    ):
        self.settings = settings or get_settings()
        self.config = self.settings.wizard
        self._repository = repository
        self._balances = balances
        self._media_uploader = media_uploader
        self._finalizer = finalizer
        self._error_observer = error_observer or LoggingErrorObserver()
        self._today = today
        self._clients = []
        self._initialized = False

    async def initialize(self) -> None:
        """Initialize all components"""
        if self._initialized:
            return
        setup_service_logger(self.settings.logging.service_name, self.settings.logging)
        logger.info("Initializing Campaign Wizard components...")

        if self._repository is None:
            self._repository = DraftRepository(self.config.draft_store)
        await self._repository.initialize()

        if self._balances is None:
            self._balances = WalletClient(config=self.config)
            self._clients.append(self._balances)
        if self._media_uploader is None:
            self._media_uploader = MediaClient(config=self.config)
            self._clients.append(self._media_uploader)
        if self._finalizer is None:
            campaign_client = CampaignClient(config=self.config)
            self._clients.append(campaign_client)
            self._finalizer = DraftClosingFinalizer(campaign_client, self._repository)

        self._initialized = True
        logger.info("Campaign Wizard components initialized")

    async def close(self) -> None:
        """Close all components"""
        for client in self._clients:
            await client.close()
        self._clients = []
        if self._repository is not None:
            await self._repository.close()
        self._initialized = False
        logger.info("Campaign Wizard components closed")

    @property
    def repository(self) -> DraftRepository:
        if not self._initialized:
            raise RuntimeError("Factory not initialized")
        return self._repository

    # ====================
    # Sessions
    # ====================

    def _build_autosave(self, owner_id: str, draft_id: Optional[str] = None) -> AutosaveController:
        return AutosaveController(
            store=self.repository,
            owner_id=owner_id,
            debounce_ms=self.config.autosave_debounce_ms,
            min_title_length=self.config.min_draft_title_length,
            error_observer=self._error_observer,
            draft_id=draft_id,
        )

    def _build_controller(
        self,
        owner_id: str,
        autosave: AutosaveController,
        snapshot: Optional[WizardSnapshot] = None,
        navigation_mode: Optional[NavigationMode] = None,
        initial_step: int = 0,
    ) -> WizardController:
        return WizardController(
            owner_id=owner_id,
            autosave=autosave,
            balances=self._balances,
            finalizer=self._finalizer,
            media_uploader=self._media_uploader,
            error_observer=self._error_observer,
            steps=build_default_steps(),
            snapshot=snapshot,
            navigation_mode=navigation_mode or NavigationMode(self.config.navigation_mode),
            initial_step=initial_step,
            estimation_params=EstimationParameters.from_config(self.config.estimation),
            today=self._today,
        )

    def start_session(
        self,
        owner_id: str,
        navigation_mode: Optional[NavigationMode] = None,
    ) -> WizardController:
        """New wizard at the first step"""
        autosave = self._build_autosave(owner_id)
        logger.info(f"Started wizard session for owner {owner_id}")
        return self._build_controller(owner_id, autosave, navigation_mode=navigation_mode)

    async def resume_session(self, owner_id: str, draft_id: str) -> WizardController:
        """
        Reopen a draft at the first step that is not valid.

        Resumed sessions navigate freely so out-of-order progress stays
        reachable.

        Raises:
            DraftNotFoundError: missing, finalized or owned by someone else
        """
        draft = await self.repository.fetch_by_id(draft_id)
        if draft is None or draft.owner_id != owner_id or draft.status != DraftStatus.DRAFT:
            raise DraftNotFoundError(f"Draft not found: {draft_id}")

        resolver = ResumeStepResolver(build_default_steps())
        step_index = await resolver.resolve(draft.data, today=self._today())

        autosave = self._build_autosave(owner_id, draft_id=draft.draft_id)
        autosave.mark_loaded(draft.data)
        logger.info(f"Resumed draft {draft_id} for owner {owner_id} at step {step_index}")
        return self._build_controller(
            owner_id,
            autosave,
            snapshot=draft.data,
            navigation_mode=NavigationMode.FREE,
            initial_step=step_index,
        )


__all__ = ["CampaignWizardFactory", "DraftClosingFinalizer"]
