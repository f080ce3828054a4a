"""
Component Test Fixtures for Campaign Wizard Service

Provides in-memory collaborators (draft store, balances, media uploader,
campaign finalizer, error observer) and wizard/autosave fixtures wired to
them. Debounce is shortened so timing tests run fast.
"""

import asyncio
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

import pytest
import pytest_asyncio

import sys
import os

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../.."))

from microservices.campaign_wizard_service.autosave_controller import AutosaveController
from microservices.campaign_wizard_service.models import (
    CampaignDraft,
    DraftStatus,
    MediaFile,
    NavigationMode,
    WizardSnapshot,
)
from microservices.campaign_wizard_service.protocols import (
    BalanceUnavailableError,
    DraftNotFoundError,
)
from microservices.campaign_wizard_service.wizard_controller import WizardController
from tests.contracts.campaign_wizard.data_contract import (
    TODAY,
    WizardSnapshotBuilder,
    WizardTestDataFactory,
)


DEBOUNCE_MS = 20
FIXED_NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)


# ====================
# Mock Collaborators
# ====================


class MockDraftStore:
    """In-memory draft store recording every upsert"""

    def __init__(self):
        self.drafts: Dict[str, CampaignDraft] = {}
        self.upsert_calls: List[Tuple[Optional[str], WizardSnapshot]] = []
        self.finalized: Dict[str, str] = {}
        self.fail_with: Optional[Exception] = None
        self.delay: float = 0
        self.in_flight = 0
        self.max_in_flight = 0
        self._counter = 0

    async def initialize(self):
        pass

    async def close(self):
        pass

    async def health_check(self) -> bool:
        return True

    def add(self, draft: CampaignDraft) -> CampaignDraft:
        self.drafts[draft.draft_id] = draft
        return draft

    async def upsert(self, draft_id: Optional[str], snapshot: WizardSnapshot, owner_id: str) -> str:
        self.upsert_calls.append((draft_id, snapshot))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.fail_with is not None:
                raise self.fail_with

            now = datetime.now(timezone.utc)
            if draft_id is None:
                self._counter += 1
                draft_id = f"drf_test_{self._counter:04d}"
                created_at = now
            elif draft_id in self.drafts:
                created_at = self.drafts[draft_id].created_at
            else:
                raise DraftNotFoundError(f"Draft not found: {draft_id}")

            self.drafts[draft_id] = CampaignDraft(
                draft_id=draft_id,
                owner_id=owner_id,
                status=DraftStatus.DRAFT,
                data=snapshot,
                created_at=created_at,
                updated_at=now,
            )
            return draft_id
        finally:
            self.in_flight -= 1

    async def fetch_by_id(self, draft_id: str) -> Optional[CampaignDraft]:
        return self.drafts.get(draft_id)

    async def mark_finalized(self, draft_id: str, campaign_id: str) -> CampaignDraft:
        draft = self.drafts.get(draft_id)
        if draft is None or draft.status != DraftStatus.DRAFT:
            raise DraftNotFoundError(f"Draft not found: {draft_id}")
        draft = draft.model_copy(update={"status": DraftStatus.FINALIZED, "campaign_id": campaign_id})
        self.drafts[draft_id] = draft
        self.finalized[draft_id] = campaign_id
        return draft

    @property
    def upserted_snapshots(self) -> List[WizardSnapshot]:
        return [snapshot for _, snapshot in self.upsert_calls]


class MockBalancesProvider:
    """Mock wallet balance lookup"""

    def __init__(self, available: Decimal = Decimal("1000"), fail: bool = False):
        self.available = Decimal(str(available))
        self.fail = fail
        self.delay: float = 0
        self.calls: List[str] = []

    async def get_available(self, owner_id: str) -> Decimal:
        self.calls.append(owner_id)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise BalanceUnavailableError("Wallet service unavailable")
        return self.available


class MockMediaUploader:
    """Mock media upload returning CDN-style URLs"""

    def __init__(self):
        self.uploads: List[MediaFile] = []
        self.fail_with: Optional[Exception] = None

    async def upload(self, file: MediaFile) -> str:
        self.uploads.append(file)
        if self.fail_with is not None:
            raise self.fail_with
        return f"https://cdn.example.com/media/{file.filename}"


class MockFinalizeCampaign:
    """Mock campaign creation"""

    def __init__(self, campaign_id: str = "cmp_test_0001"):
        self.campaign_id = campaign_id
        self.calls: List[Tuple[WizardSnapshot, str, Optional[str]]] = []
        self.fail_with: Optional[Exception] = None

    async def finalize(
        self,
        snapshot: WizardSnapshot,
        owner_id: str,
        draft_id: Optional[str] = None,
    ) -> str:
        self.calls.append((snapshot, owner_id, draft_id))
        if self.fail_with is not None:
            raise self.fail_with
        return self.campaign_id


class MockErrorObserver:
    """Collects non-blocking failure reports"""

    def __init__(self):
        self.reports: List[Tuple[str, BaseException]] = []

    def report(self, context: str, error: BaseException) -> None:
        self.reports.append((context, error))

    @property
    def contexts(self) -> List[str]:
        return [context for context, _ in self.reports]


# ====================
# Fixtures
# ====================


@pytest.fixture
def factory():
    """Provide test data factory"""
    return WizardTestDataFactory()


@pytest.fixture
def builder():
    return WizardSnapshotBuilder()


@pytest.fixture
def valid_snapshot(factory):
    return factory.make_valid_snapshot()


@pytest.fixture
def owner_id(factory):
    return factory.make_owner_id()


@pytest.fixture
def store():
    return MockDraftStore()


@pytest.fixture
def balances():
    return MockBalancesProvider()


@pytest.fixture
def media_uploader():
    return MockMediaUploader()


@pytest.fixture
def finalizer():
    return MockFinalizeCampaign()


@pytest.fixture
def error_observer():
    return MockErrorObserver()


@pytest.fixture
def debounce_seconds():
    return DEBOUNCE_MS / 1000


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def settle():
    """Sleep long enough for a pending debounce tick to fire and save"""

    async def _settle(windows: int = 4):
        await asyncio.sleep(DEBOUNCE_MS * windows / 1000)

    return _settle


@pytest_asyncio.fixture
async def autosave(store, owner_id, error_observer):
    """Autosave controller over the mock store"""
    controller = AutosaveController(
        store=store,
        owner_id=owner_id,
        debounce_ms=DEBOUNCE_MS,
        error_observer=error_observer,
        clock=lambda: FIXED_NOW,
    )
    yield controller
    await controller.stop()


@pytest_asyncio.fixture
async def make_wizard(store, owner_id, balances, finalizer, media_uploader, error_observer):
    """Build wizard sessions sharing the mock collaborators"""
    created: List[WizardController] = []

    def _make(
        snapshot: Optional[WizardSnapshot] = None,
        navigation_mode: NavigationMode = NavigationMode.LINEAR,
        initial_step: int = 0,
        **overrides,
    ) -> WizardController:
        autosave = AutosaveController(
            store=store,
            owner_id=owner_id,
            debounce_ms=DEBOUNCE_MS,
            error_observer=error_observer,
            clock=lambda: FIXED_NOW,
        )
        kwargs = dict(
            owner_id=owner_id,
            autosave=autosave,
            balances=balances,
            finalizer=finalizer,
            media_uploader=media_uploader,
            error_observer=error_observer,
            snapshot=snapshot,
            navigation_mode=navigation_mode,
            initial_step=initial_step,
            today=lambda: TODAY,
        )
        kwargs.update(overrides)
        wizard = WizardController(**kwargs)
        created.append(wizard)
        return wizard

    yield _make

    for wizard in created:
        await wizard.autosave.stop()


@pytest_asyncio.fixture
async def wizard(make_wizard):
    """Fresh linear wizard at the first step"""
    return make_wizard()


def fill(wizard: WizardController, snapshot: WizardSnapshot) -> None:
    """Enter every section of a snapshot through wizard edits"""
    for name in ("basic_info", "location", "audience", "objectives", "creatives"):
        values = snapshot.section(name).model_dump(exclude_none=True)
        if values:
            wizard.update(name, **values)


@pytest.fixture
def fill_wizard():
    return fill
