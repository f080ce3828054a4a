"""
Campaign Wizard Protocols

Defines interfaces for the wizard's external collaborators.
Following the protocol-based architecture pattern.
"""

from decimal import Decimal
from typing import Optional, Protocol

from .models import (
    CampaignDraft,
    MediaFile,
    WizardSnapshot,
    WizardState,
)


# ====================
# Persistence Protocol
# ====================


class DraftStoreProtocol(Protocol):
    """Protocol for draft persistence"""

    async def upsert(
        self,
        draft_id: Optional[str],
        snapshot: WizardSnapshot,
        owner_id: str,
    ) -> str:
        """Create a draft (draft_id is None) or update it; returns the draft id"""
        ...

    async def fetch_by_id(self, draft_id: str) -> Optional[CampaignDraft]:
        """Fetch a draft by id; None when not found"""
        ...


# ====================
# Service Client Protocols
# ====================


class BalancesProviderProtocol(Protocol):
    """Protocol for the owner's available balance"""

    async def get_available(self, owner_id: str) -> Decimal:
        """Get the available balance (may be negative)"""
        ...


class MediaUploaderProtocol(Protocol):
    """Protocol for creative asset uploads"""

    async def upload(self, file: MediaFile) -> str:
        """Upload a file and return its opaque URL"""
        ...


class FinalizeCampaignProtocol(Protocol):
    """Protocol for committing a wizard snapshot as a live campaign"""

    async def finalize(
        self,
        snapshot: WizardSnapshot,
        owner_id: str,
        draft_id: Optional[str] = None,
    ) -> str:
        """Create the live campaign; returns the campaign id"""
        ...


class ErrorObserverProtocol(Protocol):
    """Protocol for the non-blocking failure sink"""

    def report(self, context: str, error: BaseException) -> None:
        """Report a failure that must not interrupt editing"""
        ...


# ====================
# Custom Exceptions
# ====================


class CampaignWizardError(Exception):
    """Base exception for campaign wizard errors"""
    pass


class DraftNotFoundError(CampaignWizardError):
    """Raised when a draft is not found (or is no longer a draft)"""
    pass


class DraftValidationError(CampaignWizardError):
    """Raised when a draft does not meet the persistence precondition"""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class InvalidWizardStateError(CampaignWizardError):
    """Raised when the wizard is in an invalid state for the operation"""

    def __init__(self, message: str, current_state: Optional[WizardState] = None):
        super().__init__(message)
        self.current_state = current_state


class BalanceUnavailableError(CampaignWizardError):
    """Raised when the available balance cannot be fetched"""
    pass


class FinalizeCampaignError(CampaignWizardError):
    """Raised when the live campaign cannot be created"""
    pass


class MediaUploadError(CampaignWizardError):
    """Raised when a creative asset upload fails"""
    pass


__all__ = [
    "DraftStoreProtocol",
    "BalancesProviderProtocol",
    "MediaUploaderProtocol",
    "FinalizeCampaignProtocol",
    "ErrorObserverProtocol",
    "CampaignWizardError",
    "DraftNotFoundError",
    "DraftValidationError",
    "InvalidWizardStateError",
    "BalanceUnavailableError",
    "FinalizeCampaignError",
    "MediaUploadError",
]
