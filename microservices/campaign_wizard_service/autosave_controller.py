"""
Autosave Controller

Watches the wizard snapshot and persists a draft copy after a quiet
period. At most one upsert is ever in flight; a debounce tick that fires
while a save is running re-arms itself instead of starting a second one.
"""

import asyncio
import logging
from datetime import datetime
from typing import Callable, Optional

from .models import AutosaveStatus, WizardSnapshot, utcnow
from .protocols import (
    DraftStoreProtocol,
    DraftValidationError,
    ErrorObserverProtocol,
    InvalidWizardStateError,
)
from .step_schemas import MIN_DRAFT_TITLE_LENGTH, meets_draft_precondition

logger = logging.getLogger(__name__)


class AutosaveController:
    """Debounced draft persistence for one wizard session"""

    DEFAULT_DEBOUNCE_MS = 2000

    def __init__(
        self,
        store: DraftStoreProtocol,
        owner_id: str,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
        min_title_length: int = MIN_DRAFT_TITLE_LENGTH,
        error_observer: Optional[ErrorObserverProtocol] = None,
        draft_id: Optional[str] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.owner_id = owner_id
        self.debounce_seconds = debounce_ms / 1000
        self.min_title_length = max(MIN_DRAFT_TITLE_LENGTH, min_title_length)
        self.error_observer = error_observer
        self._clock = clock

        self._draft_id = draft_id
        self._latest: Optional[WizardSnapshot] = None
        self._last_saved: Optional[WizardSnapshot] = None
        self._timer: Optional[asyncio.TimerHandle] = None
        self._in_flight: Optional[asyncio.Task] = None
        self._closed = False

        self._is_saving = False
        self._last_saved_at: Optional[datetime] = None
        self._last_error: Optional[str] = None

    # ====================
    # Status
    # ====================

    @property
    def draft_id(self) -> Optional[str]:
        return self._draft_id

    @property
    def status(self) -> AutosaveStatus:
        return AutosaveStatus(
            is_saving=self._is_saving,
            last_saved_at=self._last_saved_at,
            last_error=self._last_error,
            draft_id=self._draft_id,
        )

    @property
    def has_pending_save(self) -> bool:
        return self._timer is not None

    @property
    def is_closed(self) -> bool:
        return self._closed

    def mark_loaded(self, snapshot: WizardSnapshot) -> None:
        """Record a snapshot that was just read from the store as already saved"""
        self._latest = snapshot
        self._last_saved = snapshot

    # ====================
    # Change Notification
    # ====================

    def notify(self, snapshot: WizardSnapshot) -> None:
        """Record a new snapshot and (re)start the debounce window"""
        if self._closed:
            logger.debug("Autosave closed, ignoring snapshot change")
            return
        if snapshot == self._latest:
            return
        self._latest = snapshot
        self._arm_timer()

    def _arm_timer(self) -> None:
        self._cancel_timer()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.debounce_seconds, self._on_timer)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_timer(self) -> None:
        self._timer = None
        if self._closed:
            return
        if self._save_in_flight():
            # Extend the window; the running save finishes first
            self._arm_timer()
            return
        self._in_flight = asyncio.get_running_loop().create_task(self._save(force=False))

    def _save_in_flight(self) -> bool:
        return self._in_flight is not None and not self._in_flight.done()

    async def _wait_for_in_flight(self) -> None:
        while self._save_in_flight():
            try:
                await asyncio.shield(self._in_flight)
            except Exception:
                # Raised to (and reported by) the explicit save that owns it
                continue

    # ====================
    # Saving
    # ====================

    async def _save(self, force: bool, raise_errors: bool = False) -> Optional[str]:
        snapshot = self._latest
        if snapshot is None or not meets_draft_precondition(snapshot, self.min_title_length):
            logger.debug("Skipping autosave: title shorter than the draft minimum")
            return self._draft_id
        if not force and self._draft_id is not None and snapshot == self._last_saved:
            return self._draft_id

        self._is_saving = True
        try:
            returned_id = await self.store.upsert(self._draft_id, snapshot, self.owner_id)
        except Exception as e:
            self._last_error = str(e)
            logger.warning(f"Draft autosave failed for owner {self.owner_id}: {e}")
            if self.error_observer is not None:
                self.error_observer.report("autosave", e)
            if raise_errors:
                raise
            return None
        finally:
            self._is_saving = False

        if self._draft_id is None:
            self._draft_id = returned_id
            logger.info(f"Draft {returned_id} created for owner {self.owner_id}")
        self._last_saved = snapshot
        self._last_saved_at = self._clock()
        self._last_error = None
        return self._draft_id

    async def save_now(self, snapshot: Optional[WizardSnapshot] = None) -> str:
        """
        Explicit save: cancel the pending tick and persist immediately.

        Waits for an in-flight save first so upserts stay ordered.

        Raises:
            DraftValidationError: title missing or too short
            Exception: whatever the draft store raised
        """
        if self._closed:
            raise InvalidWizardStateError("Autosave is closed for this session")
        if snapshot is not None:
            self._latest = snapshot
        if self._latest is None or not meets_draft_precondition(self._latest, self.min_title_length):
            raise DraftValidationError(
                f"Title must have at least {self.min_title_length} characters to save a draft",
                field="title",
            )

        self._cancel_timer()
        await self._wait_for_in_flight()
        task = asyncio.get_running_loop().create_task(self._save(force=True, raise_errors=True))
        self._in_flight = task
        # A cancelled caller must not take the upsert down with it
        return await asyncio.shield(task)

    async def flush(self) -> None:
        """
        Settle autosave before leaving the wizard.

        An in-flight save is awaited, never cancelled. A pending tick is
        replaced by an immediate save, which also retries a failed one.
        """
        self._cancel_timer()
        await self._wait_for_in_flight()
        if self._latest is not None and self._latest != self._last_saved:
            task = asyncio.get_running_loop().create_task(self._save(force=False))
            self._in_flight = task
            await asyncio.shield(task)

    async def close(self) -> None:
        """Flush and stop watching"""
        if self._closed:
            return
        await self.flush()
        self._closed = True

    async def stop(self) -> None:
        """Stop watching without a final save (the draft was finalized)"""
        self._closed = True
        self._cancel_timer()
        await self._wait_for_in_flight()


__all__ = ["AutosaveController"]
