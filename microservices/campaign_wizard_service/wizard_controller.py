"""
Wizard Controller

Orchestrates one campaign-configuration session: the ordered steps, the
current-step pointer, validation-gated navigation and the finish
transition that turns the draft into a live campaign.

States: editing (at a step index) -> finishing -> finalized (terminal).
The balance is consulted only when finishing; saving a draft never is.
Edits and navigation are rejected while a finish attempt is running.
"""

import logging
from datetime import date
from typing import Any, Callable, List, Optional, Sequence

from pydantic import ValidationError

from . import balance_gate
from .autosave_controller import AutosaveController
from .coverage_estimator import (
    DEFAULT_PARAMETERS,
    EstimationParameters,
    estimate_coverage,
    estimate_from_section,
)
from .models import (
    AutosaveStatus,
    BalanceCheck,
    CoverageEstimate,
    FinishOutcome,
    FinishResult,
    MediaAttachResult,
    MediaFile,
    NavigationMode,
    NavigationResult,
    StepId,
    StepValidationResult,
    WizardSnapshot,
    WizardState,
    parse_location,
)
from .protocols import (
    BalancesProviderProtocol,
    BalanceUnavailableError,
    DraftValidationError,
    ErrorObserverProtocol,
    FinalizeCampaignError,
    FinalizeCampaignProtocol,
    InvalidWizardStateError,
    MediaUploaderProtocol,
    MediaUploadError,
)
from .step_schemas import ValidationContext, WizardStep, build_default_steps, meets_draft_precondition
from .templates import CampaignTemplate, apply_template

logger = logging.getLogger(__name__)


class WizardController:
    """Campaign wizard session"""

    def __init__(
        self,
        owner_id: str,
        autosave: AutosaveController,
        balances: BalancesProviderProtocol,
        finalizer: FinalizeCampaignProtocol,
        media_uploader: Optional[MediaUploaderProtocol] = None,
        error_observer: Optional[ErrorObserverProtocol] = None,
        steps: Optional[Sequence[WizardStep]] = None,
        snapshot: Optional[WizardSnapshot] = None,
        navigation_mode: NavigationMode = NavigationMode.LINEAR,
        initial_step: int = 0,
        estimation_params: EstimationParameters = DEFAULT_PARAMETERS,
        today: Callable[[], date] = date.today,
    ):
        self.owner_id = owner_id
        self.autosave = autosave
        self.balances = balances
        self.finalizer = finalizer
        self.media_uploader = media_uploader
        self.error_observer = error_observer
        self.estimation_params = estimation_params
        self._today = today

        self._steps: List[WizardStep] = list(steps) if steps is not None else build_default_steps()
        if not 0 <= initial_step <= len(self._steps):
            raise ValueError(f"initial_step must be between 0 and {len(self._steps)}")

        self._snapshot = snapshot or WizardSnapshot()
        self._current = initial_step
        self._mode = NavigationMode(navigation_mode)
        self._state = WizardState.EDITING
        self._finish_in_progress = False
        self._campaign_id: Optional[str] = None

    # ====================
    # Session State
    # ====================

    @property
    def snapshot(self) -> WizardSnapshot:
        return self._snapshot

    @property
    def steps(self) -> List[WizardStep]:
        return list(self._steps)

    @property
    def current_step(self) -> int:
        """Current step index; len(steps) is the review position"""
        return self._current

    @property
    def current_step_id(self) -> Optional[StepId]:
        if self.is_at_review:
            return None
        return self._steps[self._current].id

    @property
    def is_at_review(self) -> bool:
        return self._current == len(self._steps)

    @property
    def state(self) -> WizardState:
        return self._state

    @property
    def navigation_mode(self) -> NavigationMode:
        return self._mode

    @navigation_mode.setter
    def navigation_mode(self, mode: NavigationMode) -> None:
        self._mode = NavigationMode(mode)

    @property
    def campaign_id(self) -> Optional[str]:
        return self._campaign_id

    @property
    def draft_id(self) -> Optional[str]:
        return self.autosave.draft_id

    @property
    def autosave_status(self) -> AutosaveStatus:
        return self.autosave.status

    def _context(self, snapshot: Optional[WizardSnapshot] = None) -> ValidationContext:
        return ValidationContext.from_snapshot(snapshot or self._snapshot, self._today())

    def _begin_edit(self, operation: str) -> None:
        if self._state == WizardState.FINALIZED:
            raise InvalidWizardStateError(
                f"Cannot {operation}: campaign already finalized",
                current_state=self._state,
            )
        if self._finish_in_progress:
            raise InvalidWizardStateError(
                f"Cannot {operation} while the campaign is being finalized",
                current_state=self._state,
            )
        if self._state == WizardState.FINISHING:
            self._state = WizardState.EDITING

    # ====================
    # Editing
    # ====================

    def update(self, section: str, **changes: Any) -> WizardSnapshot:
        """Apply field changes to one section and notify autosave"""
        self._begin_edit("edit")
        self._set_snapshot(self._snapshot.with_section(section, **changes))
        return self._snapshot

    def apply_template(self, template: CampaignTemplate) -> WizardSnapshot:
        """Fill empty fields from a template"""
        self._begin_edit("apply a template")
        self._set_snapshot(apply_template(self._snapshot, template))
        logger.info(f"Template {template.template_id} applied for owner {self.owner_id}")
        return self._snapshot

    def _set_snapshot(self, snapshot: WizardSnapshot) -> None:
        if snapshot == self._snapshot:
            return
        self._snapshot = snapshot
        self.autosave.notify(snapshot)

    async def attach_media(self, file: MediaFile) -> MediaAttachResult:
        """
        Upload a creative asset and append its URL to the creatives step.

        Upload failures are reported and returned, never raised.
        """
        self._begin_edit("attach media")
        try:
            if self.media_uploader is None:
                raise MediaUploadError("No media uploader configured")
            url = await self.media_uploader.upload(file)
        except MediaUploadError as e:
            logger.warning(f"Media upload failed for {file.filename}: {e}")
            self._report("media_upload", e)
            return MediaAttachResult(error=str(e))

        media_urls = list(self._snapshot.creatives.media_urls or [])
        media_urls.append(url)
        self.update(StepId.CREATIVES.value, media_urls=media_urls)
        return MediaAttachResult(url=url)

    def _report(self, context: str, error: BaseException) -> None:
        if self.error_observer is not None:
            self.error_observer.report(context, error)

    # ====================
    # Validation
    # ====================

    async def validate_step(self, index: int) -> StepValidationResult:
        return await self._steps[index].validate(self._snapshot, self._context())

    async def validate_current(self) -> StepValidationResult:
        if self.is_at_review:
            return StepValidationResult.ok()
        return await self.validate_step(self._current)

    def step_completion(self) -> List[Optional[bool]]:
        """Per-step completeness; None for steps with nothing entered yet"""
        context = self._context()
        return [step.is_complete(self._snapshot, context) for step in self._steps]

    # ====================
    # Navigation
    # ====================

    async def next(self) -> NavigationResult:
        """Validate the current step and advance when it passes"""
        self._begin_edit("navigate")
        if self.is_at_review:
            return NavigationResult(moved=False, step_index=self._current)

        result = await self.validate_current()
        if not result.valid:
            return NavigationResult(moved=False, step_index=self._current, errors=result.errors)

        self._current += 1
        return NavigationResult(moved=True, step_index=self._current)

    def back(self) -> NavigationResult:
        self._begin_edit("navigate")
        if self._current == 0:
            return NavigationResult(moved=False, step_index=0)
        self._current -= 1
        return NavigationResult(moved=True, step_index=self._current)

    async def go_to(self, index: int) -> NavigationResult:
        """
        Jump to a step (or the review position).

        Forward jumps in linear mode require every lower step to be valid;
        backward jumps and free mode always move. Denials leave the pointer
        unchanged.
        """
        self._begin_edit("navigate")
        if not 0 <= index <= len(self._steps) or index == self._current:
            return NavigationResult(moved=False, step_index=self._current)

        if self._mode == NavigationMode.LINEAR and index > self._current:
            context = self._context()
            for step in self._steps[:index]:
                result = await step.validate(self._snapshot, context)
                if not result.valid:
                    logger.debug(f"Navigation to step {index} denied: {step.id.value} is invalid")
                    return NavigationResult(moved=False, step_index=self._current)

        self._current = index
        return NavigationResult(moved=True, step_index=self._current)

    # ====================
    # Derived Values
    # ====================

    def coverage_estimate(self) -> CoverageEstimate:
        """Coverage for the current location and budget (never raises)"""
        section = self._snapshot.location
        budget = self._snapshot.budget
        if section.is_empty():
            return CoverageEstimate.empty()
        try:
            spec = parse_location(section)
        except ValidationError as e:
            self._report("coverage_estimate", e)
            return estimate_from_section(section, budget, self.estimation_params)
        return estimate_coverage(spec, budget, self.estimation_params)

    async def check_balance(self) -> Optional[BalanceCheck]:
        """
        Current budget against the available balance, for display.

        Returns None while no budget is set.

        Raises:
            BalanceUnavailableError: balance could not be fetched
        """
        budget = self._snapshot.budget
        if budget is None:
            return None
        available = await self.balances.get_available(self.owner_id)
        return balance_gate.check_balance(budget, available)

    # ====================
    # Draft & Finish
    # ====================

    async def save_draft(self) -> str:
        """
        Persist the current snapshot as a draft, skipping step validation.

        Raises:
            DraftValidationError: title missing or shorter than the minimum
            InvalidWizardStateError: campaign already finalized
        """
        if self._state == WizardState.FINALIZED:
            raise InvalidWizardStateError(
                "Cannot save a draft: campaign already finalized",
                current_state=self._state,
            )
        if not meets_draft_precondition(self._snapshot, self.autosave.min_title_length):
            raise DraftValidationError(
                f"Title must have at least {self.autosave.min_title_length} characters to save a draft",
                field="title",
            )
        draft_id = await self.autosave.save_now(self._snapshot)
        logger.info(f"Draft {draft_id} saved for owner {self.owner_id}")
        return draft_id

    async def finish(self) -> FinishResult:
        """
        Validate every step, check the balance and finalize.

        Blocking outcomes are returned as FinishResult. A failed finalize
        call leaves the wizard in FINISHING so finish() can be retried.

        Raises:
            InvalidWizardStateError: already finalized or a finish is running
        """
        if self._state == WizardState.FINALIZED:
            raise InvalidWizardStateError(
                "Campaign already finalized", current_state=self._state
            )
        if self._finish_in_progress:
            raise InvalidWizardStateError(
                "A finish attempt is already running", current_state=self._state
            )

        self._finish_in_progress = True
        self._state = WizardState.FINISHING
        try:
            return await self._finish(self._snapshot)
        finally:
            self._finish_in_progress = False

    async def _finish(self, snapshot: WizardSnapshot) -> FinishResult:
        context = self._context(snapshot)
        for index, step in enumerate(self._steps):
            result = await step.validate(snapshot, context)
            if not result.valid:
                self._state = WizardState.EDITING
                self._current = index
                return FinishResult(
                    outcome=FinishOutcome.STEP_INVALID,
                    failed_step=step.id,
                    failed_step_index=index,
                    errors=result.errors,
                    message=f"{step.title}: {result.first_error}",
                    can_save_draft=meets_draft_precondition(snapshot, self.autosave.min_title_length),
                )

        try:
            available = await self.balances.get_available(self.owner_id)
        except BalanceUnavailableError as e:
            logger.error(f"Balance unavailable for owner {self.owner_id}: {e}")
            self._state = WizardState.EDITING
            return FinishResult(
                outcome=FinishOutcome.BALANCE_UNAVAILABLE,
                message=str(e),
                can_save_draft=True,
            )

        check = balance_gate.check_balance(snapshot.budget, available)
        if not check.sufficient:
            logger.info(
                f"Finish blocked for owner {self.owner_id}: budget {check.requested_budget} "
                f"exceeds available balance {check.available_balance}"
            )
            self._state = WizardState.EDITING
            return FinishResult(
                outcome=FinishOutcome.INSUFFICIENT_BALANCE,
                balance_check=check,
                message=balance_gate.insufficient_balance_message(check),
                can_save_draft=True,
            )

        # Settle autosave so the finalized campaign references the stored draft
        await self.autosave.flush()

        try:
            campaign_id = await self.finalizer.finalize(
                snapshot, self.owner_id, draft_id=self.autosave.draft_id
            )
        except FinalizeCampaignError as e:
            logger.error(f"Finalize failed for owner {self.owner_id}: {e}")
            return FinishResult(
                outcome=FinishOutcome.FINALIZE_FAILED,
                balance_check=check,
                message=str(e),
                can_save_draft=True,
            )

        self._campaign_id = campaign_id
        self._state = WizardState.FINALIZED
        await self.autosave.stop()
        logger.info(f"Campaign {campaign_id} finalized for owner {self.owner_id}")
        return FinishResult(
            outcome=FinishOutcome.FINALIZED,
            balance_check=check,
            campaign_id=campaign_id,
        )

    async def close(self) -> None:
        """Leave the wizard; a pending autosave is saved, never dropped"""
        await self.autosave.close()


__all__ = ["WizardController"]
