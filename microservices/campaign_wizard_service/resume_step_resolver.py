"""
Resume Step Resolver

Finds where a reloaded draft should resume by replaying step validation
in order. Steps are awaited one at a time and the replay stops at the
first failure; a stored "last viewed step" is never trusted.
"""

import logging
from datetime import date
from typing import List, Optional, Sequence

from .models import WizardSnapshot
from .step_schemas import ValidationContext, WizardStep, build_default_steps

logger = logging.getLogger(__name__)


class ResumeStepResolver:
    """Resume position for a loaded draft"""

    def __init__(self, steps: Optional[Sequence[WizardStep]] = None):
        self.steps: List[WizardStep] = list(steps) if steps is not None else build_default_steps()

    async def resolve(
        self,
        snapshot: WizardSnapshot,
        today: Optional[date] = None,
        context: Optional[ValidationContext] = None,
    ) -> int:
        """
        Index of the first invalid step, or len(steps) when every step
        passes (the review position).
        """
        context = context or ValidationContext.from_snapshot(snapshot, today)
        for index, step in enumerate(self.steps):
            result = await step.validate(snapshot, context)
            if not result.valid:
                logger.debug(f"Resume at step {index} ({step.id.value}): {result.first_error}")
                return index
        return len(self.steps)


__all__ = ["ResumeStepResolver"]
