"""
Campaign Templates

Preset wizard values. Applying a template fills only fields the user has
left empty, in any step, so later steps can be populated before earlier
ones are valid.
"""

import logging
from typing import Any, Dict, Optional

from pydantic import Field

from .models import BaseContract, PrimaryObjective, SECTION_MODELS, WizardSnapshot

logger = logging.getLogger(__name__)


class CampaignTemplate(BaseContract):
    """Reusable set of wizard values"""
    template_id: str
    name: str
    description: Optional[str] = None
    niche: Optional[str] = None
    primary_objective: Optional[PrimaryObjective] = None
    data: WizardSnapshot = Field(default_factory=WizardSnapshot)


def _is_blank(value: Any) -> bool:
    return value is None or value == "" or value == [] or value == {}


def apply_template(snapshot: WizardSnapshot, template: CampaignTemplate) -> WizardSnapshot:
    """Return a snapshot with the template's values in every empty field"""
    result = snapshot
    for name in SECTION_MODELS:
        current = snapshot.section(name).model_dump()
        preset = template.data.section(name).model_dump(exclude_none=True)
        changes: Dict[str, Any] = {
            field: value
            for field, value in preset.items()
            if not _is_blank(value) and _is_blank(current.get(field))
        }
        if changes:
            result = result.with_section(name, **changes)

    logger.debug(f"Applied template {template.template_id} ({template.name})")
    return result


__all__ = ["CampaignTemplate", "apply_template"]
