"""
Campaign Service Client

FinalizeCampaign backed by campaign_service.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from core.service_client_base import BaseServiceClient

from ..models import WizardSnapshot
from ..protocols import FinalizeCampaignError

logger = logging.getLogger(__name__)


class CampaignClient(BaseServiceClient):
    """Client for campaign_service"""

    service_name = "campaign_service"

    async def finalize(
        self,
        snapshot: WizardSnapshot,
        owner_id: str,
        draft_id: Optional[str] = None,
    ) -> str:
        """
        Create the live campaign from a complete snapshot.

        Raises:
            FinalizeCampaignError: carries the service's error detail verbatim
        """
        payload: Dict[str, Any] = {
            "owner_id": owner_id,
            "draft_id": draft_id,
            "configuration": snapshot.to_payload(),
        }
        try:
            response = await self.post("/api/v1/campaigns", json=payload)
            response.raise_for_status()
            campaign_id = response.json().get("campaign_id")

        except httpx.HTTPStatusError as e:
            logger.error(f"Campaign service rejected finalize for owner {owner_id}: {e.response.status_code}")
            raise FinalizeCampaignError(
                self.error_detail(e.response, f"Finalize failed (HTTP {e.response.status_code})")
            ) from e

        except httpx.HTTPError as e:
            logger.error(f"Error finalizing campaign for owner {owner_id}: {e}")
            raise FinalizeCampaignError(f"Campaign service unavailable: {e}") from e

        except (ValueError, AttributeError) as e:
            logger.error(f"Malformed finalize response for owner {owner_id}: {e}")
            raise FinalizeCampaignError("Campaign service returned a malformed response") from e

        if not campaign_id:
            raise FinalizeCampaignError("Campaign service returned no campaign id")
        return campaign_id
