"""
Wallet Service Client

BalancesProvider backed by wallet_service.
"""

import logging
from decimal import Decimal, InvalidOperation

import httpx

from core.service_client_base import BaseServiceClient

from ..protocols import BalanceUnavailableError

logger = logging.getLogger(__name__)


class WalletClient(BaseServiceClient):
    """Client for wallet_service"""

    service_name = "wallet_service"

    async def get_available(self, owner_id: str) -> Decimal:
        """
        Get the owner's available balance.

        Raises:
            BalanceUnavailableError: request failed or the response had no balance
        """
        try:
            response = await self.get(f"/api/v1/users/{owner_id}/balance")
            response.raise_for_status()
            return Decimal(str(response.json()["available_balance"]))

        except httpx.HTTPStatusError as e:
            logger.error(
                f"Wallet service returned {e.response.status_code} for owner {owner_id}"
            )
            raise BalanceUnavailableError(
                f"Balance unavailable (HTTP {e.response.status_code})"
            ) from e

        except httpx.HTTPError as e:
            logger.error(f"Error getting balance for owner {owner_id}: {e}")
            raise BalanceUnavailableError(f"Balance unavailable: {e}") from e

        except (KeyError, TypeError, ValueError, InvalidOperation) as e:
            logger.error(f"Malformed balance response for owner {owner_id}: {e}")
            raise BalanceUnavailableError("Balance unavailable: malformed response") from e
