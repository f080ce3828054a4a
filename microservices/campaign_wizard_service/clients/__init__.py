"""
Campaign Wizard Clients

Clients for the services behind the wizard's collaborators.
"""

from .wallet_client import WalletClient
from .media_client import MediaClient
from .campaign_client import CampaignClient

__all__ = [
    "WalletClient",
    "MediaClient",
    "CampaignClient",
]
