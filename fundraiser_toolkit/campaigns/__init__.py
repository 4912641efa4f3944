"""Campaign reconciliation and aggregation."""

from .models import (
    CachedCampaignRecord,
    OnchainCampaignState,
    ReconciledCampaignState,
    ReconciledCampaignView,
)
from .service import CampaignListing, CampaignService

__all__ = [
    "CachedCampaignRecord",
    "CampaignListing",
    "CampaignService",
    "OnchainCampaignState",
    "ReconciledCampaignState",
    "ReconciledCampaignView",
]
