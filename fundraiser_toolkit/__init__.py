"""Fundraiser Toolkit - reconciled cross-chain views of marketplace campaigns."""

__version__ = "1.0.0"

from .campaigns import CampaignService
from .shared.config import Settings
from .shared.registry import ChainRegistry

__all__ = ["CampaignService", "ChainRegistry", "Settings"]
