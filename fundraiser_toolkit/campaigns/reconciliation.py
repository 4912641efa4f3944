"""
Reconciliation of cached campaign records against on-chain state.

Authority policy:
- editions sold only ratchets up: max(cached, minted)
- max editions takes the on-chain value whenever it is positive
- gross raised comes from chain only when the chain is strictly ahead of
  the cache on editions; otherwise it is derived from the cached count
- descriptive fields always come from the cached record
"""

from typing import Optional

from fundraiser_toolkit.campaigns.aggregation import price_per_unit
from fundraiser_toolkit.campaigns.decoder import cents_to_usd, wei_to_usd
from fundraiser_toolkit.campaigns.models import (
    CachedCampaignRecord,
    OnchainCampaignState,
    ReconciledCampaignState,
)
from fundraiser_toolkit.shared.registry import ContractTarget

RAISED_SOURCE_ONCHAIN = "onchain"
RAISED_SOURCE_CACHED = "cached"


def reconcile(
    cached: CachedCampaignRecord,
    onchain: Optional[OnchainCampaignState],
    target: ContractTarget,
) -> ReconciledCampaignState:
    """Merge one cached record with its (optional) on-chain read."""
    cached_sold = cached.editions_sold_cached
    minted = (onchain.editions_minted or 0) if onchain is not None else 0

    editions_sold = max(cached_sold, minted) if onchain is not None else cached_sold

    max_editions = cached.max_editions
    if onchain is not None and (onchain.max_editions or 0) > 0:
        max_editions = onchain.max_editions

    if onchain is not None and minted > cached_sold:
        gross_raised = wei_to_usd(onchain.gross_raised_native, target.usd_rate)
        net_raised: Optional[float] = wei_to_usd(
            onchain.net_raised_native, target.usd_rate
        )
        raised_source = RAISED_SOURCE_ONCHAIN
    else:
        gross_raised = cached_sold * price_per_unit(cached.goal_usd, max_editions)
        net_raised = None
        raised_source = RAISED_SOURCE_CACHED

    return ReconciledCampaignState(
        record_id=cached.record_id,
        campaign_id=int(cached.campaign_id),
        contract_address=target.contract_address,
        chain_id=target.chain_id,
        contract_version=target.version,
        goal_usd=cached.goal_usd,
        max_editions=max_editions,
        editions_sold=editions_sold,
        editions_sold_cached=cached_sold,
        gross_raised_usd=gross_raised,
        net_raised_usd=net_raised,
        onchain_available=onchain is not None,
        raised_source=raised_source,
        title=cached.title,
        category=cached.category,
        image_uri=cached.image_uri,
        metadata_uri=cached.metadata_uri,
        created_at=cached.created_at,
    )


def onchain_goal_usd(onchain: OnchainCampaignState, usd_rate: float) -> float:
    """Goal in USD from chain: explicit cents when exposed, else converted."""
    goal = cents_to_usd(onchain.goal_usd_cents)
    if goal is not None:
        return goal
    return wei_to_usd(onchain.goal_native, usd_rate)


def reconcile_onchain_only(
    campaign_id: int,
    onchain: OnchainCampaignState,
    target: ContractTarget,
) -> ReconciledCampaignState:
    """State for a campaign the datastore does not know, read by override."""
    return ReconciledCampaignState(
        record_id="",
        campaign_id=campaign_id,
        contract_address=target.contract_address,
        chain_id=target.chain_id,
        contract_version=target.version,
        goal_usd=onchain_goal_usd(onchain, target.usd_rate),
        max_editions=onchain.max_editions or 0,
        editions_sold=onchain.editions_minted or 0,
        editions_sold_cached=0,
        gross_raised_usd=wei_to_usd(onchain.gross_raised_native, target.usd_rate),
        net_raised_usd=wei_to_usd(onchain.net_raised_native, target.usd_rate),
        onchain_available=True,
        raised_source=RAISED_SOURCE_ONCHAIN,
        category=onchain.category,
        metadata_uri=onchain.metadata_uri,
    )
