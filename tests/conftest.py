"""
Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests.
"""

from types import MappingProxyType
from typing import Any, Dict, Optional

import pytest

from fundraiser_toolkit.campaigns.models import (
    CachedCampaignRecord,
    OnchainCampaignState,
)
from fundraiser_toolkit.shared.config import BLOCKDAG_CHAIN_ID, Settings
from fundraiser_toolkit.shared.registry import ChainRegistry

WEI = 10**18

V5_ADDRESS = "0x96bB4d907CC6F90E5677df7ad48Cf3ad12915890"
V6_ADDRESS = "0xaE54e4E8A75a81780361570c17b8660CEaD27053"
OTHER_ADDRESS = "0x52f541764E6e90eeBc5c21Ff570De0e2D63766B6"


@pytest.fixture
def settings() -> Settings:
    """Settings with a local BlockDAG RPC and the built-in deployments."""
    return Settings(
        rpc_urls=MappingProxyType(
            {BLOCKDAG_CHAIN_ID: "http://localhost:8545", 1: "http://localhost:8546"}
        ),
        onchain_read_timeout=1.0,
        request_timeout=5.0,
    )


@pytest.fixture
def registry(settings) -> ChainRegistry:
    return ChainRegistry(settings)


def make_record(
    record_id: str = "rec-1",
    campaign_id: Optional[int] = 1,
    contract_address: str = V5_ADDRESS,
    chain_id: Optional[int] = BLOCKDAG_CHAIN_ID,
    contract_version: Optional[str] = "v5",
    goal_usd: float = 1000.0,
    max_editions: int = 100,
    editions_sold_cached: int = 0,
    visible: bool = True,
    status: str = "minted",
    created_at: Optional[str] = "2024-05-01T00:00:00Z",
    **kwargs: Any,
) -> CachedCampaignRecord:
    """Build a cached record with sensible defaults."""
    return CachedCampaignRecord(
        record_id=record_id,
        campaign_id=campaign_id,
        contract_address=contract_address,
        chain_id=chain_id,
        contract_version=contract_version,
        goal_usd=goal_usd,
        max_editions=max_editions,
        editions_sold_cached=editions_sold_cached,
        visible=visible,
        status=status,
        created_at=created_at,
        **kwargs,
    )


def make_onchain(**overrides: Any) -> OnchainCampaignState:
    """Build an on-chain state; legacy-shaped (no cents, no paused) by default."""
    values: Dict[str, Any] = {
        "category": "medical",
        "metadata_uri": "ipfs://meta",
        "goal_native": 20_000 * WEI,
        "goal_usd_cents": None,
        "gross_raised_native": 0,
        "net_raised_native": 0,
        "editions_minted": 0,
        "max_editions": 100,
        "price_native": 200 * WEI,
        "price_usd_cents": None,
        "active": True,
        "paused": None,
        "closed": False,
    }
    values.update(overrides)
    return OnchainCampaignState(**values)


@pytest.fixture
def sample_submission_row() -> Dict[str, Any]:
    """Sample submissions row as returned by the datastore."""
    return {
        "id": "b7d3c1a0-0000-4000-8000-000000000001",
        "campaign_id": 7,
        "token_id": None,
        "contract_address": V6_ADDRESS,
        "chain_id": 1043,
        "contract_version": "v6",
        "goal": "5000",
        "num_copies": 250,
        "nft_editions": None,
        "sold_count": 12,
        "visible_on_marketplace": True,
        "status": "minted",
        "created_at": "2024-06-01T12:00:00+00:00",
        "title": "Clean water for Kisumu",
        "category": "community",
        "image_uri": "ipfs://img",
        "metadata_uri": "ipfs://meta",
    }


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test"
    )
    config.addinivalue_line("markers", "slow: mark test as slow-running")
