"""
Type definitions for fundraiser campaigns.

Cached records come from the submission datastore, on-chain states are
decoded fresh per request, and reconciled states/views are the engine's
output. Nothing here is persisted by the toolkit.
"""

from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Tuple, TypedDict

WEI_PER_NATIVE = 10**18

DEFAULT_MAX_EDITIONS = 100

MINTED_STATUS = "minted"

# =============================================================================
# HELPERS
# =============================================================================


def _to_int(value: Any, default: int = 0) -> int:
    if value is None or value == "":
        return default
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return default


def _to_float(value: Any, default: float = 0.0) -> float:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _to_optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _truthy_flag(value: Any) -> bool:
    """Visibility flags arrive as booleans or the string "true"."""
    return value is True or value == "true"


# =============================================================================
# CACHED (DATASTORE) TYPES
# =============================================================================


@dataclass(frozen=True)
class CachedCampaignRecord:
    """Campaign row owned by the submission workflow. Read-only here."""

    record_id: str
    campaign_id: Optional[int]
    contract_address: str
    chain_id: Optional[int]
    contract_version: Optional[str]
    goal_usd: float
    max_editions: int
    editions_sold_cached: int
    visible: bool
    created_at: Optional[str] = None
    status: str = ""
    title: Optional[str] = None
    category: Optional[str] = None
    image_uri: Optional[str] = None
    metadata_uri: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "CachedCampaignRecord":
        """Map a submissions row; legacy rows carry token_id instead of campaign_id."""
        campaign_id = row.get("campaign_id")
        if campaign_id is None:
            campaign_id = row.get("token_id")

        max_editions = _to_int(
            row.get("num_copies") or row.get("nft_editions"),
            DEFAULT_MAX_EDITIONS,
        )

        return cls(
            record_id=str(row.get("id", "")),
            campaign_id=_to_optional_int(campaign_id),
            contract_address=(row.get("contract_address") or "").strip(),
            chain_id=_to_optional_int(row.get("chain_id")),
            contract_version=row.get("contract_version") or None,
            goal_usd=_to_float(row.get("goal")),
            max_editions=max_editions,
            editions_sold_cached=_to_int(row.get("sold_count")),
            visible=_truthy_flag(row.get("visible_on_marketplace")),
            created_at=row.get("created_at"),
            status=row.get("status") or "",
            title=row.get("title"),
            category=row.get("category"),
            image_uri=row.get("image_uri"),
            metadata_uri=row.get("metadata_uri"),
        )

    @property
    def is_listable(self) -> bool:
        """Minted and flagged visible on the marketplace."""
        return self.status == MINTED_STATUS and self.visible


@dataclass(frozen=True)
class TipRecord:
    """One row of the platform gift ledger."""

    campaign_id: int
    tip_usd: float

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "TipRecord":
        return cls(
            campaign_id=_to_int(row.get("campaign_id")),
            tip_usd=_to_float(row.get("tip_usd")),
        )


@dataclass(frozen=True)
class CampaignUpdate:
    """An approved campaign update (only its owner and review time matter)."""

    record_id: str
    reviewed_at: Optional[str]

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "CampaignUpdate":
        return cls(
            record_id=str(row.get("submission_id", "")),
            reviewed_at=row.get("reviewed_at"),
        )


# =============================================================================
# ON-CHAIN TYPES
# =============================================================================


@dataclass(frozen=True)
class OnchainCampaignState:
    """
    Canonical getCampaign result, independent of contract generation.

    Amounts are native-wei integers. Fields a generation does not expose
    are None; nothing is defaulted to zero here.
    """

    category: Optional[str]
    metadata_uri: Optional[str]
    goal_native: Optional[int]
    goal_usd_cents: Optional[int]
    gross_raised_native: Optional[int]
    net_raised_native: Optional[int]
    editions_minted: Optional[int]
    max_editions: Optional[int]
    price_native: Optional[int]
    price_usd_cents: Optional[int]
    active: Optional[bool]
    paused: Optional[bool]
    closed: Optional[bool]


# =============================================================================
# RECONCILED TYPES
# =============================================================================


@dataclass(frozen=True)
class ReconciledCampaignState:
    """Cached record merged with an optional on-chain read."""

    record_id: str
    campaign_id: int
    contract_address: str
    chain_id: int
    contract_version: str
    goal_usd: float
    max_editions: int
    editions_sold: int
    editions_sold_cached: int
    gross_raised_usd: float
    net_raised_usd: Optional[float]
    onchain_available: bool
    raised_source: str  # "onchain" or "cached"
    title: Optional[str] = None
    category: Optional[str] = None
    image_uri: Optional[str] = None
    metadata_uri: Optional[str] = None
    created_at: Optional[str] = None

    @property
    def key(self) -> Tuple[str, int, int]:
        return (self.contract_address.lower(), self.chain_id, self.campaign_id)


class ReconciledCampaignViewDict(TypedDict):
    """Campaign view dictionary for JSON serialization."""

    recordId: str
    campaignId: int
    contractAddress: str
    chainId: int
    contractVersion: str
    title: Optional[str]
    category: Optional[str]
    imageUri: Optional[str]
    metadataUri: Optional[str]
    goalUsd: float
    maxEditions: int
    editionsSold: int
    editionsSoldCached: int
    pricePerUnit: float
    raisedUsd: float
    grossRaisedUsd: float
    netRaisedUsd: Optional[float]
    nftSalesUsd: float
    tipsUsd: float
    ledgerTipsUsd: float
    progress: int
    remaining: Optional[int]
    soldOut: bool
    active: bool
    onchainAvailable: bool
    raisedSource: str
    updateCount: int
    lastUpdated: Optional[str]
    hasRecentUpdate: bool
    createdAt: Optional[str]


class CampaignListDict(TypedDict):
    """Paginated list response."""

    items: List[ReconciledCampaignViewDict]
    total: int
    nextCursor: Optional[int]


@dataclass(frozen=True)
class ReconciledCampaignView:
    """Display-ready projection row with derived USD figures."""

    state: ReconciledCampaignState
    price_per_unit: float
    raised_usd: float
    nft_sales_usd: float
    tips_usd: float
    progress: int
    remaining: Optional[int]
    sold_out: bool
    active: bool
    ledger_tips_usd: float = 0.0
    update_count: int = 0
    last_updated: Optional[str] = None
    has_recent_update: bool = False

    @property
    def contract_address(self) -> str:
        return self.state.contract_address

    @property
    def campaign_id(self) -> int:
        return self.state.campaign_id

    @property
    def editions_sold(self) -> int:
        return self.state.editions_sold

    @property
    def max_editions(self) -> int:
        return self.state.max_editions

    def to_dict(self) -> ReconciledCampaignViewDict:
        s = self.state
        return ReconciledCampaignViewDict(
            recordId=s.record_id,
            campaignId=s.campaign_id,
            contractAddress=s.contract_address,
            chainId=s.chain_id,
            contractVersion=s.contract_version,
            title=s.title,
            category=s.category,
            imageUri=s.image_uri,
            metadataUri=s.metadata_uri,
            goalUsd=s.goal_usd,
            maxEditions=s.max_editions,
            editionsSold=s.editions_sold,
            editionsSoldCached=s.editions_sold_cached,
            pricePerUnit=self.price_per_unit,
            raisedUsd=self.raised_usd,
            grossRaisedUsd=s.gross_raised_usd,
            netRaisedUsd=s.net_raised_usd,
            nftSalesUsd=self.nft_sales_usd,
            tipsUsd=self.tips_usd,
            ledgerTipsUsd=self.ledger_tips_usd,
            progress=self.progress,
            remaining=self.remaining,
            soldOut=self.sold_out,
            active=self.active,
            onchainAvailable=s.onchain_available,
            raisedSource=s.raised_source,
            updateCount=self.update_count,
            lastUpdated=self.last_updated,
            hasRecentUpdate=self.has_recent_update,
            createdAt=s.created_at,
        )
