"""
CampaignService - reconciled campaign views for the marketplace

This service handles:
1. Loading cached campaign records, the contract allowlist, the gift ledger
   and approved updates from the datastore
2. Resolving each record to a chain/contract/decoder target
3. Best-effort on-chain reads for the page being served
4. Reconciling cached and on-chain state, then deriving USD figures
5. Single-campaign lookups, optionally against an explicit contract

Failure policy:
- Datastore errors fail the whole request
- A record with no resolvable contract is dropped from lists and is fatal
  for a single lookup
- A failed on-chain read falls back to cached values; for a single lookup a
  revert means the campaign does not exist
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from fundraiser_toolkit.campaigns.aggregation import (
    aggregate,
    sum_tips,
    summarize_updates,
)
from fundraiser_toolkit.campaigns.models import (
    CachedCampaignRecord,
    CampaignListDict,
    ReconciledCampaignView,
)
from fundraiser_toolkit.campaigns.projection import ProjectionPage, project
from fundraiser_toolkit.campaigns.reconciliation import (
    reconcile,
    reconcile_onchain_only,
)
from fundraiser_toolkit.contracts.reader import OnchainReader, ReadRequest
from fundraiser_toolkit.shared.config import Settings
from fundraiser_toolkit.shared.exceptions import (
    CampaignNotFoundException,
    ConfigurationException,
    OnchainReadException,
)
from fundraiser_toolkit.shared.logging import get_logger
from fundraiser_toolkit.shared.registry import ChainRegistry, ContractTarget
from fundraiser_toolkit.shared.results import ReadFailureKind, ReconciliationSummary
from fundraiser_toolkit.shared.services.datastore import CampaignDatastore
from fundraiser_toolkit.shared.services.web3_service import ContractClientPool

_logger = get_logger(__name__)

DEFAULT_PAGE_SIZE = 12
MAX_PAGE_SIZE = 50


@dataclass(frozen=True)
class _Candidate:
    """An eligible cached record paired with its resolved read target."""

    record: CachedCampaignRecord
    target: ContractTarget

    @property
    def contract_address(self) -> str:
        return self.target.contract_address

    @property
    def campaign_id(self) -> Optional[int]:
        return self.record.campaign_id


@dataclass
class CampaignListing:
    """One list response plus the run summary behind it."""

    page: ProjectionPage[ReconciledCampaignView]
    summary: ReconciliationSummary = field(default_factory=ReconciliationSummary)

    def to_dict(self) -> CampaignListDict:
        return CampaignListDict(**self.page.to_dict())


def clamp_limit(limit: Optional[int]) -> int:
    if limit is None:
        return DEFAULT_PAGE_SIZE
    return max(1, min(MAX_PAGE_SIZE, int(limit)))


class CampaignService:
    def __init__(
        self,
        settings: Settings,
        datastore: CampaignDatastore,
        registry: Optional[ChainRegistry] = None,
        reader: Optional[OnchainReader] = None,
    ):
        self.settings = settings
        self.datastore = datastore
        self.registry = registry or ChainRegistry(settings)
        self.reader = reader or OnchainReader(
            ContractClientPool(request_timeout=settings.onchain_read_timeout),
            timeout=settings.onchain_read_timeout,
            max_concurrency=settings.onchain_max_concurrency,
        )

    # ------------------------------------------------------------------
    # List
    # ------------------------------------------------------------------

    async def _allowlist(self) -> List[str]:
        enabled = await self.datastore.list_enabled_contracts()
        if enabled:
            return enabled
        if self.settings.fallback_contract_address:
            return [self.settings.fallback_contract_address]
        return []

    def _candidates(
        self,
        records: List[CachedCampaignRecord],
        summary: ReconciliationSummary,
    ) -> List[_Candidate]:
        candidates = []
        for record in records:
            if not record.is_listable or record.campaign_id is None:
                continue
            summary.records_eligible += 1
            # listing requires the cached address; no registry substitution
            if not record.contract_address:
                summary.record_exclusion(
                    record.record_id, record.campaign_id, "missing contract address"
                )
                continue
            try:
                target = self.registry.resolve(
                    record.chain_id,
                    record.contract_version,
                    record.contract_address,
                )
            except ConfigurationException as e:
                summary.record_exclusion(
                    record.record_id, record.campaign_id, e.message
                )
                continue
            candidates.append(_Candidate(record=record, target=target))
        return candidates

    async def list_campaigns(
        self, limit: Optional[int] = None, cursor: int = 0
    ) -> CampaignListing:
        """
        Build one page of reconciled campaign views.

        Filtering, de-duplication and pagination only depend on cached data,
        so on-chain reads are issued for the page's records alone.
        """
        limit = clamp_limit(limit)
        offset = max(0, cursor or 0)
        summary = ReconciliationSummary()

        records = await self.datastore.list_campaign_records()
        summary.records_loaded = len(records)
        allowlist = await self._allowlist()
        if not allowlist:
            _logger.warning("No enabled contracts configured; listing is empty")
            return CampaignListing(page=ProjectionPage(), summary=summary)

        tips = sum_tips(await self.datastore.list_tip_records())
        updates = summarize_updates(await self.datastore.list_campaign_updates())

        candidates = self._candidates(records, summary)
        candidate_page = project(candidates, allowlist, offset, limit)

        results = await self.reader.read_many(
            [
                ReadRequest(target=c.target, campaign_id=c.record.campaign_id)
                for c in candidate_page.items
            ],
            deadline=self.settings.request_timeout,
        )

        views = []
        for candidate, result in zip(candidate_page.items, results):
            summary.record_read(result)
            state = reconcile(
                candidate.record,
                result.data if result.success else None,
                candidate.target,
            )
            _logger.debug(
                "Reconciled campaign %s on %s: sold %d (cached %d), raised from %s",
                state.campaign_id,
                state.contract_address,
                state.editions_sold,
                state.editions_sold_cached,
                state.raised_source,
            )
            count, last_updated = updates.get(candidate.record.record_id, (0, None))
            views.append(
                aggregate(
                    state,
                    ledger_tips_usd=tips.get(state.campaign_id, 0.0),
                    update_count=count,
                    last_updated=last_updated,
                )
            )

        _logger.info(
            "Listed %d of %d campaigns (%d reads, %d failed, %d excluded)",
            len(views),
            candidate_page.total,
            summary.onchain_reads,
            summary.onchain_failures,
            summary.records_excluded,
        )
        return CampaignListing(
            page=ProjectionPage(
                items=views,
                total=candidate_page.total,
                next_cursor=candidate_page.next_cursor,
            ),
            summary=summary,
        )

    # ------------------------------------------------------------------
    # Single lookup
    # ------------------------------------------------------------------

    def _default_target(self, chain_id: Optional[int]) -> ContractTarget:
        entry = self.registry.get_entry(
            self.registry.default_chain_id if chain_id is None else chain_id
        )
        if not entry.default_contract_address:
            raise ConfigurationException(
                f"No contract configured for chain {entry.chain_id}"
            )
        version = self.registry.version_for_address(
            entry.chain_id, entry.default_contract_address
        )
        return self.registry.resolve(
            entry.chain_id, version, entry.default_contract_address
        )

    def _select(
        self,
        records: List[CachedCampaignRecord],
        contract_address: Optional[str],
        chain_id: Optional[int],
    ) -> Tuple[Optional[CachedCampaignRecord], ContractTarget]:
        if contract_address:
            wanted = contract_address.lower()
            record = next(
                (
                    r
                    for r in records
                    if r.contract_address.lower() == wanted
                    and (chain_id is None or r.chain_id in (None, chain_id))
                ),
                None,
            )
            target_chain = chain_id
            if target_chain is None:
                target_chain = (
                    record.chain_id
                    if record and record.chain_id is not None
                    else self.registry.default_chain_id
                )
            version = (
                record.contract_version
                if record is not None
                else self.registry.version_for_address(target_chain, contract_address)
            )
            return record, self.registry.resolve(
                target_chain, version, contract_address
            )

        if records:
            record = next((r for r in records if r.is_listable), records[0])
            return record, self.registry.resolve(
                record.chain_id if chain_id is None else chain_id,
                record.contract_version,
                record.contract_address,
            )

        return None, self._default_target(chain_id)

    async def get_campaign(
        self,
        campaign_id: int,
        contract_address: Optional[str] = None,
        chain_id: Optional[int] = None,
    ) -> ReconciledCampaignView:
        """Reconciled view of one campaign."""
        records = [
            r
            for r in await self.datastore.find_campaign_records(campaign_id)
            if r.campaign_id == campaign_id
        ]
        record, target = self._select(records, contract_address, chain_id)

        result = await self.reader.read(target, campaign_id)
        if not result.success:
            if result.failure_kind == ReadFailureKind.REVERTED:
                raise CampaignNotFoundException(campaign_id)
            if record is None:
                raise OnchainReadException(
                    f"Campaign {campaign_id} unavailable on chain "
                    f"{target.chain_id}: {'; '.join(result.get_error_messages())}"
                )

        onchain = result.data if result.success else None
        if record is not None:
            state = reconcile(record, onchain, target)
        else:
            state = reconcile_onchain_only(campaign_id, onchain, target)

        tips = sum_tips(await self.datastore.list_tip_records())
        updates = summarize_updates(await self.datastore.list_campaign_updates())
        count, last_updated = updates.get(state.record_id, (0, None))

        return aggregate(
            state,
            ledger_tips_usd=tips.get(campaign_id, 0.0),
            update_count=count,
            last_updated=last_updated,
        )

