"""
Read-only access to the campaign datastore.

The submission workflow owns these tables; the toolkit only queries them.
SupabaseDatastore talks to the PostgREST API, JsonFileDatastore serves a
local snapshot for the CLI and tests.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Union

import httpx

from fundraiser_toolkit.campaigns.models import (
    CachedCampaignRecord,
    CampaignUpdate,
    TipRecord,
)
from fundraiser_toolkit.shared.exceptions import DatastoreException
from fundraiser_toolkit.shared.logging import get_logger
from fundraiser_toolkit.shared.services.http_client import get_async_client

_logger = get_logger(__name__)

SUBMISSION_COLUMNS = (
    "id,campaign_id,token_id,contract_address,chain_id,contract_version,"
    "goal,num_copies,nft_editions,sold_count,visible_on_marketplace,status,"
    "created_at,title,category,image_uri,metadata_uri"
)


class CampaignDatastore(Protocol):
    async def list_campaign_records(self) -> List[CachedCampaignRecord]:
        ...

    async def find_campaign_records(
        self, campaign_id: int
    ) -> List[CachedCampaignRecord]:
        ...

    async def list_enabled_contracts(self) -> List[str]:
        ...

    async def list_tip_records(self) -> List[TipRecord]:
        ...

    async def list_campaign_updates(self) -> List[CampaignUpdate]:
        ...


class SupabaseDatastore:
    """Datastore backed by Supabase's PostgREST endpoint."""

    def __init__(
        self,
        url: str,
        api_key: str,
        client: Optional[httpx.AsyncClient] = None,
    ):
        if not url or not api_key:
            raise DatastoreException("Supabase URL and service key are required")
        self.base_url = f"{url.rstrip('/')}/rest/v1"
        self.api_key = api_key
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client or get_async_client()

    def _headers(self) -> Dict[str, str]:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Accept": "application/json",
        }

    async def _select(
        self, table: str, params: Dict[str, str]
    ) -> List[Dict[str, Any]]:
        try:
            response = await self.client.get(
                f"{self.base_url}/{table}",
                params=params,
                headers=self._headers(),
            )
            response.raise_for_status()
            rows = response.json()
        except httpx.HTTPStatusError as e:
            raise DatastoreException(
                f"Query on {table} failed with HTTP "
                f"{e.response.status_code}: {e.response.text[:200]}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise DatastoreException(f"Query on {table} failed: {e}") from e

        if not isinstance(rows, list):
            raise DatastoreException(f"Unexpected response shape from {table}")
        _logger.debug("Fetched %d rows from %s", len(rows), table)
        return rows

    async def list_campaign_records(self) -> List[CachedCampaignRecord]:
        rows = await self._select(
            "submissions",
            {"select": SUBMISSION_COLUMNS, "order": "created_at.desc"},
        )
        return [CachedCampaignRecord.from_row(row) for row in rows]

    async def find_campaign_records(
        self, campaign_id: int
    ) -> List[CachedCampaignRecord]:
        rows = await self._select(
            "submissions",
            {
                "select": SUBMISSION_COLUMNS,
                # legacy token_id only counts for rows without a campaign_id
                "or": (
                    f"(campaign_id.eq.{campaign_id},"
                    f"and(campaign_id.is.null,token_id.eq.{campaign_id}))"
                ),
                "order": "created_at.desc",
            },
        )
        records = [CachedCampaignRecord.from_row(row) for row in rows]
        return [r for r in records if r.campaign_id == campaign_id]

    async def list_enabled_contracts(self) -> List[str]:
        rows = await self._select(
            "marketplace_contracts",
            {"select": "contract_address", "enabled": "eq.true"},
        )
        return [row["contract_address"] for row in rows if row.get("contract_address")]

    async def list_tip_records(self) -> List[TipRecord]:
        rows = await self._select(
            "purchases",
            {"select": "campaign_id,tip_usd", "tip_usd": "gt.0"},
        )
        return [TipRecord.from_row(row) for row in rows]

    async def list_campaign_updates(self) -> List[CampaignUpdate]:
        rows = await self._select(
            "campaign_updates",
            {"select": "submission_id,reviewed_at", "status": "eq.approved"},
        )
        return [CampaignUpdate.from_row(row) for row in rows]


class JsonFileDatastore:
    """
    Datastore over a JSON snapshot:

        {"submissions": [...], "marketplace_contracts": [...],
         "purchases": [...], "campaign_updates": [...]}

    Rows use the same column names as the Supabase tables. The file is read
    on every call so edits show up without restarting.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _load(self) -> Dict[str, Any]:
        try:
            with open(self.path, "r") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise DatastoreException(f"Cannot read snapshot {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise DatastoreException(f"Snapshot {self.path} must be a JSON object")
        return data

    def _submissions(self) -> List[CachedCampaignRecord]:
        rows = sorted(
            self._load().get("submissions", []),
            key=lambda row: row.get("created_at") or "",
            reverse=True,
        )
        return [CachedCampaignRecord.from_row(row) for row in rows]

    async def list_campaign_records(self) -> List[CachedCampaignRecord]:
        return self._submissions()

    async def find_campaign_records(
        self, campaign_id: int
    ) -> List[CachedCampaignRecord]:
        return [r for r in self._submissions() if r.campaign_id == campaign_id]

    async def list_enabled_contracts(self) -> List[str]:
        return [
            row["contract_address"]
            for row in self._load().get("marketplace_contracts", [])
            if row.get("enabled", True) and row.get("contract_address")
        ]

    async def list_tip_records(self) -> List[TipRecord]:
        return [TipRecord.from_row(row) for row in self._load().get("purchases", [])]

    async def list_campaign_updates(self) -> List[CampaignUpdate]:
        return [
            CampaignUpdate.from_row(row)
            for row in self._load().get("campaign_updates", [])
            if row.get("status", "approved") == "approved"
        ]
