"""
HTTP surface for reconciled campaign views.

    GET /list?limit&cursor              -> {items, total, nextCursor}
    GET /campaign/{id}?contract&chainId -> one campaign view

Every response is marked no-store: views are recomputed per request.
"""

from typing import Any, Dict, Optional

from fastapi import FastAPI, Query, status
from fastapi.responses import JSONResponse

from fundraiser_toolkit.campaigns.service import CampaignService
from fundraiser_toolkit.commands.validation import (
    parse_cursor,
    parse_limit,
    validate_campaign_id,
    validate_chain_id,
    validate_eth_address,
)
from fundraiser_toolkit.shared.exceptions import (
    CampaignNotFoundException,
    ConfigurationException,
    DatastoreException,
    OnchainReadException,
)
from fundraiser_toolkit.shared.logging import get_logger

_logger = get_logger(__name__)

NO_STORE = {"Cache-Control": "no-store"}


def _json(payload: Any, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    return JSONResponse(content=payload, status_code=status_code, headers=NO_STORE)


def _error(status_code: int, code: str, details: Optional[str] = None) -> JSONResponse:
    body: Dict[str, Any] = {"error": code}
    if details:
        body["details"] = details
    return _json(body, status_code)


def create_app(service: CampaignService) -> FastAPI:
    app = FastAPI(title="Fundraiser Campaigns", version="1.0.0")

    @app.get("/list")
    async def list_campaigns(
        limit: Optional[str] = Query(None),
        cursor: Optional[str] = Query(None),
    ) -> JSONResponse:
        try:
            listing = await service.list_campaigns(
                limit=parse_limit(limit), cursor=parse_cursor(cursor)
            )
        except DatastoreException as e:
            _logger.error("List failed: %s", e.message)
            return _error(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                "FUNDRAISER_LIST_FAILED",
                e.message,
            )
        return _json(listing.to_dict())

    @app.get("/campaign/{campaign_id}")
    async def get_campaign(
        campaign_id: str,
        contract: Optional[str] = Query(None),
        chain_id: Optional[str] = Query(None, alias="chainId"),
    ) -> JSONResponse:
        try:
            parsed_id = validate_campaign_id(campaign_id)
        except ValueError as e:
            return _error(status.HTTP_400_BAD_REQUEST, "INVALID_CAMPAIGN_ID", str(e))

        try:
            address = (
                validate_eth_address(contract, "contract") if contract else None
            )
            parsed_chain = None
            if chain_id:
                try:
                    parsed_chain = int(chain_id)
                except ValueError:
                    raise ValueError(f"Invalid chainId: {chain_id!r}")
                validate_chain_id(parsed_chain, service.registry.supported_chains())
        except ValueError as e:
            return _error(status.HTTP_400_BAD_REQUEST, "INVALID_PARAMETER", str(e))

        try:
            view = await service.get_campaign(
                parsed_id, contract_address=address, chain_id=parsed_chain
            )
        except CampaignNotFoundException as e:
            return _error(status.HTTP_404_NOT_FOUND, "CAMPAIGN_NOT_FOUND", e.message)
        except ConfigurationException as e:
            _logger.error("No contract for campaign %s: %s", parsed_id, e.message)
            return _error(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                "NO_CONTRACT_CONFIGURED",
                e.message,
            )
        except DatastoreException as e:
            _logger.error("Lookup of campaign %s failed: %s", parsed_id, e.message)
            return _error(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                "CAMPAIGN_FETCH_FAILED",
                e.message,
            )
        except OnchainReadException as e:
            return _error(status.HTTP_502_BAD_GATEWAY, "ONCHAIN_UNAVAILABLE", e.message)

        return _json(view.to_dict())

    return app
