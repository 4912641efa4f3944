"""
On-chain reader for campaign state.

One getCampaign call per campaign, each bounded by its own timeout and
caught independently. Reads never raise: a failure comes back as a failed
Result whose error context carries the failure kind.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, List, Optional

from web3.exceptions import BadFunctionCallOutput, ContractLogicError

from fundraiser_toolkit.campaigns.decoder import normalize
from fundraiser_toolkit.campaigns.models import OnchainCampaignState
from fundraiser_toolkit.shared.exceptions import DecoderException
from fundraiser_toolkit.shared.logging import get_logger
from fundraiser_toolkit.shared.registry import ContractTarget
from fundraiser_toolkit.shared.results import (
    ErrorSeverity,
    ReadFailureKind,
    Result,
)
from fundraiser_toolkit.shared.services.web3_service import ContractClientPool

_logger = get_logger(__name__)

SOURCE = "onchain_reader"


@dataclass(frozen=True)
class ReadRequest:
    """One campaign to read."""

    target: ContractTarget
    campaign_id: int


class OnchainReader:
    """
    Best-effort reader over a shared ContractClientPool.

    Blocking web3 calls run in the default executor; a semaphore bounds how
    many are in flight at once.
    """

    def __init__(
        self,
        pool: ContractClientPool,
        timeout: float = 8.0,
        max_concurrency: int = 16,
    ):
        self.pool = pool
        self.timeout = timeout
        self.max_concurrency = max(1, max_concurrency)

    def _call_get_campaign(self, target: ContractTarget, campaign_id: int) -> Any:
        contract = self.pool.get_contract(target)
        return contract.functions.getCampaign(campaign_id).call()

    def _failure(
        self,
        target: ContractTarget,
        campaign_id: int,
        kind: ReadFailureKind,
        message: str,
        exception: Optional[Exception] = None,
    ) -> Result[OnchainCampaignState]:
        _logger.warning(
            "On-chain read failed (%s) for campaign %s on %s chain %s: %s",
            kind.value,
            campaign_id,
            target.contract_address,
            target.chain_id,
            message,
        )
        return Result.fail_with_message(
            source=SOURCE,
            message=message,
            severity=ErrorSeverity.WARNING,
            context={
                "kind": kind.value,
                "campaign_id": campaign_id,
                "contract": target.contract_address,
                "chain_id": target.chain_id,
                "version": target.version,
            },
            exception=exception,
        )

    async def read(
        self, target: ContractTarget, campaign_id: int
    ) -> Result[OnchainCampaignState]:
        """Read and decode one campaign. Never raises (except on cancellation)."""
        loop = asyncio.get_running_loop()
        try:
            raw = await asyncio.wait_for(
                loop.run_in_executor(
                    None, self._call_get_campaign, target, campaign_id
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            return self._failure(
                target,
                campaign_id,
                ReadFailureKind.TIMEOUT,
                f"getCampaign timed out after {self.timeout}s",
                e,
            )
        except (ContractLogicError, BadFunctionCallOutput) as e:
            return self._failure(
                target, campaign_id, ReadFailureKind.REVERTED, str(e), e
            )
        except Exception as e:
            return self._failure(
                target, campaign_id, ReadFailureKind.RPC_ERROR, str(e), e
            )

        try:
            state = normalize(raw, target.version)
        except DecoderException as e:
            return self._failure(
                target, campaign_id, ReadFailureKind.DECODE_ERROR, e.message, e
            )
        return Result.ok(state)

    async def read_many(
        self,
        requests: List[ReadRequest],
        deadline: Optional[float] = None,
    ) -> List[Result[OnchainCampaignState]]:
        """
        Read many campaigns concurrently, results in request order.

        Reads still running when ``deadline`` (seconds) expires are cancelled
        and reported as cancelled failures; finished reads are kept.
        """
        if not requests:
            return []

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def bounded(request: ReadRequest) -> Result[OnchainCampaignState]:
            async with semaphore:
                return await self.read(request.target, request.campaign_id)

        tasks = [asyncio.ensure_future(bounded(r)) for r in requests]
        _, pending = await asyncio.wait(tasks, timeout=deadline)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        results: List[Result[OnchainCampaignState]] = []
        for request, task in zip(requests, tasks):
            if task in pending or task.cancelled():
                results.append(
                    self._failure(
                        request.target,
                        request.campaign_id,
                        ReadFailureKind.CANCELLED,
                        "Read abandoned at request deadline",
                    )
                )
            else:
                results.append(task.result())
        return results
