"""
Web3 Service module for reading fundraiser contracts across chains.

Provides a Web3Service per chain and a ContractClientPool that memoizes
contract clients by (address, chain, version). The pool is constructed once
and handed to the on-chain reader; it caches stateless clients only, never
campaign data.
"""

from typing import Any, Dict, NamedTuple

from web3 import Web3

from fundraiser_toolkit.shared.config import ETHEREUM_CHAIN_ID
from fundraiser_toolkit.shared.exceptions import ConfigurationException
from fundraiser_toolkit.shared.registry import (
    LEGACY_DECODER,
    STRUCT_DECODER,
    ChainRegistryEntry,
    ContractTarget,
)
from fundraiser_toolkit.shared.services.resource_manager import (
    resource_manager,
)

ABI_BY_DECODER = {
    LEGACY_DECODER: "fundraiser_legacy",
    STRUCT_DECODER: "fundraiser_struct",
}


class ContractKey(NamedTuple):
    """Typed key of a memoized contract client."""

    address: str  # lowercased
    chain_id: int
    version: str


class Web3Service:
    """
    A service class for managing a Web3 connection to one chain.
    """

    def __init__(
        self,
        chain_id: int,
        rpc_url: str,
        request_timeout: float = 10.0,
    ):
        """
        Initialize the Web3Service.

        Args:
            chain_id (int): The chain ID to use.
            rpc_url (str): The RPC URL to use.
            request_timeout (float): HTTP timeout for each RPC request.
        """
        self.chain_id = chain_id
        self.w3 = self._initialize_web3(rpc_url, request_timeout)

    def _initialize_web3(self, rpc_url: str, request_timeout: float) -> Web3:
        """Initialize Web3 instance with middleware if needed"""
        w3 = Web3(
            Web3.HTTPProvider(
                rpc_url, request_kwargs={"timeout": request_timeout}
            )
        )

        # Add POA middleware for non-mainnet chains
        if self.chain_id != ETHEREUM_CHAIN_ID:
            from web3.middleware import ExtraDataToPOAMiddleware

            w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)

        return w3

    def get_contract(
        self, address: str, abi_name: str, decode_tuples: bool = False
    ) -> Any:
        """Build a contract instance for a given address and ABI name"""
        abi = resource_manager.load_abi(abi_name)
        return self.w3.eth.contract(
            address=Web3.to_checksum_address(address.lower()),
            abi=abi,
            decode_tuples=decode_tuples,
        )


class ContractClientPool:
    """
    Arena of Web3Service and contract client instances.

    Keyed by chain id and ContractKey respectively; built lazily on first
    use and reused for the lifetime of the process.
    """

    def __init__(self, request_timeout: float = 10.0):
        self._request_timeout = request_timeout
        self._services: Dict[int, Web3Service] = {}
        self._contracts: Dict[ContractKey, Any] = {}

    def get_web3_service(self, entry: ChainRegistryEntry) -> Web3Service:
        """Get or create the Web3Service for a chain."""
        if entry.chain_id not in self._services:
            if not entry.rpc_url:
                raise ConfigurationException(
                    f"RPC URL not set for chain {entry.chain_id}"
                )
            self._services[entry.chain_id] = Web3Service(
                entry.chain_id, entry.rpc_url, self._request_timeout
            )
        return self._services[entry.chain_id]

    def get_contract(self, target: ContractTarget) -> Any:
        """Get or create the contract client for a resolved target."""
        key = ContractKey(
            address=target.contract_address.lower(),
            chain_id=target.chain_id,
            version=target.version,
        )
        if key not in self._contracts:
            service = self.get_web3_service(target.entry)
            self._contracts[key] = service.get_contract(
                target.contract_address,
                ABI_BY_DECODER[target.decoder],
                decode_tuples=target.decoder == STRUCT_DECODER,
            )
        return self._contracts[key]

    def __len__(self) -> int:
        return len(self._contracts)
