"""
Registry for chains and fundraiser contract deployments.

Maps (chain id, contract version label) to the RPC endpoint, the decoder
family and the native-currency USD rate. Everything is resolved from the
injected Settings; there is no I/O and no mutable state.
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Optional

from fundraiser_toolkit.shared.config import (
    BASE_CHAIN_ID,
    BLOCKDAG_CHAIN_ID,
    ETHEREUM_CHAIN_ID,
    POLYGON_CHAIN_ID,
    SEPOLIA_CHAIN_ID,
    Settings,
)
from fundraiser_toolkit.shared.exceptions import ConfigurationException

# Decoder families
LEGACY_DECODER = "legacy"
STRUCT_DECODER = "struct"

LEGACY_VERSIONS = ("v5", "v6", "v7")
FIRST_STRUCT_VERSION = 8

DEFAULT_CONTRACT_VERSION = "v5"

# Chain ID -> (name, is_ethereum_family)
CHAINS: Dict[int, tuple] = {
    BLOCKDAG_CHAIN_ID: ("BlockDAG Mainnet", False),
    ETHEREUM_CHAIN_ID: ("Ethereum Mainnet", True),
    SEPOLIA_CHAIN_ID: ("Sepolia", True),
    POLYGON_CHAIN_ID: ("Polygon", False),
    BASE_CHAIN_ID: ("Base", True),
}

_VERSION_LABEL = re.compile(r"^v(\d+)$")


@dataclass(frozen=True)
class ChainRegistryEntry:
    """Static per-chain configuration."""

    chain_id: int
    name: str
    is_ethereum_family: bool
    rpc_url: str
    default_contract_address: str
    native_to_usd_rate: float


@dataclass(frozen=True)
class ContractTarget:
    """A fully resolved read target for one campaign."""

    entry: ChainRegistryEntry
    contract_address: str
    version: str
    decoder: str  # LEGACY_DECODER or STRUCT_DECODER

    @property
    def chain_id(self) -> int:
        return self.entry.chain_id

    @property
    def usd_rate(self) -> float:
        return self.entry.native_to_usd_rate


def normalize_version(label: Optional[str]) -> str:
    """Normalize a contract version label ("V6", " v6 ", None -> "v5")."""
    if label is None or not str(label).strip():
        return DEFAULT_CONTRACT_VERSION
    return str(label).strip().lower()


def decoder_for_version(version: str) -> str:
    """Select the decoder family for a version label by explicit dispatch."""
    match = _VERSION_LABEL.match(version)
    if not match:
        raise ConfigurationException(
            f"Unsupported contract version label: {version!r}"
        )
    if version in LEGACY_VERSIONS:
        return LEGACY_DECODER
    if int(match.group(1)) >= FIRST_STRUCT_VERSION:
        return STRUCT_DECODER
    raise ConfigurationException(
        f"Unsupported contract version label: {version!r}"
    )


class ChainRegistry:
    """Resolves chains and contract targets from immutable settings."""

    def __init__(self, settings: Settings):
        self._settings = settings
        self._entries: Dict[int, ChainRegistryEntry] = {
            chain_id: self._build_entry(chain_id, name, is_eth)
            for chain_id, (name, is_eth) in CHAINS.items()
        }

    def _build_entry(
        self, chain_id: int, name: str, is_ethereum_family: bool
    ) -> ChainRegistryEntry:
        return ChainRegistryEntry(
            chain_id=chain_id,
            name=name,
            is_ethereum_family=is_ethereum_family,
            rpc_url=self._settings.rpc_urls.get(chain_id, ""),
            default_contract_address=self._default_contract(chain_id),
            native_to_usd_rate=(
                self._settings.eth_usd_rate
                if is_ethereum_family
                else self._settings.native_usd_rate
            ),
        )

    def _default_contract(self, chain_id: int) -> str:
        """Newest deployed version on the chain, or the global fallback."""
        if (
            chain_id == self._settings.default_chain_id
            and self._settings.fallback_contract_address
        ):
            return self._settings.fallback_contract_address

        versions = [
            (int(version[1:]), address)
            for (cid, version), address in self._settings.deployments.items()
            if cid == chain_id and address and _VERSION_LABEL.match(version)
        ]
        if not versions:
            return ""
        return max(versions)[1]

    @property
    def default_chain_id(self) -> int:
        return self._settings.default_chain_id

    def supported_chains(self) -> List[int]:
        return list(self._entries)

    def is_ethereum_family(self, chain_id: int) -> bool:
        """Whether the chain prices its native token at the ETH rate."""
        return self.get_entry(chain_id).is_ethereum_family

    def get_entry(self, chain_id: int) -> ChainRegistryEntry:
        entry = self._entries.get(int(chain_id))
        if entry is None:
            raise ConfigurationException(f"Chain ID {chain_id} not supported")
        return entry

    def version_for_address(
        self, chain_id: int, contract_address: str
    ) -> Optional[str]:
        """Find the version label of a known deployment address."""
        target = contract_address.lower()
        for (cid, version), address in self._settings.deployments.items():
            if cid == chain_id and address and address.lower() == target:
                return version
        return None

    def resolve(
        self,
        chain_id: Optional[int],
        contract_version: Optional[str],
        contract_address: Optional[str] = None,
    ) -> ContractTarget:
        """
        Resolve the read target for a campaign.

        Address precedence: explicit/cached address, the deployment for
        (chain, version), then the chain default. Fails closed with
        ConfigurationException when none of them is non-empty.
        """
        entry = self.get_entry(
            self.default_chain_id if chain_id is None else chain_id
        )
        version = normalize_version(contract_version)
        decoder = decoder_for_version(version)

        address = (
            (contract_address or "").strip()
            or self._settings.deployments.get((entry.chain_id, version), "")
            or entry.default_contract_address
        )
        if not address:
            raise ConfigurationException(
                f"No contract configured for chain {entry.chain_id} "
                f"version {version}"
            )

        return ContractTarget(
            entry=entry,
            contract_address=address,
            version=version,
            decoder=decoder,
        )
