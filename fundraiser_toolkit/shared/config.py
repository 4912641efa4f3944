"""Process configuration: rates, RPC endpoints, contract deployments."""

import os
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

from dotenv import load_dotenv

BLOCKDAG_CHAIN_ID = 1043
ETHEREUM_CHAIN_ID = 1
SEPOLIA_CHAIN_ID = 11155111
POLYGON_CHAIN_ID = 137
BASE_CHAIN_ID = 8453

# (chain_id, version) -> contract address of known deployments
BUILTIN_DEPLOYMENTS: Dict[Tuple[int, str], str] = {
    (BLOCKDAG_CHAIN_ID, "v5"): "0x96bB4d907CC6F90E5677df7ad48Cf3ad12915890",
    (BLOCKDAG_CHAIN_ID, "v6"): "0xaE54e4E8A75a81780361570c17b8660CEaD27053",
    (SEPOLIA_CHAIN_ID, "v7"): "0xd6aEE73e3bB3c3fF149eB1198bc2069d2E37eB7e",
}

# Chain each built-in version lives on, used when CONTRACT_ADDRESS_Vn is set
# without a matching CONTRACT_CHAIN_ID_Vn
BUILTIN_VERSION_CHAINS: Dict[str, int] = {
    version: chain_id for (chain_id, version) in BUILTIN_DEPLOYMENTS
}

RPC_ENV_KEYS: Dict[int, Tuple[Tuple[str, ...], str]] = {
    BLOCKDAG_CHAIN_ID: (
        ("BLOCKDAG_RPC_URL", "BLOCKDAG_RPC", "NEXT_PUBLIC_BLOCKDAG_RPC"),
        "https://rpc.awakening.bdagscan.com",
    ),
    ETHEREUM_CHAIN_ID: (("ETHEREUM_RPC_URL", "NEXT_PUBLIC_ETHEREUM_RPC"), ""),
    SEPOLIA_CHAIN_ID: (("SEPOLIA_RPC_URL", "NEXT_PUBLIC_SEPOLIA_RPC"), ""),
    POLYGON_CHAIN_ID: (
        ("POLYGON_RPC_URL", "NEXT_PUBLIC_POLYGON_RPC"),
        "https://polygon-rpc.com",
    ),
    BASE_CHAIN_ID: (
        ("BASE_RPC_URL", "NEXT_PUBLIC_BASE_RPC"),
        "https://mainnet.base.org",
    ),
}

_VERSIONED_ADDRESS_KEY = re.compile(r"^(?:NEXT_PUBLIC_)?CONTRACT_ADDRESS_V(\d+)$")


def _first(env: Mapping[str, str], keys: Tuple[str, ...], default: str = "") -> str:
    for key in keys:
        value = (env.get(key) or "").strip()
        if value:
            return value
    return default


def _float(env: Mapping[str, str], keys: Tuple[str, ...], default: float) -> float:
    raw = _first(env, keys)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"Invalid numeric value for {keys[0]}: {raw!r}")


@dataclass(frozen=True)
class Settings:
    """
    Immutable configuration injected into the registry, reader and service.

    Built once at startup; nothing re-reads the environment afterwards.
    """

    native_usd_rate: float = 0.05
    eth_usd_rate: float = 3100.0
    rpc_urls: Mapping[int, str] = field(
        default_factory=lambda: MappingProxyType({})
    )
    deployments: Mapping[Tuple[int, str], str] = field(
        default_factory=lambda: MappingProxyType(dict(BUILTIN_DEPLOYMENTS))
    )
    fallback_contract_address: str = ""
    default_chain_id: int = BLOCKDAG_CHAIN_ID
    onchain_read_timeout: float = 8.0
    onchain_max_concurrency: int = 16
    request_timeout: float = 25.0
    supabase_url: str = ""
    supabase_key: str = ""
    http_timeout: float = 15.0
    http_connect_timeout: float = 5.0
    http_user_agent: str = "fundraiser-toolkit/1.x"

    @classmethod
    def from_env(
        cls,
        env: Optional[Mapping[str, str]] = None,
        load_env_file: bool = True,
    ) -> "Settings":
        """Build settings from the environment (and a .env file if present)."""
        if env is None:
            if load_env_file:
                load_dotenv()
            env = os.environ

        rpc_urls = {
            chain_id: _first(env, keys, default)
            for chain_id, (keys, default) in RPC_ENV_KEYS.items()
        }

        deployments = dict(BUILTIN_DEPLOYMENTS)
        for key, value in env.items():
            match = _VERSIONED_ADDRESS_KEY.match(key)
            if not match or not value.strip():
                continue
            version = f"v{int(match.group(1))}"
            chain_raw = _first(
                env,
                (
                    f"CONTRACT_CHAIN_ID_V{match.group(1)}",
                    f"NEXT_PUBLIC_CONTRACT_CHAIN_ID_V{match.group(1)}",
                ),
            )
            chain_id = (
                int(chain_raw)
                if chain_raw
                else BUILTIN_VERSION_CHAINS.get(version, BLOCKDAG_CHAIN_ID)
            )
            deployments[(chain_id, version)] = value.strip()

        return cls(
            native_usd_rate=_float(
                env, ("BDAG_USD_RATE", "NEXT_PUBLIC_BDAG_USD_RATE"), 0.05
            ),
            eth_usd_rate=_float(env, ("ETH_USD_RATE",), 3100.0),
            rpc_urls=MappingProxyType(rpc_urls),
            deployments=MappingProxyType(deployments),
            fallback_contract_address=_first(
                env, ("CONTRACT_ADDRESS", "NEXT_PUBLIC_CONTRACT_ADDRESS")
            ),
            default_chain_id=int(
                _first(env, ("DEFAULT_CHAIN_ID",), str(BLOCKDAG_CHAIN_ID))
            ),
            onchain_read_timeout=_float(env, ("ONCHAIN_READ_TIMEOUT",), 8.0),
            onchain_max_concurrency=int(
                _float(env, ("ONCHAIN_MAX_CONCURRENCY",), 16)
            ),
            request_timeout=_float(env, ("REQUEST_TIMEOUT",), 25.0),
            supabase_url=_first(
                env, ("SUPABASE_URL", "NEXT_PUBLIC_SUPABASE_URL")
            ).rstrip("/"),
            supabase_key=_first(env, ("SUPABASE_SERVICE_ROLE_KEY",)),
            http_timeout=_float(env, ("FUNDRAISER_HTTP_TIMEOUT",), 15.0),
            http_connect_timeout=_float(
                env, ("FUNDRAISER_HTTP_CONNECT_TIMEOUT",), 5.0
            ),
            http_user_agent=_first(
                env, ("FUNDRAISER_HTTP_UA",), "fundraiser-toolkit/1.x"
            ),
        )
