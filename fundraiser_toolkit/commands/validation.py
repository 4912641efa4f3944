from typing import Any, Iterable, Optional

from eth_utils import is_address, to_checksum_address

from fundraiser_toolkit.campaigns.service import DEFAULT_PAGE_SIZE, clamp_limit


def validate_eth_address(address: str, param_name: str = "address") -> str:
    """Validate and return checksum ethereum address"""
    if not address or not isinstance(address, str):
        raise ValueError(
            f"Invalid {param_name}: address must be a non-empty string"
        )
    if not is_address(address):
        raise ValueError(
            f"Invalid {param_name}: {address} is not a valid Ethereum address"
        )
    return to_checksum_address(address)


def validate_chain_id(chain_id: int, supported: Iterable[int]) -> int:
    """Validate chain ID against the registry's chains"""
    valid_chain_ids = set(supported)
    if chain_id not in valid_chain_ids:
        raise ValueError(
            f"Invalid chain_id: {chain_id}. Must be one of {sorted(valid_chain_ids)}"
        )
    return chain_id


def validate_campaign_id(raw: Any) -> int:
    """Campaign ids are non-negative integers"""
    try:
        campaign_id = int(str(raw).strip())
    except (TypeError, ValueError):
        raise ValueError(f"Invalid campaign id: {raw!r}")
    if campaign_id < 0:
        raise ValueError(f"Invalid campaign id: {raw!r}")
    return campaign_id


def parse_limit(raw: Optional[Any]) -> int:
    """Page size, defaulting to 12 and clamped to [1, 50]"""
    if raw is None or str(raw).strip() == "":
        return DEFAULT_PAGE_SIZE
    try:
        return clamp_limit(int(str(raw).strip()))
    except ValueError:
        return DEFAULT_PAGE_SIZE


def parse_cursor(raw: Optional[Any]) -> int:
    """Offset cursor; anything missing, non-numeric or negative is 0"""
    if raw is None:
        return 0
    try:
        cursor = int(str(raw).strip())
    except ValueError:
        return 0
    return max(0, cursor)
