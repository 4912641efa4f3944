"""
Versioned decoders for getCampaign results.

Contract generations v5, v6 and v7 return a flat tuple whose members may or
may not carry names depending on how the client decoded them. Generation v8
and later returns a named struct with USD figures in integer cents. Each
generation gets its own decoder instance, selected by version label.
"""

from typing import Any, Dict, Mapping, Optional, Tuple

from fundraiser_toolkit.campaigns.models import (
    WEI_PER_NATIVE,
    OnchainCampaignState,
)
from fundraiser_toolkit.shared.exceptions import (
    ConfigurationException,
    DecoderException,
)
from fundraiser_toolkit.shared.registry import (
    LEGACY_DECODER,
    LEGACY_VERSIONS,
    STRUCT_DECODER,
    decoder_for_version,
    normalize_version,
)

# Canonical field -> (named key, positional index) for legacy tuples
LEGACY_FIELDS: Dict[str, Tuple[str, int]] = {
    "category": ("category", 0),
    "metadata_uri": ("baseURI", 1),
    "goal_native": ("goal", 2),
    "gross_raised_native": ("grossRaised", 3),
    "net_raised_native": ("netRaised", 4),
    "editions_minted": ("editionsMinted", 5),
    "max_editions": ("maxEditions", 6),
    "price_native": ("pricePerEdition", 7),
    "active": ("active", 8),
    "closed": ("closed", 9),
}

# Canonical field -> struct member name for v8+
STRUCT_FIELDS: Dict[str, str] = {
    "category": "category",
    "metadata_uri": "baseURI",
    "goal_native": "goalNative",
    "goal_usd_cents": "goalUsd",
    "gross_raised_native": "grossRaised",
    "net_raised_native": "netRaised",
    "editions_minted": "editionsMinted",
    "max_editions": "maxEditions",
    "price_native": "priceNative",
    "price_usd_cents": "priceUsd",
    "active": "active",
    "paused": "paused",
    "closed": "closed",
}

_INT_FIELDS = {
    "goal_native",
    "goal_usd_cents",
    "gross_raised_native",
    "net_raised_native",
    "editions_minted",
    "max_editions",
    "price_native",
    "price_usd_cents",
}
_BOOL_FIELDS = {"active", "paused", "closed"}


def wei_to_native(amount: Optional[int]) -> float:
    """Native-wei to whole native units (float, display precision only)."""
    if amount is None:
        return 0.0
    return int(amount) / WEI_PER_NATIVE


def wei_to_usd(amount: Optional[int], usd_rate: float) -> float:
    return wei_to_native(amount) * usd_rate


def cents_to_usd(cents: Optional[int]) -> Optional[float]:
    if cents is None:
        return None
    return int(cents) / 100


def _as_mapping(raw: Any) -> Optional[Mapping[str, Any]]:
    """Named view of a raw result, if the client produced one."""
    if isinstance(raw, Mapping):
        return raw
    as_dict = getattr(raw, "_asdict", None)
    if callable(as_dict):
        return as_dict()
    return None


def _coerce(field_name: str, value: Any) -> Any:
    if value is None:
        return None
    if field_name in _INT_FIELDS:
        return int(value)
    if field_name in _BOOL_FIELDS:
        return bool(value)
    return str(value)


class LegacyCampaignDecoder:
    """
    Decoder for one positional contract generation (v5, v6 or v7).

    A field is read by name when the raw result exposes names, otherwise by
    its fixed index. Fields these generations never expose (USD cents,
    paused) are left as None.
    """

    family = LEGACY_DECODER

    def __init__(self, version: str):
        self.version = version

    def _lookup(self, raw: Any, named: Optional[Mapping[str, Any]], key: str, index: int) -> Any:
        if named is not None and key in named:
            return named[key]
        if isinstance(raw, (list, tuple)) and len(raw) > index:
            return raw[index]
        return None

    def normalize(self, raw: Any) -> OnchainCampaignState:
        if raw is None:
            raise DecoderException(
                f"Empty getCampaign result for {self.version}"
            )
        named = _as_mapping(raw)
        if named is None and not isinstance(raw, (list, tuple)):
            raise DecoderException(
                f"Unexpected {self.version} result type: {type(raw).__name__}"
            )

        values = {}
        try:
            for field_name, (key, index) in LEGACY_FIELDS.items():
                values[field_name] = _coerce(
                    field_name, self._lookup(raw, named, key, index)
                )
        except (TypeError, ValueError) as e:
            raise DecoderException(
                f"Malformed {self.version} getCampaign result: {e}"
            ) from e

        return OnchainCampaignState(
            goal_usd_cents=None,
            price_usd_cents=None,
            paused=None,
            **values,
        )


class StructCampaignDecoder:
    """Decoder for struct-returning generations (v8 and later)."""

    family = STRUCT_DECODER

    def __init__(self, version: str):
        self.version = version

    def normalize(self, raw: Any) -> OnchainCampaignState:
        named = _as_mapping(raw)
        if named is None:
            raise DecoderException(
                f"{self.version} getCampaign must return a named struct, "
                f"got {type(raw).__name__}"
            )
        try:
            values = {
                field_name: _coerce(field_name, named.get(key))
                for field_name, key in STRUCT_FIELDS.items()
            }
        except (TypeError, ValueError) as e:
            raise DecoderException(
                f"Malformed {self.version} getCampaign result: {e}"
            ) from e
        return OnchainCampaignState(**values)


_LEGACY_DECODERS = {
    version: LegacyCampaignDecoder(version) for version in LEGACY_VERSIONS
}


def get_decoder(version_label: Optional[str]):
    """Decoder instance for a version label; unknown labels are a config error."""
    version = normalize_version(version_label)
    family = decoder_for_version(version)
    if family == LEGACY_DECODER:
        return _LEGACY_DECODERS[version]
    if family == STRUCT_DECODER:
        return StructCampaignDecoder(version)
    raise ConfigurationException(f"No decoder for version {version!r}")


def normalize(raw: Any, version_label: Optional[str]) -> OnchainCampaignState:
    """Normalize a raw getCampaign result into the canonical shape."""
    return get_decoder(version_label).normalize(raw)
