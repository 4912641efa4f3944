"""
Unit tests for the versioned getCampaign decoders.
"""

from collections import namedtuple

import pytest

from fundraiser_toolkit.campaigns.decoder import (
    LegacyCampaignDecoder,
    StructCampaignDecoder,
    cents_to_usd,
    get_decoder,
    normalize,
    wei_to_native,
    wei_to_usd,
)
from fundraiser_toolkit.shared.exceptions import (
    ConfigurationException,
    DecoderException,
)

WEI = 10**18

LEGACY_TUPLE = [
    "medical",  # category
    "ipfs://meta",  # baseURI
    20_000 * WEI,  # goal
    1_000 * WEI,  # grossRaised
    950 * WEI,  # netRaised
    5,  # editionsMinted
    100,  # maxEditions
    200 * WEI,  # pricePerEdition
    True,  # active
    False,  # closed
]

CampaignStruct = namedtuple(
    "CampaignStruct",
    [
        "id",
        "category",
        "baseURI",
        "goalNative",
        "goalUsd",
        "grossRaised",
        "netRaised",
        "tipsReceived",
        "editionsMinted",
        "maxEditions",
        "priceNative",
        "priceUsd",
        "nonprofit",
        "submitter",
        "active",
        "paused",
        "closed",
        "refunded",
        "immediatePayoutEnabled",
    ],
)


def make_struct(**overrides):
    values = dict(
        id=3,
        category="medical",
        baseURI="ipfs://meta",
        goalNative=20_000 * WEI,
        goalUsd=None,
        grossRaised=1_000 * WEI,
        netRaised=950 * WEI,
        tipsReceived=0,
        editionsMinted=5,
        maxEditions=100,
        priceNative=200 * WEI,
        priceUsd=None,
        nonprofit="0x0000000000000000000000000000000000000001",
        submitter="0x0000000000000000000000000000000000000002",
        active=True,
        paused=None,
        closed=False,
        refunded=False,
        immediatePayoutEnabled=False,
    )
    values.update(overrides)
    return CampaignStruct(**values)


class TestDispatch:
    @pytest.mark.parametrize("label", ["v5", "v6", "v7", "V6", " v7 ", None])
    def test_legacy_labels(self, label):
        assert isinstance(get_decoder(label), LegacyCampaignDecoder)

    @pytest.mark.parametrize("label", ["v8", "v9", "V12"])
    def test_struct_labels(self, label):
        assert isinstance(get_decoder(label), StructCampaignDecoder)

    @pytest.mark.parametrize("label", ["v4", "v1", "latest", "8"])
    def test_unknown_labels_are_config_errors(self, label):
        with pytest.raises(ConfigurationException):
            get_decoder(label)

    def test_missing_label_defaults_to_v5(self):
        assert get_decoder(None).version == "v5"


class TestLegacyDecoder:
    def test_positional_tuple(self):
        state = normalize(LEGACY_TUPLE, "v5")
        assert state.category == "medical"
        assert state.metadata_uri == "ipfs://meta"
        assert state.goal_native == 20_000 * WEI
        assert state.gross_raised_native == 1_000 * WEI
        assert state.net_raised_native == 950 * WEI
        assert state.editions_minted == 5
        assert state.max_editions == 100
        assert state.price_native == 200 * WEI
        assert state.active is True
        assert state.closed is False

    def test_fields_not_exposed_are_none(self):
        state = normalize(LEGACY_TUPLE, "v6")
        assert state.goal_usd_cents is None
        assert state.price_usd_cents is None
        assert state.paused is None

    def test_named_fields_win_over_positions(self):
        named = {
            "category": "animals",
            "baseURI": "ipfs://other",
            "goal": 1,
            "grossRaised": 2,
            "netRaised": 3,
            "editionsMinted": 4,
            "maxEditions": 5,
            "pricePerEdition": 6,
            "active": False,
            "closed": True,
        }
        state = normalize(named, "v7")
        assert state.category == "animals"
        assert state.gross_raised_native == 2
        assert state.editions_minted == 4
        assert state.closed is True

    def test_partial_names_fall_back_to_index(self):
        Partial = namedtuple(
            "Partial",
            ["category", "baseURI", "goal", "grossRaised", "x4", "x5", "x6", "x7", "x8", "x9"],
        )
        raw = Partial(*LEGACY_TUPLE)
        state = normalize(raw, "v5")
        assert state.gross_raised_native == 1_000 * WEI
        assert state.editions_minted == 5
        assert state.closed is False

    def test_short_tuple_leaves_missing_fields_none(self):
        state = normalize(LEGACY_TUPLE[:4], "v5")
        assert state.gross_raised_native == 1_000 * WEI
        assert state.net_raised_native is None
        assert state.max_editions is None

    def test_none_result_raises(self):
        with pytest.raises(DecoderException):
            normalize(None, "v5")

    def test_scalar_result_raises(self):
        with pytest.raises(DecoderException):
            normalize(42, "v5")

    def test_non_numeric_amount_raises(self):
        bad = list(LEGACY_TUPLE)
        bad[3] = "lots"
        with pytest.raises(DecoderException):
            normalize(bad, "v5")


class TestStructDecoder:
    def test_named_struct(self):
        state = normalize(make_struct(goalUsd=100_000, priceUsd=1_000, paused=False), "v8")
        assert state.goal_native == 20_000 * WEI
        assert state.goal_usd_cents == 100_000
        assert state.price_usd_cents == 1_000
        assert state.paused is False
        assert state.editions_minted == 5

    def test_dict_struct(self):
        state = normalize(make_struct()._asdict(), "v9")
        assert state.gross_raised_native == 1_000 * WEI

    def test_positional_result_rejected(self):
        with pytest.raises(DecoderException):
            normalize(LEGACY_TUPLE, "v8")


class TestEquivalence:
    def test_legacy_and_struct_converge(self):
        """Equivalent values in both shapes decode to the same canonical state."""
        legacy = normalize(LEGACY_TUPLE, "v5")
        struct = normalize(make_struct(), "v8")
        assert legacy == struct

    def test_all_legacy_generations_agree(self):
        states = {normalize(LEGACY_TUPLE, v) for v in ("v5", "v6", "v7")}
        assert len(states) == 1


class TestConversions:
    def test_wei_to_native(self):
        assert wei_to_native(15 * WEI // 10) == pytest.approx(1.5)
        assert wei_to_native(None) == 0.0

    def test_wei_to_usd(self):
        assert wei_to_usd(1_000 * WEI, 0.05) == pytest.approx(50.0)
        assert wei_to_usd(2 * WEI, 3100.0) == pytest.approx(6200.0)

    def test_cents_to_usd(self):
        assert cents_to_usd(12_345) == pytest.approx(123.45)
        assert cents_to_usd(None) is None
