"""
Unit tests for the reconciliation authority policy.
"""

import pytest

from fundraiser_toolkit.campaigns.reconciliation import (
    RAISED_SOURCE_CACHED,
    RAISED_SOURCE_ONCHAIN,
    onchain_goal_usd,
    reconcile,
    reconcile_onchain_only,
)

from tests.conftest import WEI, make_onchain, make_record


@pytest.fixture
def target(registry):
    return registry.resolve(1043, "v5")


class TestEditionsRatchet:
    def test_scenario_mixed_reads(self, target):
        """Cached [2, 5, 1], on-chain [4, failed, 1] -> [4, 5, 1]."""
        records = [
            make_record(record_id="a", campaign_id=1, editions_sold_cached=2),
            make_record(record_id="b", campaign_id=2, editions_sold_cached=5),
            make_record(record_id="c", campaign_id=3, editions_sold_cached=1),
        ]
        reads = [
            make_onchain(editions_minted=4),
            None,
            make_onchain(editions_minted=1),
        ]
        sold = [reconcile(r, o, target).editions_sold for r, o in zip(records, reads)]
        assert sold == [4, 5, 1]

    def test_onchain_behind_cache_never_lowers(self, target):
        state = reconcile(
            make_record(editions_sold_cached=9),
            make_onchain(editions_minted=0),
            target,
        )
        assert state.editions_sold == 9
        assert state.editions_sold_cached == 9

    def test_missing_minted_field_treated_as_zero(self, target):
        state = reconcile(
            make_record(editions_sold_cached=3),
            make_onchain(editions_minted=None),
            target,
        )
        assert state.editions_sold == 3


class TestMaxEditions:
    def test_positive_onchain_value_overrides(self, target):
        state = reconcile(
            make_record(max_editions=100), make_onchain(max_editions=250), target
        )
        assert state.max_editions == 250

    def test_smaller_onchain_value_still_overrides(self, target):
        state = reconcile(
            make_record(max_editions=100), make_onchain(max_editions=40), target
        )
        assert state.max_editions == 40

    @pytest.mark.parametrize("onchain_max", [0, None])
    def test_zero_or_missing_keeps_cached(self, target, onchain_max):
        state = reconcile(
            make_record(max_editions=100),
            make_onchain(max_editions=onchain_max),
            target,
        )
        assert state.max_editions == 100

    def test_failed_read_keeps_cached(self, target):
        state = reconcile(make_record(max_editions=80), None, target)
        assert state.max_editions == 80


class TestGrossRaised:
    def test_onchain_ahead_uses_onchain_gross(self, target):
        state = reconcile(
            make_record(editions_sold_cached=2),
            make_onchain(
                editions_minted=4,
                gross_raised_native=1_000 * WEI,
                net_raised_native=900 * WEI,
            ),
            target,
        )
        # BlockDAG native rate 0.05
        assert state.gross_raised_usd == pytest.approx(50.0)
        assert state.net_raised_usd == pytest.approx(45.0)
        assert state.raised_source == RAISED_SOURCE_ONCHAIN
        assert state.onchain_available is True

    def test_onchain_equal_to_cache_uses_cached_derivation(self, target):
        state = reconcile(
            make_record(goal_usd=1000, max_editions=100, editions_sold_cached=3),
            make_onchain(editions_minted=3, gross_raised_native=10**30),
            target,
        )
        assert state.gross_raised_usd == pytest.approx(30.0)
        assert state.net_raised_usd is None
        assert state.raised_source == RAISED_SOURCE_CACHED
        assert state.onchain_available is True

    def test_failed_read_uses_cached_derivation(self, target):
        state = reconcile(
            make_record(goal_usd=500, max_editions=50, editions_sold_cached=7),
            None,
            target,
        )
        assert state.gross_raised_usd == pytest.approx(70.0)
        assert state.raised_source == RAISED_SOURCE_CACHED
        assert state.onchain_available is False

    def test_cached_derivation_uses_reconciled_max(self, target):
        state = reconcile(
            make_record(goal_usd=1000, max_editions=100, editions_sold_cached=2),
            make_onchain(editions_minted=1, max_editions=50),
            target,
        )
        # price per unit 1000 / 50
        assert state.gross_raised_usd == pytest.approx(40.0)

    def test_unpriced_campaign_falls_back_to_unit_price(self, target):
        state = reconcile(
            make_record(goal_usd=0, max_editions=0, editions_sold_cached=6),
            None,
            target,
        )
        assert state.gross_raised_usd == pytest.approx(6.0)

    def test_ethereum_family_rate(self, registry):
        eth_target = registry.resolve(1, "v7", "0xd6aEE73e3bB3c3fF149eB1198bc2069d2E37eB7e")
        state = reconcile(
            make_record(chain_id=1, editions_sold_cached=0),
            make_onchain(editions_minted=1, gross_raised_native=2 * WEI),
            eth_target,
        )
        assert state.gross_raised_usd == pytest.approx(6200.0)


class TestDescriptiveFields:
    def test_descriptive_fields_come_from_cache(self, target):
        record = make_record(
            title="Shelter", category="animals", metadata_uri="ipfs://cached"
        )
        state = reconcile(
            record,
            make_onchain(category="other", metadata_uri="ipfs://chain"),
            target,
        )
        assert state.title == "Shelter"
        assert state.category == "animals"
        assert state.metadata_uri == "ipfs://cached"

    def test_key_is_lowercased(self, target):
        state = reconcile(make_record(campaign_id=4), None, target)
        assert state.key == (target.contract_address.lower(), 1043, 4)


class TestOnchainOnly:
    def test_goal_prefers_cents(self):
        onchain = make_onchain(goal_usd_cents=250_000)
        assert onchain_goal_usd(onchain, 0.05) == pytest.approx(2500.0)

    def test_goal_converted_from_native(self):
        onchain = make_onchain(goal_native=20_000 * WEI)
        assert onchain_goal_usd(onchain, 0.05) == pytest.approx(1000.0)

    def test_state_built_from_chain(self, target):
        state = reconcile_onchain_only(
            9,
            make_onchain(
                editions_minted=12,
                max_editions=60,
                gross_raised_native=400 * WEI,
                net_raised_native=380 * WEI,
            ),
            target,
        )
        assert state.campaign_id == 9
        assert state.record_id == ""
        assert state.editions_sold == 12
        assert state.max_editions == 60
        assert state.gross_raised_usd == pytest.approx(20.0)
        assert state.net_raised_usd == pytest.approx(19.0)
        assert state.raised_source == RAISED_SOURCE_ONCHAIN
