"""
Unit tests for the contract client pool and packaged ABIs.

No RPC calls are made: building a Web3 provider and a contract object is
purely local.
"""

import pytest

from fundraiser_toolkit.shared.exceptions import ConfigurationException
from fundraiser_toolkit.shared.services.resource_manager import resource_manager
from fundraiser_toolkit.shared.services.web3_service import (
    ContractClientPool,
    ContractKey,
)

from tests.conftest import V5_ADDRESS


class TestAbis:
    @pytest.mark.parametrize("name", ["fundraiser_legacy", "fundraiser_struct"])
    def test_get_campaign_present(self, name):
        abi = resource_manager.load_abi(name)
        assert any(item.get("name") == "getCampaign" for item in abi)

    def test_missing_abi(self):
        with pytest.raises(FileNotFoundError):
            resource_manager.load_abi("does_not_exist")

    def test_path_escape_rejected(self):
        with pytest.raises(ValueError):
            resource_manager.get_resource_path("abi", "../../etc/passwd")


class TestContractClientPool:
    def test_contract_memoized_by_key(self, registry):
        pool = ContractClientPool(request_timeout=1.0)
        target = registry.resolve(1043, "v5")

        first = pool.get_contract(target)
        again = pool.get_contract(registry.resolve(1043, "v5", V5_ADDRESS.lower()))

        assert first is again
        assert len(pool) == 1
        assert hasattr(first.functions, "getCampaign")

    def test_version_is_part_of_key(self, registry):
        pool = ContractClientPool()
        pool.get_contract(registry.resolve(1043, "v5"))
        pool.get_contract(registry.resolve(1043, "v8", V5_ADDRESS))
        assert len(pool) == 2

    def test_web3_service_shared_per_chain(self, registry):
        pool = ContractClientPool()
        entry = registry.get_entry(1043)
        assert pool.get_web3_service(entry) is pool.get_web3_service(entry)

    def test_missing_rpc_url(self, registry):
        pool = ContractClientPool()
        with pytest.raises(ConfigurationException):
            pool.get_web3_service(registry.get_entry(137))

    def test_key_is_typed(self):
        key = ContractKey(address="0xabc", chain_id=1043, version="v6")
        assert key == ("0xabc", 1043, "v6")
