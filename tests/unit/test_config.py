"""
Unit tests for zk_bounty.config — environment-driven settings.
"""

import pytest

from zk_bounty.config import PUBLIC_NODE_URL, BountyConfig, ConfigError

ENV_VARS = (
    "ZK_BOUNTY_NODE_URL",
    "ZK_BOUNTY_NETWORK",
    "ZK_BOUNTY_API_KEY",
    "ZK_BOUNTY_TIMEOUT",
    "ZK_BOUNTY_DATA_LENGTH",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestBountyConfig:

    def test_defaults(self):
        config = BountyConfig.from_env()
        assert config.node_url == PUBLIC_NODE_URL
        assert config.network == "main"
        assert config.api_key is None
        assert config.data_length == 3
        assert config.base_url == f"{PUBLIC_NODE_URL}/main"

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("ZK_BOUNTY_NODE_URL", "https://node.test/v1/bsv/")
        monkeypatch.setenv("ZK_BOUNTY_NETWORK", "test")
        monkeypatch.setenv("ZK_BOUNTY_API_KEY", "secret")
        monkeypatch.setenv("ZK_BOUNTY_TIMEOUT", "2.5")
        config = BountyConfig.from_env()
        assert config.base_url == "https://node.test/v1/bsv/test"
        assert config.api_key == "secret"
        assert config.timeout == 2.5

    def test_empty_api_key_is_none(self, monkeypatch):
        monkeypatch.setenv("ZK_BOUNTY_API_KEY", "")
        assert BountyConfig.from_env().api_key is None

    def test_non_numeric_timeout(self, monkeypatch):
        monkeypatch.setenv("ZK_BOUNTY_TIMEOUT", "soon")
        with pytest.raises(ConfigError, match="numeric"):
            BountyConfig.from_env()

    def test_unknown_network(self, monkeypatch):
        monkeypatch.setenv("ZK_BOUNTY_NETWORK", "regtest")
        with pytest.raises(ConfigError, match="network"):
            BountyConfig.from_env()

    @pytest.mark.parametrize("kwargs", [{"timeout": 0}, {"data_length": 0}])
    def test_rejects_non_positive(self, kwargs):
        with pytest.raises(ConfigError):
            BountyConfig(**kwargs)

    @pytest.mark.parametrize("length", ["1", "2", "3"])
    def test_data_length_within_ciphertext_layout(self, monkeypatch, length):
        monkeypatch.setenv("ZK_BOUNTY_DATA_LENGTH", length)
        assert BountyConfig.from_env().data_length == int(length)

    def test_data_length_that_changes_ciphertext_size(self, monkeypatch):
        """Four elements would encrypt to seven words, which the binding cannot carry."""
        monkeypatch.setenv("ZK_BOUNTY_DATA_LENGTH", "4")
        with pytest.raises(ConfigError, match="does not encrypt to 4"):
            BountyConfig.from_env()
