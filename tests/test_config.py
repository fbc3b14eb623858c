from __future__ import annotations

import pytest

from ark_dex_adapter.adapters.base import AdapterConfigError
from ark_dex_adapter.config import DEFAULT_API_URLS, AdapterConfig, load_config


def test_defaults():
    config = AdapterConfig()

    assert config.network == "mainnet"
    assert config.resolved_api_url == DEFAULT_API_URLS["mainnet"]
    assert config.max_api_records == 100
    assert AdapterConfig(network="devnet", api_url="https://node.example/api/").resolved_api_url == "https://node.example/api"


def test_invalid_values_are_rejected():
    with pytest.raises(AdapterConfigError):
        AdapterConfig(network="testnet")
    with pytest.raises(AdapterConfigError):
        AdapterConfig(timeout=0)
    with pytest.raises(AdapterConfigError):
        AdapterConfig(max_api_records=0)


def test_require_wallet_address():
    with pytest.raises(AdapterConfigError):
        AdapterConfig().require_wallet_address()
    assert AdapterConfig(dex_wallet_address="DAbc").require_wallet_address() == "DAbc"


def test_with_overrides_ignores_none():
    config = AdapterConfig(network="devnet").with_overrides(timeout=3.5, api_url=None)

    assert config.timeout == 3.5
    assert config.api_url is None
    assert config.network == "devnet"


def test_load_config_layers_file_environment_and_overrides(tmp_path):
    config_file = tmp_path / "ark_dex.toml"
    config_file.write_text(
        '[adapter]\nnetwork = "devnet"\ndex_wallet_address = "DFromFile"\ntimeout = 5\nmax_api_records = 50\n',
        encoding="utf-8",
    )

    config = load_config(
        config_file,
        environ={"ARK_DEX_WALLET_ADDRESS": "DFromEnv", "ARK_DEX_POLLING_INTERVAL": "2.5", "ARK_DEX_LOG_LEVEL": "DEBUG"},
        max_api_records=25,
        api_url=None,
    )

    assert config.network == "devnet"
    assert config.dex_wallet_address == "DFromEnv"
    assert config.timeout == 5.0
    assert config.polling_interval == 2.5
    assert config.max_api_records == 25


def test_load_config_from_environment_path(tmp_path):
    config_file = tmp_path / "custom.toml"
    config_file.write_text('[adapter]\nalias = "ark_devnet"\n', encoding="utf-8")

    config = load_config(environ={"ARK_DEX_CONFIG_PATH": str(config_file)})

    assert config.alias == "ark_devnet"


def test_load_config_without_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    assert load_config(environ={}) == AdapterConfig()


def test_load_config_errors(tmp_path):
    with pytest.raises(AdapterConfigError):
        load_config(tmp_path / "missing.toml", environ={})

    unknown = tmp_path / "unknown.toml"
    unknown.write_text('[adapter]\ncolour = "blue"\n', encoding="utf-8")
    with pytest.raises(AdapterConfigError):
        load_config(unknown, environ={})

    broken = tmp_path / "broken.toml"
    broken.write_text("[adapter\n", encoding="utf-8")
    with pytest.raises(AdapterConfigError):
        load_config(broken, environ={})

    with pytest.raises(AdapterConfigError):
        load_config(environ={"ARK_DEX_TIMEOUT": "soon"}, api_url="https://node.example/api")
