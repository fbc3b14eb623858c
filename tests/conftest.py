from __future__ import annotations

import httpx
import pytest
from ark_fakes import API_URL, DEX_WALLET, MEMBER_A_KEY, MEMBER_B_KEY, PLAIN_WALLET, FakeArkAPI
from typer.testing import CliRunner

from ark_dex_adapter.cli.main import app
from ark_dex_adapter.config import AdapterConfig
from ark_dex_adapter.core.context import AdapterContext
from ark_dex_adapter.models import WalletInfo
from ark_dex_adapter.module import ArkDexModule
from ark_dex_adapter.services.dex import DexAdapter


@pytest.fixture()
def fake_api() -> FakeArkAPI:
    api = FakeArkAPI()
    api.wallets[DEX_WALLET] = {
        "address": DEX_WALLET,
        "publicKey": "03" + "11" * 32,
        "balance": "0",
        "attributes": {"multiSignature": {"min": 2, "publicKeys": [MEMBER_A_KEY, MEMBER_B_KEY]}},
    }
    api.wallets[PLAIN_WALLET] = {"address": PLAIN_WALLET, "publicKey": MEMBER_A_KEY, "balance": "0", "attributes": {}}
    return api


@pytest.fixture()
def transport(fake_api: FakeArkAPI) -> httpx.MockTransport:
    return httpx.MockTransport(fake_api.handler)


@pytest.fixture()
def adapter_config() -> AdapterConfig:
    return AdapterConfig(
        dex_wallet_address=DEX_WALLET,
        network="devnet",
        api_url=API_URL,
        request_attempts=1,
        max_api_records=2,
        polling_interval=0.01,
    )


@pytest.fixture()
def context(adapter_config: AdapterConfig, transport: httpx.MockTransport) -> AdapterContext:
    return AdapterContext.build(adapter_config, transport=transport)


@pytest.fixture()
def adapter(context: AdapterContext) -> DexAdapter:
    return DexAdapter(context=context)


@pytest.fixture()
def module(adapter_config: AdapterConfig, transport: httpx.MockTransport) -> ArkDexModule:
    return ArkDexModule(config=adapter_config, transport=transport)


@pytest.fixture()
def wallet_info() -> WalletInfo:
    return WalletInfo(address=DEX_WALLET, multisig_threshold=2, multisig_member_public_keys=(MEMBER_A_KEY, MEMBER_B_KEY))


@pytest.fixture()
def cli_runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def cli_app():
    return app
