from __future__ import annotations

import json

import pytest
import requests

from lp_oracle.adapters.vault_adapters import (
    HttpVaultAdapter,
    JsonFileVaultAdapter,
    get_vault_adapter,
    parse_vault,
    parse_vaults,
)
from lp_oracle.settings import OracleSettings

REGISTRY = [
    {
        "contractId": "SP1.pool-stx-usdc",
        "type": "POOL",
        "symbol": "STX-USDC LP",
        "tokenA": {"contractId": "SP1.wstx", "symbol": "STX", "decimals": 6},
        "tokenB": {"contractId": "SP1.usdc", "symbol": "USDC", "decimals": 6},
        "reservesA": "5000000",
        "reservesB": 2500000,
        "feeBps": 30,
        "totalSupply": "1000000",
    },
    {
        "contractId": "SP1.bridge",
        "type": "SUBLINK",
        "tokenA": {"contractId": "SP1.wstx"},
        "tokenB": {"contractId": "SP1.usdc"},
    },
    {"type": "POOL", "tokenA": {"contractId": "SP1.wstx"}},
]


class FakeResponse:
    def __init__(self, payload=None, status_code: int = 200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(
                f"{self.status_code} error", response=self
            )

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


def test_parse_vault_reads_registry_format():
    vault = parse_vault(REGISTRY[0], default_decimals=6)

    assert vault.contract_id == "SP1.pool-stx-usdc"
    assert vault.token_a.contract_id == "SP1.wstx"
    assert vault.token_b.symbol == "USDC"
    assert vault.reserves_a == 5_000_000
    assert vault.reserves_b == 2_500_000
    assert vault.fee_bps == 30
    assert vault.total_supply == 1_000_000
    assert vault.display_symbol == "STX-USDC LP"


def test_parse_vault_accepts_snake_case_and_defaults():
    vault = parse_vault(
        {
            "contract_id": "pool",
            "token_a": {"contract_id": "a"},
            "token_b": {"contract_id": "b", "decimals": 8},
            "reserves_a": 1,
            "reserves_b": 2,
        },
        default_decimals=6,
    )

    assert vault.token_a.decimals == 6
    assert vault.token_a.symbol == "a"
    assert vault.token_b.decimals == 8
    assert vault.total_supply is None
    assert vault.display_symbol == "a-b LP"
    assert vault.token_a.base is None


def test_parse_vault_keeps_subnet_base_token():
    vault = parse_vault(
        REGISTRY[0]
        | {
            "tokenA": {
                "contractId": "SP2.wstx-subnet",
                "symbol": "STX",
                "base": "SP1.wstx",
            }
        },
        default_decimals=6,
    )

    assert vault.token_a.base == "SP1.wstx"
    assert vault.token_b.base is None


def test_parse_vault_keeps_missing_token_for_graph_builder():
    vault = parse_vault(REGISTRY[2] | {"contractId": "half"}, default_decimals=6)

    assert vault.token_a is not None
    assert vault.token_b is None
    assert vault.reserves_a == 0


def test_parse_vault_rejects_missing_contract_id():
    with pytest.raises(ValueError, match="without contract id"):
        parse_vault(REGISTRY[2], default_decimals=6)


def test_parse_vault_rejects_non_integer_reserves():
    with pytest.raises(ValueError, match="reservesA"):
        parse_vault(REGISTRY[0] | {"reservesA": "lots"}, default_decimals=6)


def test_parse_vaults_skips_bridges_and_malformed_entries():
    vaults = parse_vaults(REGISTRY, default_decimals=6)

    assert [v.contract_id for v in vaults] == ["SP1.pool-stx-usdc"]


def test_get_vault_adapter_prefers_file(tmp_path):
    config = OracleSettings(
        vaults_file=tmp_path / "vaults.json", vaults_url="https://registry.example"
    )

    assert isinstance(get_vault_adapter(config), JsonFileVaultAdapter)


def test_get_vault_adapter_uses_url():
    config = OracleSettings(vaults_url="https://registry.example")

    assert isinstance(get_vault_adapter(config), HttpVaultAdapter)


def test_get_vault_adapter_requires_a_source():
    with pytest.raises(ValueError):
        get_vault_adapter(OracleSettings())


@pytest.mark.asyncio
async def test_json_file_adapter_reads_wrapped_list(tmp_path):
    path = tmp_path / "vaults.json"
    path.write_text(json.dumps({"vaults": REGISTRY}))
    adapter = JsonFileVaultAdapter(OracleSettings(vaults_file=path))

    vaults = await adapter.fetch_vaults()

    assert adapter.adapter_name == "json_file"
    assert [v.contract_id for v in vaults] == ["SP1.pool-stx-usdc"]


@pytest.mark.asyncio
async def test_json_file_adapter_rejects_invalid_json(tmp_path):
    path = tmp_path / "vaults.json"
    path.write_text("{not json")
    adapter = JsonFileVaultAdapter(OracleSettings(vaults_file=path))

    with pytest.raises(ValueError, match="Invalid JSON"):
        await adapter.fetch_vaults()


@pytest.mark.asyncio
async def test_json_file_adapter_rejects_unexpected_structure(tmp_path):
    path = tmp_path / "vaults.json"
    path.write_text(json.dumps({"pools": []}))
    adapter = JsonFileVaultAdapter(OracleSettings(vaults_file=path))

    with pytest.raises(ValueError, match="does not contain a vault list"):
        await adapter.fetch_vaults()


@pytest.mark.asyncio
async def test_http_adapter_fetches_vaults(monkeypatch):
    calls = []

    def fake_get(url, headers=None, timeout=None):
        calls.append((url, headers, timeout))
        return FakeResponse(REGISTRY)

    monkeypatch.setattr(requests, "get", fake_get)
    config = OracleSettings(
        vaults_url="https://registry.example/vaults",
        api_key="secret",
        http_timeout=3.0,
    )

    vaults = await HttpVaultAdapter(config).fetch_vaults()

    assert [v.contract_id for v in vaults] == ["SP1.pool-stx-usdc"]
    url, headers, timeout = calls[0]
    assert url == "https://registry.example/vaults"
    assert headers["Authorization"] == "Bearer secret"
    assert timeout == 3.0


@pytest.mark.asyncio
async def test_http_adapter_accepts_data_wrapper(monkeypatch):
    monkeypatch.setattr(
        requests, "get", lambda *a, **k: FakeResponse({"data": REGISTRY})
    )
    config = OracleSettings(vaults_url="https://registry.example")

    vaults = await HttpVaultAdapter(config).fetch_vaults()

    assert len(vaults) == 1


@pytest.mark.asyncio
async def test_http_adapter_does_not_retry_client_errors(monkeypatch):
    calls = {"n": 0}

    def fake_get(*_args, **_kwargs):
        calls["n"] += 1
        return FakeResponse(status_code=404)

    monkeypatch.setattr(requests, "get", fake_get)
    config = OracleSettings(vaults_url="https://registry.example", http_max_tries=3)

    with pytest.raises(requests.exceptions.HTTPError):
        await HttpVaultAdapter(config).fetch_vaults()

    assert calls["n"] == 1


@pytest.mark.asyncio
async def test_http_adapter_retries_server_errors(monkeypatch):
    responses = [FakeResponse(status_code=503), FakeResponse(REGISTRY)]

    monkeypatch.setattr(requests, "get", lambda *a, **k: responses.pop(0))
    config = OracleSettings(vaults_url="https://registry.example", http_max_tries=2)

    vaults = await HttpVaultAdapter(config).fetch_vaults()

    assert len(vaults) == 1
    assert responses == []


@pytest.mark.asyncio
async def test_http_adapter_rejects_unexpected_structure(monkeypatch):
    monkeypatch.setattr(requests, "get", lambda *a, **k: FakeResponse("nope"))
    config = OracleSettings(vaults_url="https://registry.example")

    with pytest.raises(ValueError, match="Invalid vault registry response"):
        await HttpVaultAdapter(config).fetch_vaults()


def test_http_adapter_requires_url():
    with pytest.raises(ValueError):
        HttpVaultAdapter(OracleSettings())
