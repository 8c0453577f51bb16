from __future__ import annotations

import json

import pytest
import requests

from lp_oracle.adapters.price_adapters import (
    PRICE_ADAPTERS,
    HttpPriceAdapter,
    JsonFilePriceAdapter,
    StablecoinAdapter,
    SubnetAdapter,
)
from lp_oracle.adapters.price_adapters.base import PriceData, parse_price_map
from lp_oracle.domain import PriceEntry, PriceSource, TokenRef
from lp_oracle.settings import OracleSettings

STX = TokenRef("SP1.wstx", "STX")
USDC = TokenRef("SP1.usdc", "USDC")
ALEX = TokenRef("SP1.alex", "ALEX", decimals=8)


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
        return self._payload


def test_parse_price_map_accepts_numbers_and_objects():
    table = parse_price_map(
        {"prices": {"a": 1.5, "b": {"usdPrice": "2", "confidence": 0.7}}},
        default_confidence=1.0,
    )

    assert table["a"] == PriceEntry("a", 1.5, 1.0, PriceSource.BASE)
    assert table["b"] == PriceEntry("b", 2.0, 0.7, PriceSource.BASE)


def test_parse_price_map_skips_invalid_entries():
    table = parse_price_map(
        {"a": "n/a", "b": -1, "c": {"price": 3.0, "confidence": 2}, "d": None, "e": 4},
        default_confidence=0.9,
    )

    assert list(table) == ["e"]
    assert table["e"].confidence == 0.9


def test_parse_price_map_rejects_non_mapping():
    with pytest.raises(ValueError):
        parse_price_map([1, 2, 3], default_confidence=1.0)


def test_price_data_missing():
    data = PriceData(prices={STX.contract_id: PriceEntry(STX.contract_id, 1.0, 1.0, PriceSource.BASE)})

    assert data.missing([STX, USDC]) == [USDC]


@pytest.mark.asyncio
async def test_json_file_adapter_fills_requested_tokens(tmp_path):
    path = tmp_path / "prices.json"
    path.write_text(json.dumps({"SP1.wstx": 0.5, "SP1.other": 9.0}))
    adapter = JsonFilePriceAdapter(OracleSettings(prices_file=path))

    result = await adapter.fetch_prices([STX, USDC], PriceData())

    assert adapter.enabled
    assert set(result.prices) == {"SP1.wstx"}
    assert result.prices["SP1.wstx"].usd_price == 0.5


@pytest.mark.asyncio
async def test_json_file_adapter_keeps_earlier_prices(tmp_path):
    path = tmp_path / "prices.json"
    path.write_text(json.dumps({"SP1.wstx": 0.5}))
    adapter = JsonFilePriceAdapter(OracleSettings(prices_file=path))
    existing = PriceEntry("SP1.wstx", 0.6, 1.0, PriceSource.BASE)

    result = await adapter.fetch_prices([STX], PriceData(prices={"SP1.wstx": existing}))

    assert result.prices["SP1.wstx"] is existing


def test_json_file_adapter_disabled_without_file():
    assert JsonFilePriceAdapter(OracleSettings()).enabled is False


@pytest.mark.asyncio
async def test_http_adapter_prices_tokens(monkeypatch):
    monkeypatch.setattr(
        requests,
        "get",
        lambda *a, **k: FakeResponse({"SP1.wstx": 0.52, "SP1.alex": {"usdPrice": 0.01}}),
    )
    config = OracleSettings(prices_url="https://prices.example", base_price_confidence=0.9)
    adapter = HttpPriceAdapter(config)

    result = await adapter.fetch_prices([STX, ALEX, USDC], PriceData())

    assert adapter.enabled
    assert result.prices["SP1.wstx"] == PriceEntry("SP1.wstx", 0.52, 0.9, PriceSource.BASE)
    assert result.prices["SP1.alex"].usd_price == 0.01
    assert "SP1.usdc" not in result.prices


@pytest.mark.asyncio
async def test_http_adapter_skips_request_when_nothing_missing(monkeypatch):
    def fail(*_args, **_kwargs):
        raise AssertionError("no request expected")

    monkeypatch.setattr(requests, "get", fail)
    adapter = HttpPriceAdapter(OracleSettings(prices_url="https://prices.example"))
    existing = PriceData(prices={STX.contract_id: PriceEntry(STX.contract_id, 1.0, 1.0, PriceSource.BASE)})

    result = await adapter.fetch_prices([STX], existing)

    assert result is existing


@pytest.mark.asyncio
async def test_http_adapter_network_error_leaves_prices_unchanged(monkeypatch):
    def boom(*_args, **_kwargs):
        raise requests.exceptions.ConnectionError("down")

    monkeypatch.setattr(requests, "get", boom)
    config = OracleSettings(prices_url="https://prices.example", http_max_tries=1)

    result = await HttpPriceAdapter(config).fetch_prices([STX], PriceData())

    assert result.prices == {}


@pytest.mark.asyncio
async def test_http_adapter_invalid_payload_leaves_prices_unchanged(monkeypatch):
    monkeypatch.setattr(requests, "get", lambda *a, **k: FakeResponse(["not", "a", "map"]))
    config = OracleSettings(prices_url="https://prices.example")

    result = await HttpPriceAdapter(config).fetch_prices([STX], PriceData())

    assert result.prices == {}


def test_http_adapter_disabled_without_url():
    assert HttpPriceAdapter(OracleSettings()).enabled is False


@pytest.mark.asyncio
async def test_stablecoin_adapter_fills_only_missing_stablecoins():
    adapter = StablecoinAdapter(OracleSettings())
    observed = PriceEntry("SP1.usdt", 0.998, 1.0, PriceSource.BASE)
    usdt = TokenRef("SP1.usdt", "USDT")

    result = await adapter.fetch_prices(
        [STX, USDC, usdt], PriceData(prices={"SP1.usdt": observed})
    )

    assert result.prices["SP1.usdc"] == PriceEntry("SP1.usdc", 1.0, 1.0, PriceSource.BASE)
    assert result.prices["SP1.usdt"] is observed
    assert "SP1.wstx" not in result.prices


@pytest.mark.asyncio
async def test_stablecoin_symbols_are_configurable():
    adapter = StablecoinAdapter(OracleSettings(stablecoin_symbols=["ALEX"]))

    result = await adapter.fetch_prices([ALEX, USDC], PriceData())

    assert set(result.prices) == {"SP1.alex"}


@pytest.mark.asyncio
async def test_subnet_adapter_inherits_base_token_price():
    stx_subnet = TokenRef("SP2.wstx-subnet", "STX", base=STX.contract_id)
    base_entry = PriceEntry(STX.contract_id, 0.5, 0.9, PriceSource.BASE)

    result = await SubnetAdapter(OracleSettings()).fetch_prices(
        [STX, stx_subnet], PriceData(prices={STX.contract_id: base_entry})
    )

    assert result.prices["SP2.wstx-subnet"] == PriceEntry(
        "SP2.wstx-subnet", 0.5, 0.9, PriceSource.BASE
    )


@pytest.mark.asyncio
async def test_subnet_adapter_keeps_observed_price():
    stx_subnet = TokenRef("SP2.wstx-subnet", "STX", base=STX.contract_id)
    observed = PriceEntry("SP2.wstx-subnet", 0.48, 1.0, PriceSource.BASE)
    prices = {
        STX.contract_id: PriceEntry(STX.contract_id, 0.5, 1.0, PriceSource.BASE),
        "SP2.wstx-subnet": observed,
    }

    result = await SubnetAdapter(OracleSettings()).fetch_prices(
        [stx_subnet], PriceData(prices=prices)
    )

    assert result.prices["SP2.wstx-subnet"] is observed


@pytest.mark.asyncio
async def test_subnet_adapter_skips_unpriced_base_and_plain_tokens():
    stx_subnet = TokenRef("SP2.wstx-subnet", "STX", base=STX.contract_id)

    result = await SubnetAdapter(OracleSettings()).fetch_prices(
        [stx_subnet, USDC, ALEX], PriceData()
    )

    assert result.prices == {}


def test_subnet_adapter_runs_after_oracle_sources():
    assert PRICE_ADAPTERS == [
        JsonFilePriceAdapter,
        HttpPriceAdapter,
        SubnetAdapter,
        StablecoinAdapter,
    ]
