"""Pytest fixtures: fill sequences for deterministic matching tests."""

from decimal import Decimal

import pytest

from fifo_core.contracts import Fill


def _fill(order_id: str, direction: str, volume: str, price: str, ts: int, instrument: str = "XBTUSD") -> Fill:
    return Fill(order_id, instrument, direction, Decimal(volume), Decimal(price), ts)


@pytest.fixture
def instrument() -> str:
    return "XBTUSD"


@pytest.fixture
def fifo_fills() -> list[Fill]:
    """Two buys then one sell that consumes exactly the older buy."""
    return [
        _fill("B1", "buy", "1", "10", 100),
        _fill("B2", "buy", "1", "20", 200),
        _fill("S1", "sell", "1", "15", 300),
    ]


@pytest.fixture
def partial_fills() -> list[Fill]:
    """One buy closed by two sells; the first sell only partially consumes it."""
    return [
        _fill("B1", "buy", "2", "10", 100),
        _fill("S1", "sell", "1", "12", 200),
        _fill("S2", "sell", "1", "14", 300),
    ]


@pytest.fixture
def interleaved_fills() -> list[Fill]:
    """Two instruments interleaved in time; each closes one position."""
    return [
        _fill("A-B1", "buy", "1", "100", 100, "XBTUSD"),
        _fill("E-B1", "buy", "10", "5", 110, "ETHUSD"),
        _fill("A-S1", "sell", "1", "120", 120, "XBTUSD"),
        _fill("E-B2", "buy", "5", "6", 130, "ETHUSD"),
        _fill("E-S1", "sell", "15", "7", 140, "ETHUSD"),
    ]


@pytest.fixture
def closed_orders_payload() -> dict:
    """A Kraken ClosedOrders response envelope, as saved from the API."""
    return {
        "error": [],
        "result": {
            "closed": {
                "OB1": {
                    "status": "closed",
                    "descr": {"pair": "XBTUSD", "type": "buy"},
                    "vol_exec": "0.50000000",
                    "cost": "15000.0",
                    "fee": "39.0",
                    "price": "30000.0",
                    "closetm": 1688000000,
                },
                "OS1": {
                    "status": "closed",
                    "descr": {"pair": "XBTUSD", "type": "sell"},
                    "vol_exec": "0.50000000",
                    "cost": "16000.0",
                    "fee": "41.6",
                    "price": "32000.0",
                    "closetm": 1688100000,
                },
                "OB2": {
                    "status": "closed",
                    "descr": {"pair": "ETHUSD", "type": "buy"},
                    "vol_exec": "2.0",
                    "cost": "3800.0",
                    "fee": "9.8",
                    "price": "1900.0",
                    "closetm": 1688200000,
                },
                "OC1": {
                    "status": "canceled",
                    "descr": {"pair": "ETHUSD", "type": "sell"},
                    "vol_exec": "0.00000000",
                    "cost": "0.0",
                    "fee": "0.0",
                    "price": "0.0",
                    "closetm": 1688300000,
                },
            },
            "count": 4,
        },
    }
