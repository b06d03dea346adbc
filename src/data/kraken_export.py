"""
Kraken closed-orders export: implements FillSource over a saved ClosedOrders response.

Maps each closed order to fifo_core.contracts.Fill:
  key -> order_id, descr.pair -> instrument, descr.type -> direction,
  vol_exec -> volume, price -> price, closetm -> settled_at.
Numeric fields arrive as decimal strings and are parsed once, here.
The payload is validated against a bundled JSON Schema before mapping.
"""

import json
import logging
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import jsonschema

from fifo_core.contracts import Fill

from data.source import FetchResult, filter_window

logger = logging.getLogger("ledger.data")

SCHEMA_PATH = Path(__file__).resolve().parent / "schemas" / "kraken_closed_orders.schema.json"


class ExportFormatError(Exception):
    """Raised when an export is unreadable, reports API errors, or fails schema validation."""


def _load_schema() -> dict[str, Any]:
    with open(SCHEMA_PATH) as f:
        return json.load(f)


def _closed_orders(payload: Any) -> dict[str, Any]:
    """Accept the full envelope, the result object, or the bare closed-order mapping."""
    if not isinstance(payload, dict):
        raise ExportFormatError(f"Export must be a JSON object, got {type(payload).__name__}")
    errors = payload.get("error")
    if errors:
        raise ExportFormatError(f"Export carries API errors: {', '.join(map(str, errors))}")
    if "result" in payload:
        payload = payload["result"] or {}
    if "closed" in payload:
        payload = payload["closed"] or {}
    return payload


def _decimal(value: Any, field_name: str, order_id: str) -> Decimal:
    try:
        parsed = Decimal(str(value))
    except InvalidOperation as exc:
        raise ExportFormatError(f"Order {order_id}: {field_name} is not a number: {value!r}") from exc
    if not parsed.is_finite():
        raise ExportFormatError(f"Order {order_id}: {field_name} is not finite: {value!r}")
    return parsed


def parse_closed_orders(payload: Any) -> list[Fill]:
    """Validate a ClosedOrders payload and map it to Fills, in payload order."""
    closed = _closed_orders(payload)
    try:
        jsonschema.validate(instance=closed, schema=_load_schema())
    except jsonschema.ValidationError as exc:
        raise ExportFormatError(f"Closed-orders export failed validation: {exc.message}") from exc

    fills: list[Fill] = []
    for order_id, order in closed.items():
        fills.append(
            Fill(
                order_id=order_id,
                instrument=order["descr"]["pair"],
                direction=order["descr"]["type"],
                volume=_decimal(order["vol_exec"], "vol_exec", order_id),
                price=_decimal(order["price"], "price", order_id),
                settled_at=order["closetm"],
            )
        )
    logger.info("Parsed %d closed orders", len(fills))
    return fills


def load_export(path: str | Path) -> list[Fill]:
    """Read a ClosedOrders JSON file from disk and parse it."""
    export_path = Path(path)
    if not export_path.exists():
        raise FileNotFoundError(f"Export file not found: {export_path}")
    try:
        with open(export_path) as f:
            payload = json.load(f)
    except json.JSONDecodeError as exc:
        raise ExportFormatError(f"Export {export_path.name} is not valid JSON: {exc}") from exc
    return parse_closed_orders(payload)


class KrakenExportSource:
    """
    Fill source backed by a saved ClosedOrders response.

    The whole file is one page; next_cursor is always None.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    def fetch(
        self,
        *,
        start: int | float | None = None,
        end: int | float | None = None,
        cursor: str | None = None,
    ) -> FetchResult:
        fills = filter_window(load_export(self._path), start, end)
        logger.info("Fetched %d fills from %s", len(fills), self._path.name)
        return FetchResult(fills=fills, source=f"kraken-export:{self._path.name}")
