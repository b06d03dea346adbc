"""
Structured JSON event logger for matching runs.

Emits one JSON object per line to stderr. Events are designed to be
parsed by log aggregators (Grafana Loki, CloudWatch, ELK).

Optional webhook: when configured, alert events (unmatched_sell, error)
are POSTed to the URL.
"""

from __future__ import annotations

import json
import logging
import sys
import urllib.request
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

logger = logging.getLogger("ledger.events")


def _default(obj: Any) -> Any:
    if isinstance(obj, Decimal):
        return str(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


class StructuredEventLogger:
    """Emit structured JSON events to stderr and optional webhook."""

    def __init__(
        self,
        source: str,
        *,
        enabled: bool = True,
        webhook_url: str = "",
        stream: Any = None,
    ) -> None:
        self._source = source
        self._enabled = enabled
        self._webhook_url = webhook_url.strip()
        self._stream = stream or sys.stderr
        self._ALERT_EVENTS = {
            "unmatched_sell",
            "error",
        }

    def _emit(self, event_type: str, **fields: Any) -> dict:
        record = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "event": event_type,
            "source": self._source,
            **fields,
        }
        if self._enabled:
            self._stream.write(json.dumps(record, default=_default) + "\n")
            self._stream.flush()

        if self._webhook_url and event_type in self._ALERT_EVENTS:
            self._post_webhook(record)

        return record

    def _post_webhook(self, record: dict) -> None:
        try:
            data = json.dumps(record, default=_default).encode("utf-8")
            req = urllib.request.Request(
                self._webhook_url,
                data=data,
                headers={"Content-Type": "application/json"},
                method="POST",
            )
            urllib.request.urlopen(req, timeout=5)
        except Exception as exc:
            logger.warning("Webhook POST failed: %s", exc)

    def match_start(self, fills: int, instruments: int) -> dict:
        return self._emit("match_start", fills=fills, instruments=instruments)

    def position_closed(self, instrument: str, profit: Decimal, closed_at: int | float, fills: int) -> dict:
        return self._emit(
            "position_closed",
            instrument=instrument,
            profit=profit,
            closed_at=closed_at,
            fills=fills,
        )

    def unmatched_sell(self, instrument: str, order_id: str, volume: Decimal) -> dict:
        return self._emit(
            "unmatched_sell",
            instrument=instrument,
            order_id=order_id,
            volume=volume,
        )

    def match_complete(self, positions: int, open_lots: int, realized_profit: Decimal) -> dict:
        return self._emit(
            "match_complete",
            positions=positions,
            open_lots=open_lots,
            realized_profit=realized_profit,
        )

    def error(self, message: str, detail: str = "") -> dict:
        return self._emit("error", message=message, detail=detail)
