"""
Structured journal: append-only JSON lines. One record per closed position, open lot and unmatched sell.
"""

import json
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Any

from fifo_core.contracts import Fill, MatchResult, Position


def _serialize(obj: Any) -> Any:
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, Decimal):
        return str(obj)
    if hasattr(obj, "__dict__") and not isinstance(obj, type):
        return {k: _serialize(v) for k, v in vars(obj).items() if not k.startswith("_")}
    if isinstance(obj, dict):
        return {k: _serialize(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_serialize(x) for x in obj]
    return obj


class JournalWriter:
    """Append-only journal. Each line is a JSON object with event type and payload."""

    def __init__(self, path: str | Path, *, echo_stdout: bool = False) -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._echo = echo_stdout

    def _write(self, event_type: str, payload: dict) -> None:
        record = {"ts_utc": datetime.now(timezone.utc).isoformat(), "event": event_type, **payload}
        line = json.dumps(_serialize(record)) + "\n"
        with open(self._path, "a") as f:
            f.write(line)
        if self._echo:
            print(line.rstrip())

    def position_closed(self, position: Position, **extra: Any) -> None:
        self._write(
            "position_closed",
            {
                "instrument": position.instrument,
                "profit": position.profit,
                "closed_at": position.closed_at,
                "volume": position.volume,
                "order_ids": [f.order_id for f in position.fills],
                **extra,
            },
        )

    def open_lot(self, fill: Fill, **extra: Any) -> None:
        self._write(
            "open_lot",
            {"order_id": fill.order_id, "instrument": fill.instrument, "volume": fill.volume, "price": fill.price, "settled_at": fill.settled_at, **extra},
        )

    def unmatched_sell(self, fill: Fill, **extra: Any) -> None:
        self._write(
            "unmatched_sell",
            {"order_id": fill.order_id, "instrument": fill.instrument, "volume": fill.volume, "price": fill.price, "settled_at": fill.settled_at, **extra},
        )

    def match_run(self, result: MatchResult, **extra: Any) -> None:
        """Journal every record of one matching run, then a summary line."""
        for position in result.closed_positions:
            self.position_closed(position)
        for fill in result.open_exposure:
            self.open_lot(fill)
        for fill in result.unmatched_sells:
            self.unmatched_sell(fill)
        self._write(
            "match_run",
            {
                "closed_positions": len(result.closed_positions),
                "open_lots": len(result.open_exposure),
                "unmatched_sells": len(result.unmatched_sells),
                "ignored_fills": len(result.ignored_fills),
                "pending_fills": len(result.pending),
                "realized_profit": result.realized_profit,
                **extra,
            },
        )
