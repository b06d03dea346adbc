"""
Human-readable matching output for the terminal, plus the JSON report shape.

Every CLI command uses these formatters. Journal receives the same data.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from fifo_core.contracts import Fill, MatchResult, Position
from fifo_core.exposure import ExposureSummary, unrealized_profit


def _fmt_ts(ts: int | float) -> str:
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat()


def _fmt_money(value: Decimal) -> str:
    return f"{value:+,.2f}"


def format_fill(fill: Fill) -> str:
    return f"{fill.direction.upper():<4} {fill.volume} @ {fill.price}  ({fill.order_id}, {_fmt_ts(fill.settled_at)})"


def format_position(index: int, position: Position) -> str:
    lines = [f"  Position #{index}: {position.instrument} | closed {_fmt_ts(position.closed_at)} | profit {_fmt_money(position.profit)}"]
    for f in position.fills:
        lines.append(f"    {format_fill(f)}")
    return "\n".join(lines)


def format_match_report(result: MatchResult) -> str:
    """Full match output: closed positions, open lots, and the explicit gap reports."""
    lines = [
        "=== FIFO Match ===",
        f"Closed positions : {len(result.closed_positions)}",
        f"Realized profit  : {_fmt_money(result.realized_profit)}",
        f"Open lots        : {len(result.open_exposure)}",
    ]
    if result.closed_positions:
        lines.append("")
        for i, p in enumerate(result.closed_positions, 1):
            lines.append(format_position(i, p))
    if result.open_exposure:
        lines.append("")
        lines.append("Open exposure:")
        for f in result.open_exposure:
            lines.append(f"  {f.instrument}: {format_fill(f)}")
    if result.unmatched_sells:
        lines.append("")
        lines.append("Unmatched sell volume (no open buys):")
        for f in result.unmatched_sells:
            lines.append(f"  {f.instrument}: {format_fill(f)}")
    if result.pending:
        lines.append("")
        lines.append("Pending (consumed, position not yet closed):")
        for f in result.pending:
            lines.append(f"  {f.instrument}: {format_fill(f)}")
    if result.ignored_fills:
        lines.append("")
        lines.append(f"Ignored fills    : {len(result.ignored_fills)} (zero volume or unknown direction)")
    lines.append("===")
    return "\n".join(lines)


def format_exposure(summaries: list[ExposureSummary], marks: dict[str, Decimal] | None = None) -> str:
    """Per-instrument open volume, average entry and, where a mark is given, unrealized P&L."""
    marks = marks or {}
    if not summaries:
        return "=== Open Exposure ===\nflat (no open buy volume)\n==="
    lines = ["=== Open Exposure ==="]
    for s in summaries:
        line = f"{s.instrument:<10} vol {s.net_volume}  avg {s.avg_price:.4f}  cost {s.cost_basis:,.2f}  lots {s.lots}"
        mark = marks.get(s.instrument)
        if mark is not None:
            line += f"  | mark {mark}  uPnL {_fmt_money(unrealized_profit(s, mark))}"
        lines.append(line)
    lines.append("===")
    return "\n".join(lines)


def _fill_dict(fill: Fill) -> dict[str, Any]:
    return {
        "orderId": fill.order_id,
        "instrument": fill.instrument,
        "direction": fill.direction,
        "volume": str(fill.volume),
        "price": str(fill.price),
        "settledAt": fill.settled_at,
    }


def to_report(result: MatchResult) -> dict[str, Any]:
    """Boundary shape: completedTrades / openExposure, plus the gap and pending reports. Decimals as strings."""
    return {
        "completedTrades": [
            {
                "instrument": p.instrument,
                "fills": [_fill_dict(f) for f in p.fills],
                "profit": str(p.profit),
                "closedAt": p.closed_at,
            }
            for p in result.closed_positions
        ],
        "openExposure": [_fill_dict(f) for f in result.open_exposure],
        "unmatchedSells": [_fill_dict(f) for f in result.unmatched_sells],
        "ignoredFills": [_fill_dict(f) for f in result.ignored_fills],
        "pendingFills": [_fill_dict(f) for f in result.pending],
    }
