"""
FIFO round-trip matcher: Fill list -> closed positions + open exposure.

Per instrument, buys queue oldest-first. Each sell consumes the head of the
queue (fully or partially) until it is exhausted or no open buy volume is left.
A position closes at the step where a sell's remaining volume reaches zero as
it exhausts the head lot, so the buy volume consumed since the previous close
is exactly offset (with nothing else queued this is the point where open buy
volume and remaining sell volume are both zero). A sell larger than all open
buy volume closes the position with its matched part; the excess is reported
as an unmatched sell. Its fills are that buy volume followed by the sells that
consumed it. Consumption not yet closed at the end of the window is reported
as pending, so every buy unit lands in exactly one output.

Stateless: all queues and running totals live inside one match_fills() call.
"""

import logging
from collections import deque
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Iterable

from fifo_core.contracts import Fill, MatchResult, Position

logger = logging.getLogger("ledger.matcher")

_ZERO = Decimal("0")


@dataclass
class _OpenLot:
    """Queue entry: a buy fill and the part of its volume not yet sold."""

    fill: Fill
    remaining: Decimal


@dataclass
class _Consumption:
    lot: _OpenLot
    volume: Decimal


@dataclass
class _PositionBuilder:
    """Buy consumption and sells accumulated since the last close."""

    buys: list[_Consumption] = field(default_factory=list)
    sells: list[Fill] = field(default_factory=list)

    def consume(self, lot: _OpenLot, volume: Decimal) -> None:
        # Consecutive takes from the same lot collapse into one reported fill
        if self.buys and self.buys[-1].lot is lot:
            self.buys[-1].volume += volume
        else:
            self.buys.append(_Consumption(lot, volume))

    def fills(self) -> list[Fill]:
        consumed = [replace(c.lot.fill, volume=c.volume) for c in self.buys]
        return consumed + self.sells

    def is_empty(self) -> bool:
        return not self.buys and not self.sells


def profit(fills: Iterable[Fill]) -> Decimal:
    """Realized profit: sell notional minus buy notional over exactly these fills."""
    fills = list(fills)
    bought = sum((f.notional for f in fills if f.is_buy()), _ZERO)
    sold = sum((f.notional for f in fills if f.is_sell()), _ZERO)
    return sold - bought


def group_by_instrument(fills: Iterable[Fill]) -> dict[str, list[Fill]]:
    """Partition fills by instrument, keeping first-seen instrument order and input order."""
    groups: dict[str, list[Fill]] = {}
    for f in fills:
        groups.setdefault(f.instrument, []).append(f)
    return groups


def match_fills(fills: Iterable[Fill]) -> MatchResult:
    """
    Match buys against sells FIFO, independently per instrument.

    Fills may arrive in any order; each instrument's fills are stably sorted by
    settled_at, so equal timestamps keep their input order.
    """
    closed: list[Position] = []
    open_exposure: list[Fill] = []
    unmatched: list[Fill] = []
    ignored: list[Fill] = []
    pending: list[Fill] = []

    for instrument, group in group_by_instrument(fills).items():
        result = _match_instrument(instrument, group)
        closed.extend(result.closed_positions)
        open_exposure.extend(result.open_exposure)
        unmatched.extend(result.unmatched_sells)
        ignored.extend(result.ignored_fills)
        pending.extend(result.pending)

    logger.debug(
        "Matched %d positions, %d open lots, %d unmatched sells, %d ignored fills",
        len(closed), len(open_exposure), len(unmatched), len(ignored),
    )
    return MatchResult(
        closed_positions=tuple(closed),
        open_exposure=tuple(open_exposure),
        unmatched_sells=tuple(unmatched),
        ignored_fills=tuple(ignored),
        pending=tuple(pending),
    )


def _match_instrument(instrument: str, fills: list[Fill]) -> MatchResult:
    queue: deque[_OpenLot] = deque()
    open_buy_volume = _ZERO
    builder = _PositionBuilder()
    closed: list[Position] = []
    unmatched: list[Fill] = []
    ignored: list[Fill] = []

    for fill in sorted(fills, key=lambda f: f.settled_at):
        if not (fill.is_buy() or fill.is_sell()):
            logger.debug("Ignoring fill %s: unknown direction %r", fill.order_id, fill.direction)
            ignored.append(fill)
            continue
        if fill.volume == 0:
            ignored.append(fill)
            continue

        if fill.is_buy():
            queue.append(_OpenLot(fill, fill.volume))
            open_buy_volume += fill.volume
            continue

        remaining = fill.volume
        matched = _ZERO
        while remaining > 0 and open_buy_volume > 0:
            head = queue[0]
            exhausted = remaining >= head.remaining
            if exhausted:
                taken = head.remaining
                queue.popleft()
            else:
                taken = remaining
            head.remaining -= taken
            remaining -= taken
            open_buy_volume -= taken
            matched += taken
            builder.consume(head, taken)

            # An overshooting sell empties the queue: its matched part offsets the position
            if exhausted and (remaining == 0 or open_buy_volume == 0):
                builder.sells.append(replace(fill, volume=matched))
                position_fills = builder.fills()
                closed.append(
                    Position(
                        instrument=instrument,
                        fills=tuple(position_fills),
                        profit=profit(position_fills),
                        closed_at=fill.settled_at,
                    )
                )
                builder = _PositionBuilder()
                matched = _ZERO

        if matched > 0:
            builder.sells.append(replace(fill, volume=matched))
        if remaining > 0:
            logger.warning(
                "Sell %s on %s exceeds open buy volume by %s; excess left unmatched",
                fill.order_id, instrument, remaining,
            )
            unmatched.append(replace(fill, volume=remaining))

    if not builder.is_empty():
        logger.debug("%s: partially consumed buy volume still open at end of window", instrument)

    return MatchResult(
        closed_positions=tuple(closed),
        open_exposure=tuple(replace(lot.fill, volume=lot.remaining) for lot in queue),
        unmatched_sells=tuple(unmatched),
        ignored_fills=tuple(ignored),
        pending=tuple(builder.fills()),
    )
