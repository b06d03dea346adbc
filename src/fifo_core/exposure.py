"""
Open exposure summary: residual buy lots -> per-instrument holdings.

Mark prices are supplied by the caller; nothing here quotes a market.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from fifo_core.contracts import Fill
from fifo_core.matcher import group_by_instrument


@dataclass(frozen=True)
class ExposureSummary:
    instrument: str
    net_volume: Decimal
    cost_basis: Decimal
    lots: int

    @property
    def avg_price(self) -> Decimal:
        if self.net_volume == 0:
            return Decimal("0")
        return self.cost_basis / self.net_volume


def summarize_exposure(open_exposure: Iterable[Fill]) -> list[ExposureSummary]:
    """One summary per instrument, in first-seen order. Only buy lots are counted."""
    out: list[ExposureSummary] = []
    for instrument, lots in group_by_instrument(f for f in open_exposure if f.is_buy()).items():
        out.append(
            ExposureSummary(
                instrument=instrument,
                net_volume=sum((f.volume for f in lots), Decimal("0")),
                cost_basis=sum((f.notional for f in lots), Decimal("0")),
                lots=len(lots),
            )
        )
    return out


def unrealized_profit(summary: ExposureSummary, mark_price: Decimal) -> Decimal:
    """Mark-to-market P&L of the open volume at mark_price."""
    return summary.net_volume * Decimal(str(mark_price)) - summary.cost_basis
