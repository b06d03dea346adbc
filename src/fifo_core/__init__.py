"""
fifo-core: FIFO round-trip matching over executed fills.

Consumes Fill lists (already parsed and validated at the data boundary) and
produces closed Positions with realized profit plus residual open exposure.
No I/O, no persisted state.
"""

from fifo_core.contracts import Fill, InvalidFillError, MatchResult, Position, Side
from fifo_core.exposure import ExposureSummary, summarize_exposure, unrealized_profit
from fifo_core.matcher import group_by_instrument, match_fills, profit

__all__ = [
    "ExposureSummary",
    "Fill",
    "InvalidFillError",
    "MatchResult",
    "Position",
    "Side",
    "group_by_instrument",
    "match_fills",
    "profit",
    "summarize_exposure",
    "unrealized_profit",
]
