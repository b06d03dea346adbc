"""
Fetch executed fills from a trade-history source. Configurable adapter; sync.
"""

from dataclasses import dataclass
from typing import Protocol

from fifo_core.contracts import Fill


@dataclass
class FetchResult:
    """Result of a fetch: fills and optional next cursor for pagination."""

    fills: list[Fill]
    source: str
    next_cursor: str | None = None


class FillSource(Protocol):
    """Protocol for fill sources. Implement per provider (exchange API, export file, etc.)."""

    def fetch(
        self,
        *,
        start: int | float | None = None,
        end: int | float | None = None,
        cursor: str | None = None,
    ) -> FetchResult:
        """Fetch fills settled within [start, end] (epoch seconds). Returns FetchResult."""
        ...


class MockFillSource:
    """Returns a fixed list of fills; for tests and when no source is configured."""

    def __init__(self, fills: list[Fill] | None = None) -> None:
        self._fills = list(fills or [])

    def fetch(
        self,
        *,
        start: int | float | None = None,
        end: int | float | None = None,
        cursor: str | None = None,
    ) -> FetchResult:
        return FetchResult(fills=filter_window(self._fills, start, end), source="mock")


def filter_window(fills: list[Fill], start: int | float | None, end: int | float | None) -> list[Fill]:
    return [
        f
        for f in fills
        if (start is None or f.settled_at >= start) and (end is None or f.settled_at <= end)
    ]
