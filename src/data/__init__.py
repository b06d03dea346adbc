"""
Data boundary: read executed fills from a source, validate once, persist to a fill store.

Depends on fifo_core.contracts for Fill; no dependency from fifo_core back to data.
"""

from data.fill_store import FillStore
from data.kraken_export import ExportFormatError, KrakenExportSource, load_export, parse_closed_orders
from data.source import FetchResult, FillSource, MockFillSource

__all__ = [
    "ExportFormatError",
    "FetchResult",
    "FillSource",
    "FillStore",
    "KrakenExportSource",
    "MockFillSource",
    "load_export",
    "parse_closed_orders",
]
