"""
Persist and load executed fills (SQLite). Decimals stored as text.
"""

import sqlite3
from decimal import Decimal
from pathlib import Path
from typing import Sequence

from fifo_core.contracts import Fill


class FillStore:
    """SQLite-backed fill storage. One file per path; fills keyed by order_id."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    def _conn(self) -> sqlite3.Connection:
        return sqlite3.connect(str(self._path))

    def _init_schema(self) -> None:
        with self._conn() as c:
            c.execute(
                """
                CREATE TABLE IF NOT EXISTS fills (
                    seq INTEGER PRIMARY KEY AUTOINCREMENT,
                    order_id TEXT NOT NULL UNIQUE,
                    instrument TEXT NOT NULL,
                    direction TEXT NOT NULL,
                    volume TEXT NOT NULL,
                    price TEXT NOT NULL,
                    settled_at REAL NOT NULL
                )
                """
            )

    def write_fills(self, fills: Sequence[Fill]) -> int:
        """Upsert fills by order_id. A re-ingested order keeps its original insertion slot."""
        with self._conn() as c:
            for f in fills:
                c.execute(
                    """
                    INSERT INTO fills (order_id, instrument, direction, volume, price, settled_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                    ON CONFLICT(order_id) DO UPDATE SET
                        instrument = excluded.instrument,
                        direction = excluded.direction,
                        volume = excluded.volume,
                        price = excluded.price,
                        settled_at = excluded.settled_at
                    """,
                    (f.order_id, f.instrument, f.direction, str(f.volume), str(f.price), f.settled_at),
                )
        return len(fills)

    def get_fills(
        self,
        *,
        instrument: str | None = None,
        since: int | float | None = None,
        until: int | float | None = None,
    ) -> list[Fill]:
        """Return fills ordered by settled_at, then insertion order."""
        with self._conn() as c:
            q = "SELECT order_id, instrument, direction, volume, price, settled_at FROM fills WHERE 1 = 1"
            params: list = []
            if instrument is not None:
                q += " AND instrument = ?"
                params.append(instrument)
            if since is not None:
                q += " AND settled_at >= ?"
                params.append(since)
            if until is not None:
                q += " AND settled_at <= ?"
                params.append(until)
            q += " ORDER BY settled_at ASC, seq ASC"
            rows = c.execute(q, params).fetchall()
        return [self._row_to_fill(r) for r in rows]

    def count_fills(self, instrument: str | None = None) -> int:
        with self._conn() as c:
            if instrument is None:
                row = c.execute("SELECT COUNT(*) FROM fills").fetchone()
            else:
                row = c.execute("SELECT COUNT(*) FROM fills WHERE instrument = ?", (instrument,)).fetchone()
        return row[0] if row else 0

    def instruments(self) -> list[str]:
        """Distinct instruments in first-ingested order."""
        with self._conn() as c:
            rows = c.execute(
                "SELECT instrument FROM fills GROUP BY instrument ORDER BY MIN(seq)"
            ).fetchall()
        return [r[0] for r in rows]

    @staticmethod
    def _row_to_fill(row: tuple) -> Fill:
        order_id, instrument, direction, volume, price, settled_at = row
        # REAL column; restore ints so round-tripped timestamps compare equal
        if float(settled_at).is_integer():
            settled_at = int(settled_at)
        return Fill(
            order_id=order_id,
            instrument=instrument,
            direction=direction,
            volume=Decimal(volume),
            price=Decimal(price),
            settled_at=settled_at,
        )
