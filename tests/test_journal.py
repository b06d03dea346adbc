"""Tests for journal writer. Append-only; one record per position, lot, unmatched sell."""

import json
from decimal import Decimal
from pathlib import Path

from fifo_core.contracts import Fill
from fifo_core.matcher import match_fills
from journal.writer import JournalWriter


def _read(path: Path) -> list[dict]:
    return [json.loads(line) for line in path.read_text().splitlines()]


def test_journal_match_run(tmp_path: Path, fifo_fills: list[Fill]) -> None:
    path = tmp_path / "journal" / "journal.jsonl"
    j = JournalWriter(path)
    oversold = Fill("S9", "ETHUSD", "sell", Decimal("2"), Decimal("1800"), 400)
    j.match_run(match_fills(fifo_fills + [oversold]), instrument=None)

    records = _read(path)
    assert [r["event"] for r in records] == ["position_closed", "open_lot", "unmatched_sell", "match_run"]
    closed = records[0]
    assert closed["instrument"] == "XBTUSD"
    assert closed["profit"] == "5"
    assert closed["order_ids"] == ["B1", "S1"]
    assert closed["closed_at"] == 300
    assert records[1]["order_id"] == "B2"
    assert records[2]["volume"] == "2"
    summary = records[3]
    assert summary["closed_positions"] == 1
    assert summary["realized_profit"] == "5"
    assert summary["pending_fills"] == 0
    assert "ts_utc" in summary


def test_journal_is_append_only(tmp_path: Path, fifo_fills: list[Fill]) -> None:
    path = tmp_path / "journal.jsonl"
    j = JournalWriter(path)
    result = match_fills(fifo_fills)
    j.position_closed(result.closed_positions[0])
    j.position_closed(result.closed_positions[0], note="again")
    records = _read(path)
    assert len(records) == 2
    assert records[1]["note"] == "again"
