"""Tests for structured JSON event logger."""

import io
import json
from decimal import Decimal
from unittest.mock import patch

import pytest

from cli.structured_log import StructuredEventLogger


@pytest.fixture
def buf() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def logger(buf: io.StringIO) -> StructuredEventLogger:
    return StructuredEventLogger("match", enabled=True, stream=buf)


class TestEmit:
    """Basic event emission and format."""

    def test_match_start_json(self, logger: StructuredEventLogger, buf: io.StringIO) -> None:
        logger.match_start(fills=12, instruments=3)
        record = json.loads(buf.getvalue().strip())
        assert record["event"] == "match_start"
        assert record["source"] == "match"
        assert record["fills"] == 12
        assert record["instruments"] == 3
        assert "ts" in record

    def test_position_closed_decimal_as_string(self, logger: StructuredEventLogger, buf: io.StringIO) -> None:
        logger.position_closed("XBTUSD", Decimal("12.50"), 1688000000, fills=3)
        record = json.loads(buf.getvalue().strip())
        assert record["event"] == "position_closed"
        assert record["profit"] == "12.50"
        assert record["closed_at"] == 1688000000

    def test_unmatched_sell(self, logger: StructuredEventLogger, buf: io.StringIO) -> None:
        logger.unmatched_sell("ETHUSD", "S9", Decimal("2"))
        record = json.loads(buf.getvalue().strip())
        assert record["event"] == "unmatched_sell"
        assert record["order_id"] == "S9"
        assert record["volume"] == "2"

    def test_match_complete(self, logger: StructuredEventLogger, buf: io.StringIO) -> None:
        logger.match_complete(positions=2, open_lots=1, realized_profit=Decimal("-3"))
        record = json.loads(buf.getvalue().strip())
        assert record["positions"] == 2
        assert record["realized_profit"] == "-3"

    def test_multiple_events_one_per_line(self, logger: StructuredEventLogger, buf: io.StringIO) -> None:
        logger.match_start(fills=1, instruments=1)
        logger.error("boom", detail="trace")
        lines = buf.getvalue().strip().splitlines()
        assert len(lines) == 2
        assert json.loads(lines[1])["event"] == "error"


class TestDisabledAndWebhook:
    def test_disabled_writes_nothing(self, buf: io.StringIO) -> None:
        log = StructuredEventLogger("match", enabled=False, stream=buf)
        record = log.match_start(fills=1, instruments=1)
        assert buf.getvalue() == ""
        assert record["event"] == "match_start"

    def test_webhook_only_for_alert_events(self, buf: io.StringIO) -> None:
        log = StructuredEventLogger("match", stream=buf, webhook_url="http://hooks.invalid/x")
        with patch("cli.structured_log.urllib.request.urlopen") as urlopen:
            log.match_start(fills=1, instruments=1)
            assert urlopen.call_count == 0
            log.unmatched_sell("XBTUSD", "S1", Decimal("1"))
            assert urlopen.call_count == 1

    def test_webhook_failure_does_not_raise(self, buf: io.StringIO) -> None:
        log = StructuredEventLogger("match", stream=buf, webhook_url="http://hooks.invalid/x")
        with patch("cli.structured_log.urllib.request.urlopen", side_effect=OSError("down")):
            log.error("boom")
        assert json.loads(buf.getvalue().strip())["event"] == "error"
