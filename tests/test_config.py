"""Tests for config loader: YAML parsing, env var resolution, error cases."""

import os
import tempfile
from pathlib import Path

import pytest

from config import load_config


def test_load_config_basic() -> None:
    with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        f.write(
            """
data:
  source: kraken_export
  export_path: exports/closed.json
  fill_store_path: test_fills.db
journal:
  path: test_journal.jsonl
instruments:
  - XBTUSD
  - ETHUSD
"""
        )
        path = f.name
    try:
        cfg = load_config(path)
        assert cfg.data.source == "kraken_export"
        assert cfg.data.export_path == "exports/closed.json"
        assert cfg.data.fill_store_path == "test_fills.db"
        assert cfg.journal.path == "test_journal.jsonl"
        assert cfg.journal.echo_stdout is False
        assert cfg.instruments == ("XBTUSD", "ETHUSD")
    finally:
        os.unlink(path)


def test_load_config_env_vars(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("data:\n  fill_store_path: f.db\n")
    monkeypatch.setenv("KRAKEN_API_KEY", "test_key_123")
    monkeypatch.setenv("KRAKEN_API_SECRET", "test_secret_456")
    cfg = load_config(path)
    assert cfg.data.api_key == "test_key_123"
    assert cfg.data.api_secret == "test_secret_456"


def test_load_config_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("{}\n")
    cfg = load_config(path)
    assert cfg.data.fill_store_path == "data/fills.db"
    assert cfg.journal.path == "data/journal.jsonl"
    assert cfg.alerting.structured_logs is True
    assert cfg.alerting.webhook_url == ""
    assert cfg.instruments == ()


def test_load_config_single_instrument_string(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("instruments: XBTUSD\n")
    assert load_config(path).instruments == ("XBTUSD",)


def test_load_config_missing_file() -> None:
    with pytest.raises(FileNotFoundError, match="Config file not found"):
        load_config("/nonexistent/config.yaml")


def test_load_config_not_a_mapping(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n")
    with pytest.raises(ValueError, match="YAML mapping"):
        load_config(path)
