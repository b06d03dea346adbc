"""
Config loader: YAML file -> frozen dataclass tree.

Exchange secrets resolved from environment variables (KRAKEN_API_KEY, KRAKEN_API_SECRET).
Config file holds only non-secret values.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

import yaml

logger = logging.getLogger("ledger.config")


@dataclass(frozen=True)
class DataConfig:
    source: str
    fill_store_path: str
    export_path: str = "data/closed_orders.json"
    api_key: str = ""
    api_secret: str = ""


@dataclass(frozen=True)
class JournalConfig:
    path: str = "data/journal.jsonl"
    echo_stdout: bool = False


@dataclass(frozen=True)
class AlertingConfig:
    structured_logs: bool = True
    webhook_url: str = ""


@dataclass(frozen=True)
class AppConfig:
    data: DataConfig
    journal: JournalConfig
    alerting: AlertingConfig = AlertingConfig()
    instruments: tuple[str, ...] = ()  # empty = every instrument in the store


def load_config(path: str | Path = "config.yaml") -> AppConfig:
    """
    Load configuration from a YAML file.

    Exchange keys are resolved from environment variables:
      - KRAKEN_API_KEY
      - KRAKEN_API_SECRET
    They are carried for the trade-history fetcher only.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f)

    if not isinstance(raw, dict):
        raise ValueError(f"Config file must be a YAML mapping, got {type(raw).__name__}")

    data_raw = raw.get("data", {})
    data_cfg = DataConfig(
        source=data_raw.get("source", "kraken_export"),
        fill_store_path=data_raw.get("fill_store_path", "data/fills.db"),
        export_path=data_raw.get("export_path", "data/closed_orders.json"),
        api_key=os.environ.get("KRAKEN_API_KEY", ""),
        api_secret=os.environ.get("KRAKEN_API_SECRET", ""),
    )

    j_raw = raw.get("journal", {})
    j_cfg = JournalConfig(
        path=j_raw.get("path", "data/journal.jsonl"),
        echo_stdout=bool(j_raw.get("echo_stdout", False)),
    )

    a_raw = raw.get("alerting", {})
    a_cfg = AlertingConfig(
        structured_logs=bool(a_raw.get("structured_logs", True)),
        webhook_url=str(a_raw.get("webhook_url", "")),
    )

    instruments = raw.get("instruments") or []
    if isinstance(instruments, str):
        instruments = [instruments]
    logger.debug("Loaded config from %s", config_path)

    return AppConfig(
        data=data_cfg,
        journal=j_cfg,
        alerting=a_cfg,
        instruments=tuple(str(i) for i in instruments),
    )
