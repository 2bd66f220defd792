"""
Bot configuration record.

The flat record the operator edits, persists and hands to the bot runtime.
Wire keys are camelCase; applying a record ignores unknown keys and keeps
the current value for missing ones.
"""

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Optional, Union

import orjson
import yaml

from ..errors import InvalidConfigError

# wire key -> attribute name
RECORD_FIELDS: dict[str, str] = {
    "symbol": "symbol",
    "tickIntervalSeconds": "tick_interval_seconds",
    "paperTrading": "paper_trading",
    "connectorId": "connector_id",
    "connectorParams": "connector_params",
    "strategyId": "strategy_id",
    "strategyParams": "strategy_params",
    "riskLevel": "risk_level",
}

# Keys written by older exports
RECORD_ALIASES: dict[str, str] = {
    "connector": "connector_id",
    "strategy": "strategy_id",
}

CONFIG_VERSION = 1


@dataclass(frozen=True)
class BotConfig:
    """Configuration handed to the bot runtime on start."""
    symbol: str = "BTCUSDT"
    tick_interval_seconds: int = 5
    paper_trading: bool = True
    connector_id: str = "simulation"
    connector_params: dict[str, str] = field(default_factory=dict)
    strategy_id: str = "sma_crossover"
    strategy_params: dict[str, float] = field(default_factory=dict)
    risk_level: str = "moderate"

    def to_record(self) -> dict[str, Any]:
        """Serialize into the flat persisted record shape."""
        record: dict[str, Any] = {}
        for key, attr in RECORD_FIELDS.items():
            value = getattr(self, attr)
            record[key] = dict(value) if isinstance(value, dict) else value
        return record

    def apply_record(self, record: dict[str, Any]) -> "BotConfig":
        """
        Return a copy with the record's known fields applied.

        Unknown keys are ignored and fields absent from the record keep
        their current value.
        """
        updates: dict[str, Any] = {}
        for key, value in record.items():
            attr = RECORD_FIELDS.get(key) or RECORD_ALIASES.get(key)
            if attr is None:
                continue
            updates[attr] = dict(value) if isinstance(value, dict) else value
        return replace(self, **updates) if updates else self

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "BotConfig":
        """Build a config from defaults plus the record."""
        return cls().apply_record(record)

    def save(self, path: Union[str, Path]) -> Path:
        """Persist the record as JSON or YAML depending on the file suffix."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"version": CONFIG_VERSION, **self.to_record()}

        if path.suffix in (".yaml", ".yml"):
            path.write_text(yaml.safe_dump(payload, sort_keys=False))
        else:
            path.write_bytes(orjson.dumps(payload, option=orjson.OPT_INDENT_2))
        return path

    @classmethod
    def load(cls, path: Union[str, Path], base: Optional["BotConfig"] = None) -> "BotConfig":
        """Load a persisted record and apply it over base (defaults if omitted)."""
        path = Path(path)
        raw = path.read_bytes()

        if path.suffix in (".yaml", ".yml"):
            record = yaml.safe_load(raw)
        else:
            try:
                record = orjson.loads(raw)
            except orjson.JSONDecodeError as e:
                raise InvalidConfigError(
                    f"Config file is not valid JSON: {e}",
                    context={"path": str(path)}
                ) from e

        if not isinstance(record, dict):
            raise InvalidConfigError(
                "Config file must contain a mapping",
                context={"path": str(path)}
            )

        return (base or cls()).apply_record(record)
