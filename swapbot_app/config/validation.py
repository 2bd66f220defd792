"""Configuration validation utilities."""

from dataclasses import dataclass
from typing import Any, Optional

from .bot_config import BotConfig
from .defaults import SessionParams


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any

    def describe(self) -> str:
        """One-line operator-facing description."""
        return f"{self.field}: {self.message} (got: {self.value!r})"


class ConfigValidator:
    """Validates bot configuration before a session starts."""

    @staticmethod
    def validate_bot_config(
        config: BotConfig,
        params: Optional[SessionParams] = None
    ) -> list[ValidationError]:
        """Validate a bot configuration record."""
        params = params or SessionParams()
        errors = []

        # Validate symbol
        symbol = config.symbol
        if not isinstance(symbol, str) or not symbol.strip():
            errors.append(ValidationError(
                field="symbol",
                message="Must be a non-empty symbol identifier",
                value=symbol
            ))

        # Validate tick interval
        interval = config.tick_interval_seconds
        low = params.min_tick_interval_seconds
        high = params.max_tick_interval_seconds
        if isinstance(interval, bool) or not isinstance(interval, int):
            errors.append(ValidationError(
                field="tickIntervalSeconds",
                message="Must be an integer number of seconds",
                value=interval
            ))
        elif not low <= interval <= high:
            errors.append(ValidationError(
                field="tickIntervalSeconds",
                message=f"Must be between {low} and {high} seconds",
                value=interval
            ))

        # Validate paper trading flag
        if not isinstance(config.paper_trading, bool):
            errors.append(ValidationError(
                field="paperTrading",
                message="Must be a boolean",
                value=config.paper_trading
            ))

        # Validate risk level
        if config.risk_level not in params.risk_levels:
            errors.append(ValidationError(
                field="riskLevel",
                message=f"Must be one of {', '.join(params.risk_levels)}",
                value=config.risk_level
            ))

        # Validate identifiers
        for field_name, value in (("connectorId", config.connector_id),
                                  ("strategyId", config.strategy_id)):
            if not isinstance(value, str) or not value.strip():
                errors.append(ValidationError(
                    field=field_name,
                    message="Must be a non-empty identifier",
                    value=value
                ))

        # Validate parameter mappings
        for field_name, value in (("connectorParams", config.connector_params),
                                  ("strategyParams", config.strategy_params)):
            if not isinstance(value, dict):
                errors.append(ValidationError(
                    field=field_name,
                    message="Must be a mapping",
                    value=value
                ))

        return errors
