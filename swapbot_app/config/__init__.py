"""Configuration: defaults, settings loader, bot config record and validation."""

from .bot_config import BotConfig
from .defaults import AppConfig, get_default_config
from .loader import ConfigLoader
from .validation import ConfigValidator, ValidationError

__all__ = [
    "AppConfig",
    "BotConfig",
    "ConfigLoader",
    "ConfigValidator",
    "ValidationError",
    "get_default_config",
]
