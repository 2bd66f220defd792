"""Default configuration parameters for the session host."""

from dataclasses import dataclass


@dataclass(frozen=True)
class SeriesParams:
    """Series store retention parameters."""
    max_samples: int = 2000                          # Primary channel capacity
    overlay_channels: tuple[str, ...] = (            # Pre-registered indicator overlays
        "sma_short",
        "sma_long",
        "bollinger_upper",
        "bollinger_lower",
    )


@dataclass(frozen=True)
class SessionParams:
    """Session intent validation parameters."""
    min_tick_interval_seconds: int = 1
    max_tick_interval_seconds: int = 60
    risk_levels: tuple[str, ...] = ("conservative", "moderate", "aggressive")


@dataclass(frozen=True)
class CompilerParams:
    """Compiler service and module loading parameters."""
    backend: str = "local"                           # "local" (in-process) or "http"
    base_url: str = "http://localhost:8080"
    timeout_seconds: float = 30.0                    # Compile / validate round trip
    load_timeout_seconds: float = 10.0               # Module instantiation
    artifact_dir: str = "artifacts"                  # Local compiler output and URL download cache


@dataclass(frozen=True)
class RuntimeParams:
    """Simulation runtime parameters."""
    price_window: int = 200                          # Prices handed to the module per tick
    price_alert_pct: float = 5.0                     # Move that raises a price alert
    initial_equity: float = 10000.0


@dataclass(frozen=True)
class NoticeParams:
    """Operator notice parameters."""
    memory_capacity: int = 200                       # Entries kept by the in-memory log panel


@dataclass(frozen=True)
class AppConfig:
    """Complete default configuration."""
    series: SeriesParams
    session: SessionParams
    compiler: CompilerParams
    runtime: RuntimeParams
    notices: NoticeParams


def get_default_config() -> AppConfig:
    """Get the default configuration instance."""
    return AppConfig(
        series=SeriesParams(),
        session=SessionParams(),
        compiler=CompilerParams(),
        runtime=RuntimeParams(),
        notices=NoticeParams(),
    )
