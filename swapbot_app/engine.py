"""
Session engine.

Composition root: builds the series store, module host, compile pipeline,
event router, simulation runtime and notice sinks from settings, and
exposes the session controller that operator intents go through.
"""

from pathlib import Path
from typing import Any, Iterable, Optional, Union

import structlog

from .compiler.base import CompilerService
from .compiler.http_client import HttpCompilerClient
from .compiler.local import LocalCompiler
from .config.defaults import AppConfig
from .config.loader import ConfigLoader
from .data.series_store import SeriesStore
from .modules.host import ModuleHost
from .modules.loader import ArtifactLoader
from .notify.base import BaseNoticeSink
from .notify.dispatcher import NoticeDispatcher
from .notify.memory_sink import MemoryNoticeSink
from .pipeline.compile_pipeline import CompilePipeline
from .runtime.base import BotRuntime
from .runtime.router import EventRouter
from .runtime.simulation import SimulationRuntime
from .session.controller import SessionController

logger = structlog.get_logger(__name__)


def create_compiler(config: AppConfig) -> CompilerService:
    """Compiler service selected by ``compiler.backend``."""
    params = config.compiler
    if params.backend == "http":
        return HttpCompilerClient(params.base_url, timeout_seconds=params.timeout_seconds)
    if params.backend == "local":
        return LocalCompiler(artifact_dir=params.artifact_dir)
    raise ValueError(f"Unknown compiler backend: {params.backend}")


class SwapbotEngine:
    """Wires one bot session together."""

    def __init__(
        self,
        config_dir: Optional[Union[str, Path]] = None,
        overrides: Optional[dict[str, Any]] = None,
        compiler: Optional[CompilerService] = None,
        runtime: Optional[BotRuntime] = None,
        sinks: Optional[Iterable[BaseNoticeSink]] = None,
        background: bool = True,
    ) -> None:
        self.logger = logger
        self.config_loader = ConfigLoader.create(Path(config_dir) if config_dir else None)
        self.config = self.config_loader.load(overrides)

        self.notices = MemoryNoticeSink(capacity=self.config.notices.memory_capacity)
        self.notifier = NoticeDispatcher([self.notices, *(sinks or ())])

        self.store = SeriesStore(params=self.config.series)
        self.host = ModuleHost(
            loader=ArtifactLoader(
                cache_dir=self.config.compiler.artifact_dir,
                download_timeout_seconds=self.config.compiler.load_timeout_seconds,
            ),
            load_timeout_seconds=self.config.compiler.load_timeout_seconds,
        )
        self.pipeline = CompilePipeline(
            compiler or create_compiler(self.config),
            timeout_seconds=self.config.compiler.timeout_seconds,
        )

        self.router = EventRouter(self.store, self.notifier)
        self.router.attach(self.host)

        self.runtime = runtime or SimulationRuntime(
            self.host,
            params=self.config.runtime,
            background=background,
        )
        self.runtime.bind(self.router)

        self.session = SessionController(
            store=self.store,
            host=self.host,
            pipeline=self.pipeline,
            runtime=self.runtime,
            notifier=self.notifier,
            params=self.config.session,
        )

        self.logger.info(
            "Swapbot engine initialized",
            compiler=type(self.pipeline.compiler).__name__,
            runtime=type(self.runtime).__name__,
            max_samples=self.store.max_samples,
        )

    def status(self) -> dict[str, Any]:
        """Read-only view of the session for dashboards."""
        handle = self.host.active_handle()
        performance = self.router.performance
        return {
            "state": self.session.state.value,
            "status": self.router.status,
            "uptime": self.router.uptime,
            "active_generation": handle.generation if handle else None,
            "samples": len(self.store),
            "trade_count": performance.trade_count if performance else 0,
            "win_rate": performance.win_rate if performance else 0.0,
            "profit_loss": performance.profit_loss if performance else 0.0,
        }

    def shutdown(self) -> None:
        self.session.shutdown()
        self.logger.info("Swapbot engine shut down")
