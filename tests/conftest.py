"""Pytest configuration and shared fixtures."""

import threading
from pathlib import Path
from typing import Any, Dict, Optional

import pytest

from swapbot_app.compiler.base import CompilerResponse, CompilerService
from swapbot_app.compiler.local import LocalCompiler
from swapbot_app.config.bot_config import BotConfig
from swapbot_app.data.series_store import SeriesStore
from swapbot_app.errors import RuntimeUnavailableError
from swapbot_app.modules.host import ModuleHost
from swapbot_app.modules.loader import ArtifactLoader
from swapbot_app.notify.dispatcher import NoticeDispatcher
from swapbot_app.notify.memory_sink import MemoryNoticeSink
from swapbot_app.pipeline.compile_pipeline import CompilePipeline
from swapbot_app.runtime.base import BotRuntime


VALID_MOD_SOURCE = '''
def strategy_user_mod(prices, params):
    if len(prices) < 2:
        return HOLD
    return BUY if prices[-1] > prices[-2] else SELL
'''

INVALID_MOD_SOURCE = '''
def strategy_user_mod(prices, params)
    return HOLD
'''

STATIC_ARTIFACT = '''
from swapbot_app.modules.contract import ComputationModule, Decision, Signal


class StaticModule(ComputationModule):
    channels = ("momentum",)

    def evaluate(self, prices, params):
        return Decision(signal=Signal.{signal}, indicators={{"momentum": 1.0}})


def create_module():
    return StaticModule()
'''


class RecordingRuntime(BotRuntime):
    """Bot runtime double that records start/stop calls."""

    def __init__(self, ready: bool = True):
        super().__init__()
        self.ready = ready
        self.fail_start = False
        self.started_with = []
        self.stop_count = 0
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    def is_ready(self) -> bool:
        return self.ready

    def start(self, config: BotConfig) -> None:
        if self.fail_start:
            raise RuntimeUnavailableError("Simulated start failure", reason="test")
        self.started_with.append(config)
        self._running = True

    def stop(self) -> None:
        if self._running:
            self.stop_count += 1
        self._running = False


class GatedCompiler(CompilerService):
    """Wraps a compiler and blocks each call until ``release`` is set."""

    def __init__(self, inner: CompilerService):
        self.inner = inner
        self.entered = threading.Event()
        self.release = threading.Event()

    def compile(self, source: str) -> CompilerResponse:
        self.entered.set()
        self.release.wait(5)
        return self.inner.compile(source)

    def validate(self, source: str) -> CompilerResponse:
        self.entered.set()
        self.release.wait(5)
        return self.inner.validate(source)


@pytest.fixture
def scenario_config_record() -> Dict[str, Any]:
    """Operator config record for a simulated BTCUSD session."""
    return {
        "symbol": "BTCUSD",
        "tickIntervalSeconds": 5,
        "paperTrading": True,
        "connectorId": "simulation",
        "strategyId": "sma_crossover",
    }


@pytest.fixture
def valid_mod_source() -> str:
    return VALID_MOD_SOURCE


@pytest.fixture
def invalid_mod_source() -> str:
    return INVALID_MOD_SOURCE


@pytest.fixture
def write_artifact(tmp_path: Path):
    """Factory writing a module artifact file and returning its path."""
    def _write(body: Optional[str] = None, name: str = "artifact.py", signal: str = "BUY") -> str:
        path = tmp_path / name
        path.write_text(body if body is not None else STATIC_ARTIFACT.format(signal=signal))
        return str(path)
    return _write


@pytest.fixture
def store() -> SeriesStore:
    return SeriesStore(max_samples=2000)


@pytest.fixture
def host(tmp_path: Path) -> ModuleHost:
    return ModuleHost(
        loader=ArtifactLoader(cache_dir=tmp_path / "cache"),
        load_timeout_seconds=5.0,
    )


@pytest.fixture
def local_compiler(tmp_path: Path) -> LocalCompiler:
    return LocalCompiler(artifact_dir=tmp_path / "artifacts")


@pytest.fixture
def pipeline(local_compiler: LocalCompiler) -> CompilePipeline:
    return CompilePipeline(local_compiler, timeout_seconds=5.0)


@pytest.fixture
def memory_sink() -> MemoryNoticeSink:
    return MemoryNoticeSink(capacity=50)


@pytest.fixture
def notifier(memory_sink: MemoryNoticeSink) -> NoticeDispatcher:
    return NoticeDispatcher([memory_sink])


@pytest.fixture
def recording_runtime() -> RecordingRuntime:
    return RecordingRuntime()


@pytest.fixture
def gated_compiler(local_compiler: LocalCompiler) -> GatedCompiler:
    """Local compiler whose calls block until ``release`` is set."""
    compiler = GatedCompiler(local_compiler)
    yield compiler
    compiler.release.set()
