"""
Session controller.

Translates operator intents (start, stop, apply-mod, validate-mod,
load-config) into ordered calls on the series store, module host, compile
pipeline and bot runtime. One mutating intent owns the session at a time;
any other mutating intent issued meanwhile is rejected with Busy.

Intents never raise. Each returns an ActionResult and publishes an
operator notice carrying the error category, so the operator can tell a
rejected config, broken source and an unloadable artifact apart.
"""

import threading
from collections.abc import Mapping
from typing import Any, Optional, Union

from ..config.bot_config import BotConfig
from ..config.defaults import SessionParams
from ..config.validation import ConfigValidator
from ..data.series_store import SeriesStore
from ..errors import (
    BusyError,
    CompileFailedError,
    InvalidConfigError,
    LoadFailedError,
    RuntimeUnavailableError,
    SessionError,
    StaleResultError,
    SystemFailureError,
)
from ..logging.config import get_session_logger, log_state_transition
from ..modules.host import ModuleHost
from ..modules.loader import describe_exception
from ..notify.dispatcher import NoticeDispatcher
from ..pipeline.compile_pipeline import CompilePipeline
from ..pipeline.models import CompileRequest
from ..runtime.base import BotRuntime
from .models import ActionResult, SessionState

session_logger = get_session_logger(__name__)

ConfigInput = Union[BotConfig, Mapping[str, Any]]


class SessionController:
    """Single-writer orchestrator for one bot session."""

    def __init__(
        self,
        store: SeriesStore,
        host: ModuleHost,
        pipeline: CompilePipeline,
        runtime: Optional[BotRuntime] = None,
        notifier: Optional[NoticeDispatcher] = None,
        config: Optional[BotConfig] = None,
        params: Optional[SessionParams] = None,
    ):
        self.store = store
        self.host = host
        self.pipeline = pipeline
        self.runtime = runtime
        self.notifier = notifier or NoticeDispatcher()
        self.params = params or SessionParams()
        self.logger = session_logger

        self._lock = threading.Lock()
        self._state = SessionState.IDLE
        self._owner: Optional[str] = None
        self._config = config or BotConfig()
        self._closed = False

    @property
    def state(self) -> SessionState:
        with self._lock:
            return self._state

    @property
    def config(self) -> BotConfig:
        with self._lock:
            return self._config

    @property
    def busy_with(self) -> Optional[str]:
        """Name of the mutating intent in flight, if any."""
        with self._lock:
            return self._owner

    def start(self, config: Optional[ConfigInput] = None) -> ActionResult:
        """Idle -> Running: validate config, reset the store, start the runtime."""
        try:
            previous = self._acquire("start", allowed=(SessionState.IDLE,))
        except SessionError as e:
            return self._reject("start", e)

        final_state = previous
        try:
            candidate = self._resolve_config(config)
            self._validate(candidate)

            if self.runtime is None:
                raise RuntimeUnavailableError("No bot runtime is configured", reason="missing")
            if not self.runtime.is_ready():
                raise RuntimeUnavailableError("Bot runtime is not ready", reason="not_ready")

            self.store.reset()
            self._start_runtime(candidate)

            with self._lock:
                self._config = candidate
            final_state = SessionState.RUNNING
        except SessionError as e:
            return self._fail("start", e, final_state)
        finally:
            self._release("start", previous, final_state)

        self.notifier.success(
            "Bot started successfully.",
            category="session",
            symbol=candidate.symbol,
            tick_interval_seconds=candidate.tick_interval_seconds,
        )
        return ActionResult.success(final_state, detail=f"RUNNING - {candidate.symbol}")

    def stop(self) -> ActionResult:
        """Running -> Idle: halt the runtime and clear the store. The module stays loaded."""
        try:
            previous = self._acquire("stop", allowed=(SessionState.IDLE, SessionState.RUNNING))
        except SessionError as e:
            return self._reject("stop", e)

        if previous == SessionState.IDLE:
            self._release("stop", previous, previous)
            self.notifier.warning("Bot is not running.", category="session")
            return ActionResult.success(previous, detail="Bot is not running")

        try:
            if self.runtime is not None:
                self.runtime.stop()
            self.store.reset()
        finally:
            self._release("stop", previous, SessionState.IDLE)

        self.notifier.info("Bot stopped by user.", category="session")
        return ActionResult.success(SessionState.IDLE)

    def apply_mod(self, source: str) -> ActionResult:
        """
        Compile source and hot-swap it in as the active module.

        The runtime is stopped only once the new module has compiled and
        loaded, right before it is activated. After a successful swap the
        session is Idle and the operator restarts the bot explicitly. A
        failed compile or load leaves the session exactly as it was: the
        previous module stays active and a running bot keeps running with
        its account, price window and feed intact.
        """
        try:
            previous = self._acquire(
                "apply_mod",
                allowed=(SessionState.IDLE, SessionState.RUNNING),
                target=SessionState.SWAPPING_MODULE,
            )
        except SessionError as e:
            return self._reject("apply_mod", e)

        runtime_stopped = threading.Event()

        def quiesce_runtime(request: CompileRequest) -> None:
            if previous == SessionState.RUNNING and self.runtime is not None and self.runtime.is_running:
                self.logger.info("Stopping runtime for module swap", request_id=request.id)
                self.runtime.stop()
                runtime_stopped.set()

        final_state = previous
        try:
            handle = self.pipeline.compile_and_load(source, self.host, before_activate=quiesce_runtime)
            final_state = SessionState.IDLE
        except (CompileFailedError, LoadFailedError) as e:
            return self._fail("apply_mod", e, final_state)
        except StaleResultError as e:
            if runtime_stopped.is_set():
                final_state = SessionState.IDLE
            return self._fail("apply_mod", e, final_state)
        except SessionError as e:
            return self._fail("apply_mod", e, final_state)
        except Exception as e:
            self.logger.exception("Module swap failed unexpectedly")
            if runtime_stopped.is_set():
                final_state = self._resume_runtime()
            error = SystemFailureError(
                f"Module swap failed: {describe_exception(e)}",
                context={"operation": "apply_mod"},
            )
            return self._fail("apply_mod", error, final_state)
        finally:
            self._release("apply_mod", SessionState.SWAPPING_MODULE, final_state)

        if self._closed:
            self.host.deactivate()

        detail = f"Module generation {handle.generation} is active"
        if previous == SessionState.RUNNING:
            detail += "; start the bot to trade with it"
        self.notifier.success(
            "Strategy module applied.",
            category="module",
            generation=handle.generation,
            artifact_ref=handle.artifact_ref,
        )
        return ActionResult.success(final_state, detail=detail)

    def validate_mod(self, source: str) -> ActionResult:
        """Check source with the compiler without touching the active module."""
        state = self.state
        try:
            request = self.pipeline.validate_only(source)
        except SessionError as e:
            return self._fail("validate_mod", e, state)

        if not request.succeeded:
            error = CompileFailedError(
                "Validation failed",
                diagnostic=request.diagnostic or "",
                request_id=request.id,
            )
            return self._fail("validate_mod", error, state)

        self.notifier.success("Validation successful.", category="compile", request_id=request.id)
        return ActionResult.success(state, detail="Validation successful")

    def load_config(self, record: ConfigInput) -> ActionResult:
        """
        Apply a persisted config record over the current config.

        Unknown keys are ignored and missing keys keep their values. The
        merged config must validate; while Running it takes effect on the
        next start.
        """
        try:
            previous = self._acquire(
                "load_config",
                allowed=(SessionState.IDLE, SessionState.RUNNING),
                target=None,
            )
        except SessionError as e:
            return self._reject("load_config", e)

        try:
            candidate = self._resolve_config(record)
            self._validate(candidate)
            with self._lock:
                self._config = candidate
        except SessionError as e:
            return self._fail("load_config", e, previous)
        finally:
            self._release("load_config", previous, previous)

        detail = "Configuration loaded"
        if previous == SessionState.RUNNING:
            detail += "; applies on next start"
        self.notifier.success("Configuration loaded.", category="config", symbol=candidate.symbol)
        return ActionResult.success(previous, detail=detail)

    def current_config(self) -> dict[str, Any]:
        """Current configuration as a flat persisted record."""
        return self.config.to_record()

    def shutdown(self) -> None:
        """
        Tear the session down.

        Outstanding compile results are invalidated so they are never
        loaded, the runtime stops and the active module is deactivated.
        Later intents fail with RuntimeUnavailableError.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            previous = self._state
            self._state = SessionState.IDLE

        self.pipeline.invalidate()
        if self.runtime is not None:
            self.runtime.stop()
        self.host.deactivate()
        self.store.reset()

        log_state_transition(
            self.logger,
            entity="session",
            from_state=previous.value,
            to_state=SessionState.IDLE.value,
            trigger="shutdown",
        )
        self.notifier.info("Session shut down.", category="session")

    def _acquire(
        self,
        operation: str,
        allowed: tuple[SessionState, ...],
        target: Optional[SessionState] = None,
    ) -> SessionState:
        """Claim the session for a mutating intent. Returns the state held before."""
        with self._lock:
            if self._closed:
                raise RuntimeUnavailableError("Session has been shut down", reason="shutdown")
            if self._owner is not None or self._state not in allowed:
                raise BusyError(
                    f"Cannot {operation} while {self._owner or self._state.value}",
                    operation=operation,
                    current_state=self._state.value,
                )
            previous = self._state
            self._owner = operation
            if target is not None:
                self._state = target

        if target is not None and target != previous:
            log_state_transition(
                self.logger,
                entity="session",
                from_state=previous.value,
                to_state=target.value,
                trigger=operation,
            )
        return previous

    def _release(self, operation: str, from_state: SessionState, to_state: SessionState) -> None:
        with self._lock:
            if self._closed:
                to_state = SessionState.IDLE
            self._state = to_state
            self._owner = None

        if from_state != to_state:
            log_state_transition(
                self.logger,
                entity="session",
                from_state=from_state.value,
                to_state=to_state.value,
                trigger=operation,
            )

    def _resolve_config(self, config: Optional[ConfigInput]) -> BotConfig:
        if config is None:
            return self.config
        if isinstance(config, BotConfig):
            return config
        if isinstance(config, Mapping):
            return self.config.apply_record(dict(config))
        raise InvalidConfigError(
            f"Unsupported config type: {type(config).__name__}",
            context={"type": type(config).__name__},
        )

    def _validate(self, config: BotConfig) -> None:
        errors = ConfigValidator.validate_bot_config(config, self.params)
        if errors:
            raise InvalidConfigError(
                "Invalid configuration: " + "; ".join(error.describe() for error in errors),
                errors=errors,
            )

    def _start_runtime(self, config: BotConfig) -> None:
        try:
            self.runtime.start(config)
        except RuntimeUnavailableError:
            raise
        except Exception as e:
            raise RuntimeUnavailableError(
                f"Bot runtime failed to start: {describe_exception(e)}",
                reason="start_failed",
            ) from e

    def _resume_runtime(self) -> SessionState:
        """Restart a runtime stopped by a swap that then failed. Returns the resulting state."""
        if self._closed:
            return SessionState.IDLE
        try:
            self._start_runtime(self.config)
        except RuntimeUnavailableError as e:
            self.notifier.error(
                f"Bot runtime could not be resumed after a failed swap: {e}",
                category=e.category,
                reason=e.reason,
            )
            return SessionState.IDLE

        self.notifier.info("Bot runtime resumed with the previous module.", category="session")
        return SessionState.RUNNING

    def _reject(self, operation: str, error: SessionError) -> ActionResult:
        return self._fail(operation, error, self.state)

    def _fail(self, operation: str, error: Exception, state: SessionState) -> ActionResult:
        category = getattr(error, "category", "system")
        context: dict[str, Any] = {"operation": operation}

        if isinstance(error, InvalidConfigError):
            context["fields"] = error.fields
        if isinstance(error, (CompileFailedError, LoadFailedError)):
            context["diagnostic"] = error.diagnostic
        if isinstance(error, BusyError):
            context["current_state"] = error.current_state

        if isinstance(error, BusyError):
            self.notifier.warning(str(error), category=category, **context)
        else:
            self.notifier.error(str(error), category=category, **context)

        detail = getattr(error, "diagnostic", None) or str(error)
        return ActionResult.failure(state, error, detail=detail)
