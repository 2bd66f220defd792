"""
Module host.

Owns the lifecycle of the active computation module and performs the
hot-swap. Loading a candidate never touches the active module; only a
successful activation replaces it, and the replacement is a single
pointer swap under the host lock, so readers see exactly one active
handle at any instant. The retired module is torn down after the swap.

The host is driven by a single writer (the session controller); readers
such as the runtime's tick thread call ``active_module()`` concurrently.
"""

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from datetime import datetime, timezone
from typing import Callable, Optional

from ..errors import LoadFailedError, StateTransitionError
from ..logging.config import get_lifecycle_logger, log_state_transition
from .contract import ComputationModule
from .loader import ArtifactLoader, describe_exception
from .models import ModuleHandle, ModuleState

lifecycle_logger = get_lifecycle_logger(__name__)

ActivationListener = Callable[[ModuleHandle], None]


class ModuleHost:
    """Holds at most one active module handle."""

    def __init__(
        self,
        loader: Optional[ArtifactLoader] = None,
        load_timeout_seconds: Optional[float] = 10.0,
    ) -> None:
        self.loader = loader or ArtifactLoader()
        self.load_timeout_seconds = load_timeout_seconds
        self.logger = lifecycle_logger

        self._lock = threading.RLock()
        self._active: Optional[ModuleHandle] = None
        self._generation = 0
        self._phase: Optional[ModuleState] = None
        self._listeners: list[ActivationListener] = []

    @property
    def state(self) -> ModuleState:
        """Host lifecycle state; LOADING/UNLOADING while a transition runs."""
        with self._lock:
            if self._phase is not None:
                return self._phase
            return ModuleState.ACTIVE if self._active is not None else ModuleState.UNLOADED

    def is_active(self) -> bool:
        """True when a module is active."""
        with self._lock:
            return self._active is not None

    def active_handle(self) -> Optional[ModuleHandle]:
        """The active handle, None when unloaded."""
        with self._lock:
            return self._active

    def active_module(self) -> Optional[ComputationModule]:
        """The active module, None when unloaded."""
        with self._lock:
            return self._active.module if self._active is not None else None

    def add_activation_listener(self, listener: ActivationListener) -> None:
        """Call listener with each newly activated handle."""
        self._listeners.append(listener)

    def load(self, artifact_ref: str) -> ModuleHandle:
        """
        Instantiate a module from an artifact without activating it.

        The active handle (if any) keeps running whatever the outcome.

        Raises:
            LoadFailedError: malformed artifact, unmet import contract or
                instantiation timeout.
        """
        with self._lock:
            self._generation += 1
            generation = self._generation
            previous_state = self.state
            self._phase = ModuleState.LOADING

        handle = ModuleHandle(generation=generation, artifact_ref=artifact_ref)
        log_state_transition(
            self.logger,
            entity="host",
            from_state=previous_state.value,
            to_state=ModuleState.LOADING.value,
            trigger="load",
            context={"generation": generation, "artifact_ref": artifact_ref}
        )

        try:
            module = self._instantiate(artifact_ref, generation)
        except LoadFailedError as e:
            handle.state = ModuleState.LOAD_FAILED
            with self._lock:
                self._phase = None
                restored = self.state
            self.logger.warning(
                "Module load failed",
                generation=generation,
                artifact_ref=artifact_ref,
                diagnostic=e.diagnostic,
                active_generation=self._active.generation if self._active else None,
            )
            log_state_transition(
                self.logger,
                entity="host",
                from_state=ModuleState.LOAD_FAILED.value,
                to_state=restored.value,
                trigger="load_failed",
                context={"generation": generation}
            )
            handle.state = ModuleState.UNLOADED
            raise
        finally:
            with self._lock:
                self._phase = None

        handle.module = module

        self.logger.info("Module loaded", **handle.describe())
        return handle

    def activate(self, handle: ModuleHandle) -> Optional[ModuleHandle]:
        """
        Make a freshly loaded handle the active one.

        The previous handle stops being active in the same critical
        section, then is closed. Returns the retired handle, if any.

        Raises:
            StateTransitionError: handle was not freshly loaded by this host.
        """
        with self._lock:
            if handle.state != ModuleState.LOADING or handle.module is None:
                raise StateTransitionError(
                    f"Cannot activate module generation {handle.generation}",
                    current_state=handle.state.value,
                    attempted_transition=f"{handle.state.value}->{ModuleState.ACTIVE.value}",
                )

            previous = self._active
            if previous is not None:
                previous.state = ModuleState.UNLOADING
            handle.state = ModuleState.ACTIVE
            self._active = handle

        log_state_transition(
            self.logger,
            entity=f"module:{handle.generation}",
            from_state=ModuleState.LOADING.value,
            to_state=ModuleState.ACTIVE.value,
            trigger="activate",
            context={
                "artifact_ref": handle.artifact_ref,
                "replaced_generation": previous.generation if previous else None,
            }
        )

        if previous is not None:
            self._retire(previous, trigger="replaced")

        for listener in list(self._listeners):
            try:
                listener(handle)
            except Exception as e:
                self.logger.error(
                    "Activation listener failed",
                    generation=handle.generation,
                    error=str(e),
                    error_type=type(e).__name__,
                )

        return previous

    def load_and_activate(self, artifact_ref: str) -> ModuleHandle:
        """Load then activate; the current module survives a failed load."""
        handle = self.load(artifact_ref)
        self.activate(handle)
        return handle

    def discard(self, handle: ModuleHandle) -> None:
        """Close a loaded handle that will never be activated."""
        if handle.state != ModuleState.LOADING:
            return
        handle.state = ModuleState.UNLOADING
        self._retire(handle, trigger="discarded")

    def deactivate(self) -> bool:
        """Stop the active module and return to UNLOADED. False if none was active."""
        with self._lock:
            previous = self._active
            if previous is None:
                self.logger.warning("Deactivate requested with no active module")
                return False
            previous.state = ModuleState.UNLOADING
            self._active = None
            self._phase = ModuleState.UNLOADING

        try:
            self._retire(previous, trigger="deactivate")
        finally:
            with self._lock:
                self._phase = None
        return True

    def _retire(self, handle: ModuleHandle, trigger: str) -> None:
        module = handle.module
        try:
            if module is not None:
                module.close()
        except Exception as e:
            self.logger.error(
                "Module close failed",
                generation=handle.generation,
                error=str(e),
                error_type=type(e).__name__,
            )
        finally:
            handle.module = None
            handle.state = ModuleState.UNLOADED
            handle.retired_at = datetime.now(timezone.utc)

        log_state_transition(
            self.logger,
            entity=f"module:{handle.generation}",
            from_state=ModuleState.UNLOADING.value,
            to_state=ModuleState.UNLOADED.value,
            trigger=trigger,
            context={"artifact_ref": handle.artifact_ref}
        )

    def _instantiate(self, artifact_ref: str, generation: int) -> ComputationModule:
        if self.load_timeout_seconds is None:
            return self._call_loader(artifact_ref, generation)

        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="module-load")
        future = executor.submit(self._call_loader, artifact_ref, generation)
        try:
            return future.result(timeout=self.load_timeout_seconds)
        except FuturesTimeoutError as e:
            future.add_done_callback(self._close_late_module)
            raise LoadFailedError(
                f"Module instantiation timed out after {self.load_timeout_seconds}s",
                diagnostic=f"timeout after {self.load_timeout_seconds}s",
                artifact_ref=artifact_ref,
            ) from e
        finally:
            executor.shutdown(wait=False)

    def _call_loader(self, artifact_ref: str, generation: int) -> ComputationModule:
        try:
            return self.loader.instantiate(artifact_ref, generation)
        except LoadFailedError:
            raise
        except Exception as e:
            raise LoadFailedError(
                f"Module instantiation failed: {artifact_ref}",
                diagnostic=describe_exception(e),
                artifact_ref=artifact_ref,
            ) from e

    def _close_late_module(self, future: Future) -> None:
        """Close a module whose instantiation finished after its timeout."""
        if future.cancelled() or future.exception() is not None:
            return
        try:
            future.result().close()
        except Exception as e:
            self.logger.warning("Closing late module failed", error=str(e))
