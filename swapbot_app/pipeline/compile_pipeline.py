"""
Compile pipeline.

Submits mod source to the compiler service, tracks the single pending
request slot, bounds each call with a timeout, and composes a successful
compile with loading and activating the module on the host. Compile and
load failures surface as distinct errors; diagnostics pass through
untouched.

Results are tagged with the pipeline epoch at submission. ``invalidate()``
bumps the epoch, and a result from an older epoch is never loaded.
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from typing import Callable, Optional

import structlog

from ..compiler.base import CompilerResponse, CompilerService
from ..errors import BusyError, CompileFailedError, EmptySourceError, StaleResultError
from ..modules.host import ModuleHost
from ..modules.loader import describe_exception
from ..modules.models import ModuleHandle
from .models import CompileRequest, RequestKind

logger = structlog.get_logger(__name__)


class CompilePipeline:
    """Single-slot compile request tracker."""

    def __init__(self, compiler: CompilerService, timeout_seconds: Optional[float] = 30.0):
        self.compiler = compiler
        self.timeout_seconds = timeout_seconds
        self.logger = logger

        self._lock = threading.Lock()
        self._pending: Optional[CompileRequest] = None
        self._last: Optional[CompileRequest] = None
        self._epoch = 0

    @property
    def pending(self) -> Optional[CompileRequest]:
        """The in-flight request, if any."""
        with self._lock:
            return self._pending

    @property
    def last_request(self) -> Optional[CompileRequest]:
        """The most recently completed request."""
        with self._lock:
            return self._last

    @property
    def epoch(self) -> int:
        with self._lock:
            return self._epoch

    def submit(self, source: str) -> CompileRequest:
        """
        Compile source into an artifact.

        Returns the completed request (Succeeded with an artifact ref, or
        Failed with the diagnostic).

        Raises:
            EmptySourceError: source is blank.
            BusyError: another request is pending.
        """
        return self._run(source, RequestKind.COMPILE)

    def validate_only(self, source: str) -> CompileRequest:
        """Check source without producing an artifact or touching any module."""
        return self._run(source, RequestKind.VALIDATE)

    def compile_and_load(
        self,
        source: str,
        host: ModuleHost,
        before_activate: Optional[Callable[[CompileRequest], None]] = None,
    ) -> ModuleHandle:
        """
        Compile, then load and activate the result on the host.

        ``before_activate`` runs once the new module has loaded and just
        before it replaces the active one, so callers can quiesce whatever
        uses the active module. A compile or load failure never reaches it.

        Raises:
            EmptySourceError, BusyError: request rejected before submission.
            CompileFailedError: compiler rejected the source; host untouched.
            StaleResultError: pipeline invalidated while compiling or loading.
            LoadFailedError: artifact could not be instantiated; the
                previously active module stays active.
        """
        request = self.submit(source)

        if not request.succeeded:
            raise CompileFailedError(
                "Compilation failed",
                diagnostic=request.diagnostic or "",
                request_id=request.id,
            )

        self._ensure_current(request)
        handle = host.load(request.artifact_ref)

        try:
            self._ensure_current(request)
            if before_activate is not None:
                before_activate(request)
                self._ensure_current(request)
            host.activate(handle)
        except Exception:
            host.discard(handle)
            raise

        self.logger.info(
            "Compiled module activated",
            request_id=request.id,
            generation=handle.generation,
            artifact_ref=request.artifact_ref,
        )
        return handle

    def invalidate(self) -> int:
        """Mark every outstanding result stale. Returns the new epoch."""
        with self._lock:
            self._epoch += 1
            epoch = self._epoch
            pending = self._pending

        self.logger.info(
            "Compile results invalidated",
            epoch=epoch,
            pending_request=pending.id if pending else None,
        )
        return epoch

    def is_stale(self, request: CompileRequest) -> bool:
        """True if the request was submitted before the last invalidate()."""
        with self._lock:
            return request.epoch != self._epoch

    def _ensure_current(self, request: CompileRequest) -> None:
        if self.is_stale(request):
            self.logger.warning("Discarding stale compile result", **request.summary())
            raise StaleResultError(
                "Compile result arrived after the session moved on",
                request_id=request.id,
            )

    def _run(self, source: str, kind: RequestKind) -> CompileRequest:
        if source is None or not source.strip():
            raise EmptySourceError("Mod source is empty")

        with self._lock:
            if self._pending is not None:
                raise BusyError(
                    f"Compile request {self._pending.id} is still pending",
                    operation=kind.value,
                    current_state=self._pending.state.value,
                )
            request = CompileRequest(source=source, kind=kind, epoch=self._epoch)
            self._pending = request

        self.logger.info("Compile request submitted", **request.summary())

        try:
            response = self._call(kind, source)
        finally:
            with self._lock:
                self._pending = None

        if not response.success:
            result = request.with_failure(response.diagnostic or "unknown compiler error")
        elif kind == RequestKind.COMPILE and not response.artifact_ref:
            result = request.with_failure("compiler returned no artifact")
        else:
            result = request.with_success(response.artifact_ref)

        with self._lock:
            self._last = result

        if result.succeeded:
            self.logger.info("Compile request succeeded", artifact_ref=result.artifact_ref, **result.summary())
        else:
            self.logger.info("Compile request failed", diagnostic=result.diagnostic, **result.summary())
        return result

    def _call(self, kind: RequestKind, source: str) -> CompilerResponse:
        """Invoke the compiler, mapping timeouts and crashes to failed responses."""
        call = self.compiler.compile if kind == RequestKind.COMPILE else self.compiler.validate

        if self.timeout_seconds is None:
            try:
                return call(source)
            except Exception as e:
                return CompilerResponse.failed(describe_exception(e))

        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="compile")
        future = executor.submit(call, source)
        try:
            return future.result(timeout=self.timeout_seconds)
        except FuturesTimeoutError:
            self.logger.warning("Compiler call timed out", kind=kind.value, timeout_seconds=self.timeout_seconds)
            return CompilerResponse.failed(f"timeout after {self.timeout_seconds}s")
        except Exception as e:
            self.logger.error(
                "Compiler call raised",
                kind=kind.value,
                error=str(e),
                error_type=type(e).__name__,
            )
            return CompilerResponse.failed(describe_exception(e))
        finally:
            executor.shutdown(wait=False)
