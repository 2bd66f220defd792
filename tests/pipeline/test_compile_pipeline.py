"""Tests for the compile pipeline."""

import threading

import pytest
from unittest.mock import Mock

from swapbot_app.compiler.base import CompilerResponse
from swapbot_app.errors import (
    BusyError,
    CompileFailedError,
    EmptySourceError,
    LoadFailedError,
    StaleResultError,
)
from swapbot_app.modules.models import ModuleHandle
from swapbot_app.pipeline.compile_pipeline import CompilePipeline
from swapbot_app.pipeline.models import RequestKind, RequestState


def mock_compiler(compile_response=None, validate_response=None):
    compiler = Mock()
    compiler.compile.return_value = compile_response or CompilerResponse.compiled("artifact.py")
    compiler.validate.return_value = validate_response or CompilerResponse.validated()
    return compiler


class TestSubmit:
    """Test request submission and the pending slot."""

    @pytest.mark.parametrize("source", ["", "   ", "\n\t\n"])
    def test_blank_source_rejected(self, source):
        compiler = mock_compiler()
        pipeline = CompilePipeline(compiler)

        with pytest.raises(EmptySourceError):
            pipeline.submit(source)
        compiler.compile.assert_not_called()

    def test_successful_submit(self):
        pipeline = CompilePipeline(mock_compiler())

        request = pipeline.submit("code")

        assert request.state == RequestState.SUCCEEDED
        assert request.artifact_ref == "artifact.py"
        assert request.completed_at is not None
        assert pipeline.pending is None
        assert pipeline.last_request == request

    def test_diagnostic_passed_verbatim(self):
        diagnostic = "user_mod.py:3:5: invalid syntax\n    retrun HOLD"
        pipeline = CompilePipeline(mock_compiler(CompilerResponse.failed(diagnostic)))

        request = pipeline.submit("code")

        assert request.state == RequestState.FAILED
        assert request.diagnostic == diagnostic

    def test_success_without_artifact_is_failure(self):
        pipeline = CompilePipeline(mock_compiler(CompilerResponse(success=True)))
        request = pipeline.submit("code")
        assert request.state == RequestState.FAILED

    def test_compiler_exception_becomes_failure(self):
        compiler = Mock()
        compiler.compile.side_effect = ConnectionError("compiler down")
        pipeline = CompilePipeline(compiler)

        request = pipeline.submit("code")

        assert request.state == RequestState.FAILED
        assert "compiler down" in request.diagnostic
        assert pipeline.pending is None

    def test_timeout_becomes_failure(self):
        release = threading.Event()
        compiler = Mock()
        compiler.compile.side_effect = lambda source: release.wait(5) and CompilerResponse.compiled("late.py")
        pipeline = CompilePipeline(compiler, timeout_seconds=0.05)

        request = pipeline.submit("code")
        release.set()

        assert request.state == RequestState.FAILED
        assert request.diagnostic == "timeout after 0.05s"

    def test_second_submission_while_pending_is_busy(self, gated_compiler):
        pipeline = CompilePipeline(gated_compiler, timeout_seconds=5.0)
        results = []
        worker = threading.Thread(target=lambda: results.append(pipeline.submit("def strategy_user_mod(p, q): return HOLD")))
        worker.start()
        assert gated_compiler.entered.wait(5)

        assert pipeline.pending is not None
        with pytest.raises(BusyError):
            pipeline.submit("other")
        with pytest.raises(BusyError):
            pipeline.validate_only("other")

        gated_compiler.release.set()
        worker.join(timeout=5)
        assert results[0].succeeded
        assert pipeline.pending is None

    def test_validate_only(self):
        compiler = mock_compiler(validate_response=CompilerResponse.failed("nope"))
        pipeline = CompilePipeline(compiler)

        request = pipeline.validate_only("code")

        assert request.kind == RequestKind.VALIDATE
        assert request.diagnostic == "nope"
        compiler.compile.assert_not_called()

    def test_validate_only_success_has_no_artifact(self):
        request = CompilePipeline(mock_compiler()).validate_only("code")
        assert request.succeeded
        assert request.artifact_ref is None


class TestCompileAndLoad:
    """Test composing compile with load and activation."""

    def setup_method(self):
        self.host = Mock()
        self.handle = ModuleHandle(generation=1, artifact_ref="artifact.py")
        self.host.load.return_value = self.handle

    def test_success_loads_and_activates(self):
        order = Mock()
        pipeline = CompilePipeline(mock_compiler())

        def load(ref):
            order.load(ref)
            return self.handle

        self.host.load.side_effect = load
        self.host.activate.side_effect = order.activate

        handle = pipeline.compile_and_load("code", self.host, before_activate=order.before_activate)

        assert handle is self.handle
        self.host.activate.assert_called_once_with(self.handle)
        assert [c[0] for c in order.mock_calls] == ["load", "before_activate", "activate"]

    def test_compile_failure_never_reaches_host(self):
        pipeline = CompilePipeline(mock_compiler(CompilerResponse.failed("line 1: bad")))
        before_activate = Mock()

        with pytest.raises(CompileFailedError) as exc_info:
            pipeline.compile_and_load("code", self.host, before_activate=before_activate)

        assert exc_info.value.diagnostic == "line 1: bad"
        assert exc_info.value.category == "compile"
        before_activate.assert_not_called()
        self.host.load.assert_not_called()

    def test_load_failure_reported_distinctly(self):
        pipeline = CompilePipeline(mock_compiler())
        self.host.load.side_effect = LoadFailedError("bad", diagnostic="ImportError: x")
        before_activate = Mock()

        with pytest.raises(LoadFailedError) as exc_info:
            pipeline.compile_and_load("code", self.host, before_activate=before_activate)

        assert exc_info.value.category == "load"
        before_activate.assert_not_called()
        self.host.activate.assert_not_called()

    def test_failing_hook_discards_candidate(self):
        pipeline = CompilePipeline(mock_compiler())
        before_activate = Mock(side_effect=RuntimeError("runtime would not stop"))

        with pytest.raises(RuntimeError):
            pipeline.compile_and_load("code", self.host, before_activate=before_activate)

        self.host.discard.assert_called_once_with(self.handle)
        self.host.activate.assert_not_called()

    def test_result_invalidated_during_compile_is_not_loaded(self, gated_compiler, valid_mod_source):
        pipeline = CompilePipeline(gated_compiler, timeout_seconds=5.0)
        errors = []

        def run():
            try:
                pipeline.compile_and_load(valid_mod_source, self.host)
            except StaleResultError as e:
                errors.append(e)

        worker = threading.Thread(target=run)
        worker.start()
        assert gated_compiler.entered.wait(5)
        pipeline.invalidate()
        gated_compiler.release.set()
        worker.join(timeout=5)

        assert len(errors) == 1
        self.host.load.assert_not_called()

    def test_result_invalidated_before_activation_is_discarded(self):
        pipeline = CompilePipeline(mock_compiler())

        with pytest.raises(StaleResultError):
            pipeline.compile_and_load("code", self.host, before_activate=lambda request: pipeline.invalidate())

        self.host.discard.assert_called_once_with(self.handle)
        self.host.activate.assert_not_called()

    def test_is_stale(self):
        pipeline = CompilePipeline(mock_compiler())
        request = pipeline.submit("code")
        assert pipeline.is_stale(request) is False

        assert pipeline.invalidate() == 1
        assert pipeline.is_stale(request) is True
        assert pipeline.submit("code").epoch == 1


class TestRealHost:
    """Test the pipeline against a real host and local compiler."""

    def test_compile_and_load_activates(self, pipeline, host, valid_mod_source):
        handle = pipeline.compile_and_load(valid_mod_source, host)

        assert host.active_handle() is handle
        assert handle.is_active()

    def test_compile_failure_keeps_active(self, pipeline, host, valid_mod_source, invalid_mod_source):
        active = pipeline.compile_and_load(valid_mod_source, host)

        with pytest.raises(CompileFailedError):
            pipeline.compile_and_load(invalid_mod_source, host)

        assert host.active_handle() is active
        assert active.is_active()
