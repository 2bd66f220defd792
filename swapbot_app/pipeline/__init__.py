"""Compile pipeline: request tracking and compile-then-load composition."""

from .compile_pipeline import CompilePipeline
from .models import CompileRequest, RequestKind, RequestState

__all__ = ["CompilePipeline", "CompileRequest", "RequestKind", "RequestState"]
