"""Compiler service contract and implementations."""

from .base import CompilerResponse, CompilerService
from .http_client import HttpCompilerClient
from .local import LocalCompiler

__all__ = ["CompilerResponse", "CompilerService", "HttpCompilerClient", "LocalCompiler"]
