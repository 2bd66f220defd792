"""
In-process compiler.

Injects user strategy source into the module template, byte-compiles the
result and, for compile requests, writes it out as a loadable artifact.
It implements the same contract as the HTTP client so sessions can run
without a compiler server.
"""

import ast
import time
from pathlib import Path
from typing import Optional, Union

import structlog

from .base import CompilerResponse, CompilerService

logger = structlog.get_logger(__name__)

STRATEGY_PLACEHOLDER = "# [[USER_MOD_STRATEGIES]]"
STRATEGY_FUNCTION = "strategy_user_mod"

MODULE_TEMPLATE = f'''"""Generated strategy module."""

from swapbot_app.modules.contract import FunctionModule, Signal

BUY = Signal.BUY
SELL = Signal.SELL
HOLD = Signal.HOLD

{STRATEGY_PLACEHOLDER}


def create_module():
    return FunctionModule(
        {STRATEGY_FUNCTION},
        indicators=globals().get("user_mod_indicators"),
        channels=globals().get("USER_MOD_CHANNELS", ()),
    )
'''


class LocalCompiler(CompilerService):
    """Compiles user mods into artifact files on the local disk."""

    def __init__(self, artifact_dir: Union[str, Path] = "artifacts", template: Optional[str] = None):
        self.artifact_dir = Path(artifact_dir)
        self.template = template or MODULE_TEMPLATE
        if STRATEGY_PLACEHOLDER not in self.template:
            raise ValueError(f"Template is missing the {STRATEGY_PLACEHOLDER!r} placeholder")
        self.logger = logger

    def compile(self, source: str) -> CompilerResponse:
        final_code, diagnostic = self._build(source)
        if diagnostic:
            self.logger.info("Compilation failed", diagnostic=diagnostic)
            return CompilerResponse.failed(diagnostic)

        self.artifact_dir.mkdir(parents=True, exist_ok=True)
        artifact = self.artifact_dir / f"mod_{time.time_ns()}.py"
        artifact.write_text(final_code)

        self.logger.info("Compilation successful", artifact=str(artifact))
        return CompilerResponse.compiled(str(artifact))

    def validate(self, source: str) -> CompilerResponse:
        _, diagnostic = self._build(source)
        if diagnostic:
            self.logger.info("Validation failed", diagnostic=diagnostic)
            return CompilerResponse.failed(diagnostic)

        self.logger.info("Validation successful")
        return CompilerResponse.validated()

    def render(self, source: str) -> str:
        """Template with the user source injected."""
        return self.template.replace(STRATEGY_PLACEHOLDER, source, 1)

    def _build(self, source: str) -> tuple[str, Optional[str]]:
        """Return (final code, diagnostic); diagnostic is None on success."""
        try:
            tree = ast.parse(source, filename="user_mod.py")
        except SyntaxError as e:
            return "", self._format_syntax_error(e)

        defined = {
            node.name for node in tree.body
            if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef))
        }
        if STRATEGY_FUNCTION not in defined:
            return "", f"user_mod.py: missing top-level function '{STRATEGY_FUNCTION}(prices, params)'"

        final_code = self.render(source)
        try:
            compile(final_code, "strategy_module.py", "exec")
        except SyntaxError as e:
            return "", self._format_syntax_error(e)

        return final_code, None

    @staticmethod
    def _format_syntax_error(e: SyntaxError) -> str:
        location = f"{e.filename or 'user_mod.py'}:{e.lineno or 0}"
        if e.offset:
            location += f":{e.offset}"
        text = f"{location}: {e.msg}"
        if e.text:
            text += f"\n    {e.text.rstrip()}"
        return text
