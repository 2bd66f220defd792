"""Tests for the in-process compiler."""

from pathlib import Path

import pytest

from swapbot_app.compiler.local import LocalCompiler, STRATEGY_PLACEHOLDER
from swapbot_app.modules.contract import Signal
from swapbot_app.modules.loader import ArtifactLoader


class TestCompile:
    """Test compiling user mods into artifacts."""

    def test_compile_writes_loadable_artifact(self, local_compiler, valid_mod_source):
        response = local_compiler.compile(valid_mod_source)

        assert response.success is True
        assert response.diagnostic is None
        artifact = Path(response.artifact_ref)
        assert artifact.exists()
        assert "def strategy_user_mod" in artifact.read_text()

        module = ArtifactLoader().instantiate(response.artifact_ref, generation=1)
        assert module.evaluate([1.0, 2.0], {}).signal == Signal.BUY
        assert module.evaluate([2.0, 1.0], {}).signal == Signal.SELL
        assert module.evaluate([1.0], {}).signal == Signal.HOLD

    def test_syntax_error_diagnostic(self, local_compiler, invalid_mod_source):
        response = local_compiler.compile(invalid_mod_source)

        assert response.success is False
        assert response.artifact_ref is None
        assert response.diagnostic.startswith("user_mod.py:2")
        assert not local_compiler.artifact_dir.exists() or not any(local_compiler.artifact_dir.iterdir())

    def test_missing_strategy_function(self, local_compiler):
        response = local_compiler.compile("def helper(prices):\n    return 1\n")

        assert response.success is False
        assert "strategy_user_mod" in response.diagnostic

    def test_indicators_and_channels(self, local_compiler):
        source = (
            "USER_MOD_CHANNELS = ('last',)\n"
            "\n"
            "def user_mod_indicators(prices, params):\n"
            "    return {'last': prices[-1]}\n"
            "\n"
            "def strategy_user_mod(prices, params):\n"
            "    return HOLD\n"
        )

        response = local_compiler.compile(source)
        module = ArtifactLoader().instantiate(response.artifact_ref, generation=2)

        assert module.channels == ("last",)
        assert module.evaluate([7.0], {}).indicators == {"last": 7.0}


class TestValidate:
    """Test validate-only requests."""

    def test_validate_writes_nothing(self, local_compiler, valid_mod_source):
        response = local_compiler.validate(valid_mod_source)

        assert response.success is True
        assert response.artifact_ref is None
        assert not local_compiler.artifact_dir.exists()

    def test_validate_reports_diagnostic(self, local_compiler, invalid_mod_source):
        response = local_compiler.validate(invalid_mod_source)

        assert response.success is False
        assert "user_mod.py" in response.diagnostic


class TestTemplate:
    """Test template handling."""

    def test_render_injects_source(self, local_compiler):
        rendered = local_compiler.render("X = 1")
        assert "X = 1" in rendered
        assert STRATEGY_PLACEHOLDER not in rendered

    def test_template_requires_placeholder(self, tmp_path):
        with pytest.raises(ValueError):
            LocalCompiler(artifact_dir=tmp_path, template="def create_module():\n    pass\n")
