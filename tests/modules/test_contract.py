"""Tests for the computation module contract."""

import pytest

from swapbot_app.modules.contract import Decision, FunctionModule, Signal


class TestSignal:
    """Test signal coercion."""

    @pytest.mark.parametrize("value,expected", [
        (Signal.BUY, Signal.BUY),
        ("sell", Signal.SELL),
        ("HOLD", Signal.HOLD),
        (0, Signal.HOLD),
        (1, Signal.BUY),
        (2, Signal.SELL),
    ])
    def test_coerce(self, value, expected):
        assert Signal.coerce(value) == expected

    def test_coerce_rejects_bool_and_garbage(self):
        with pytest.raises(ValueError):
            Signal.coerce(True)
        with pytest.raises(ValueError):
            Signal.coerce("maybe")


class TestFunctionModule:
    """Test adapting plain strategy functions."""

    def test_evaluate_with_indicators(self):
        module = FunctionModule(
            lambda prices, params: "BUY" if prices[-1] > params["level"] else "HOLD",
            indicators=lambda prices, params: {"level": params["level"]},
            channels=["level"],
        )

        decision = module.evaluate([101.0], {"level": 100.0})

        assert decision == Decision(signal=Signal.BUY, indicators={"level": 100.0})
        assert module.channels == ("level",)

    def test_evaluate_without_indicators(self):
        module = FunctionModule(lambda prices, params: 2)
        assert module.evaluate([], {}).indicators == {}

    def test_strategy_must_be_callable(self):
        with pytest.raises(TypeError):
            FunctionModule("not callable")
