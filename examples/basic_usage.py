#!/usr/bin/env python3
"""
Basic Usage Example - Swapbot Session Host

This script walks a simulated paper-trading session through a hot-swap:
- Start the bot with a configuration record
- Tick the simulation runtime by hand
- Submit a strategy mod, then a broken one
- Restart and watch the new module trade

Run: python examples/basic_usage.py
"""

import tempfile
from pathlib import Path

from swapbot_app.data.models import BUY_SIGNAL, PRICE, SELL_SIGNAL
from swapbot_app.engine import SwapbotEngine
from swapbot_app.logging import configure_logging


MOMENTUM_MOD = '''
USER_MOD_CHANNELS = ("momentum",)


def user_mod_indicators(prices, params):
    lookback = int(params.get("lookback", 3))
    window = prices[-lookback:]
    return {"momentum": window[-1] - window[0]}


def strategy_user_mod(prices, params):
    if len(prices) < 3:
        return HOLD
    delta = prices[-1] - prices[-3]
    if delta > 0:
        return BUY
    if delta < 0:
        return SELL
    return HOLD
'''

BROKEN_MOD = '''
def strategy_user_mod(prices, params)
    return HOLD
'''


def print_result(label: str, result) -> None:
    marker = "✅" if result.ok else "❌"
    print(f"   {marker} {label}: state={result.state.value}")
    if result.detail:
        print(f"      {result.detail}")


def print_series(engine: SwapbotEngine) -> None:
    snapshot = engine.store.snapshot_all()
    print(f"   prices={len(snapshot[PRICE])} "
          f"buys={len(snapshot[BUY_SIGNAL])} sells={len(snapshot[SELL_SIGNAL])}")


def main():
    """Run the basic usage demo."""
    configure_logging(level="WARNING")

    print("🚀 Swapbot Session Host - Basic Usage Demo")
    print("=" * 50)

    with tempfile.TemporaryDirectory() as workdir:
        engine = SwapbotEngine(
            config_dir=Path(workdir),
            overrides={"compiler": {"artifact_dir": str(Path(workdir) / "artifacts")}},
            background=False,
        )

        print("\n1. Starting a simulated session...")
        print_result("start", engine.session.start({
            "symbol": "BTCUSD",
            "tickIntervalSeconds": 5,
            "connectorId": "simulation",
            "strategyParams": {"lookback": 3},
        }))

        print("\n2. Ticking without a module (every decision is HOLD)...")
        for _ in range(5):
            engine.runtime.run_tick()
        print_series(engine)

        print("\n3. Applying the momentum mod...")
        print_result("apply_mod", engine.session.apply_mod(MOMENTUM_MOD))
        print(f"   Active generation: {engine.status()['active_generation']}")

        print("\n4. Applying a mod with a syntax error...")
        print_result("apply_mod", engine.session.apply_mod(BROKEN_MOD))

        print("\n5. Restarting with the momentum module...")
        print_result("start", engine.session.start())
        for _ in range(10):
            engine.runtime.run_tick()
        print_series(engine)
        print(f"   Momentum samples: {len(engine.store.snapshot('momentum'))}")

        status = engine.status()
        print("\n6. Final status:")
        for key, value in status.items():
            print(f"   {key}: {value}")

        print("\n7. Operator notices:")
        for notice in engine.notices.entries():
            print(f"   [{notice.level.value}] {notice.message}")

        engine.shutdown()

    print("\n✅ Demo completed successfully!")


if __name__ == "__main__":
    main()
