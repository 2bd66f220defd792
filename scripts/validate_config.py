#!/usr/bin/env python3
"""Configuration validation script."""

import sys
from pathlib import Path
from typing import List

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from swapbot_app.config.bot_config import BotConfig
from swapbot_app.config.loader import ConfigLoader
from swapbot_app.config.validation import ConfigValidator, ValidationError
from swapbot_app.errors import InvalidConfigError


def validate_record_file(path: Path, loader: ConfigLoader) -> List[ValidationError]:
    """Validate a persisted bot config record against the session settings."""
    settings = loader.load()
    config = BotConfig.load(path)
    return ConfigValidator.validate_bot_config(config, settings.session)


def main():
    """Main validation function."""
    print("🔍 Validating swapbot configuration...")

    loader = ConfigLoader.create()

    try:
        settings = loader.load()
        print(f"✅ Settings loaded (compiler backend: {settings.compiler.backend})")
    except (OSError, TypeError) as e:
        print(f"❌ Error loading settings from {loader.config_dir}: {e}")
        sys.exit(1)

    record_files = [Path(arg) for arg in sys.argv[1:]]
    if not record_files:
        print("\nℹ️  No bot config records given; validating defaults")
        errors = ConfigValidator.validate_bot_config(BotConfig(), settings.session)
        sys.exit(1 if errors else 0)

    all_valid = True

    for path in record_files:
        print(f"\n📋 Validating {path}...")

        try:
            errors = validate_record_file(path, loader)
        except (OSError, InvalidConfigError) as e:
            print(f"❌ Error reading {path}: {e}")
            all_valid = False
            continue

        if errors:
            print(f"❌ Found {len(errors)} validation errors:")
            for error in errors:
                print(f"  • {error.describe()}")
            all_valid = False
        else:
            print(f"✅ {path.name} is valid")

    if all_valid:
        print(f"\n🎉 All configuration validation passed!")
        sys.exit(0)
    else:
        print(f"\n❌ Configuration validation failed!")
        sys.exit(1)


if __name__ == "__main__":
    main()
