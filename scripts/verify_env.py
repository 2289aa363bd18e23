#!/usr/bin/env python3
"""
Environment verification script for the MBTA departure board.
Checks that environment variables and the board configuration load.
"""

import os
import sys
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Add the src directory to the Python path
src_path = str(Path(__file__).parent.parent / "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

OPTIONAL_VARS = {
    "MBTA_API_KEY": "MBTA API key from https://api-v3.mbta.com/ (raises the rate limit)",
    "API_KEY": "Key required by POST /toggle and GET /config",
    "BOARD_TIMEZONE": "IANA timezone overriding config.json",
    "DEBUG_MODE": "Print the board to the console (true/false, defaults to false)",
}


def check_env_variables() -> int:
    """Report environment variables and try loading the configuration."""
    print("🔍 Checking environment variables...")

    env_file = Path(__file__).parent.parent / ".env"
    if env_file.exists():
        print(f"✅ .env file found: {env_file}")
    else:
        print(f"⚠️  .env file not found: {env_file}")

    for var, description in OPTIONAL_VARS.items():
        value = os.getenv(var)
        if value and var.endswith("API_KEY"):
            value = value[:8] + "..." if len(value) > 8 else "***"
        print(f"ℹ️  {var}: {value or 'not set'}")
        print(f"   Description: {description}")

    print("\n🧪 Loading board configuration...")
    try:
        from mbta_board.config import safe_load_config
        from mbta_board.runner import resolve_timezone

        config = safe_load_config()
        timezone = resolve_timezone(os.getenv("BOARD_TIMEZONE") or config.timezone)
        print(f"✅ Stops: {', '.join(config.stops)}")
        print(f"✅ Timezone: {timezone}")
    except RuntimeError as e:
        print(f"❌ {e}")
        return 1

    print("\n🎉 Board configuration is usable")
    return 0


if __name__ == "__main__":
    sys.exit(check_env_variables())
