#!/usr/bin/env python3
"""
MBTA Departure Board - Command Line Application
Shows the live board in the terminal without web server overhead.
Press Enter to switch to the next configured stop.
"""

import asyncio
import logging
import sys
from pathlib import Path

# Add the src directory to the Python path
src_path = str(Path(__file__).parent / "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from mbta_board import constants
from mbta_board.config import safe_load_config
from mbta_board.display import ConsoleBoard
from mbta_board.runner import BoardRunner

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def build_runner() -> BoardRunner:
    """Create a runner that prints the board on every change."""
    config = safe_load_config()
    return BoardRunner(
        config.stops,
        timezone_name=constants.BOARD_TIMEZONE or config.timezone,
        on_update=ConsoleBoard(),
    )


def _on_stdin(runner: BoardRunner) -> None:
    sys.stdin.readline()
    runner.toggle_stop()


async def main() -> None:
    """Run the board until interrupted."""
    runner = build_runner()
    loop = asyncio.get_running_loop()
    loop.add_reader(sys.stdin, _on_stdin, runner)
    try:
        await runner.run_forever()
    finally:
        loop.remove_reader(sys.stdin)


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nStopped")
