# Standard library imports
import logging
from contextlib import asynccontextmanager

# Third-party imports
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Local imports
from mbta_board import constants
from mbta_board.config import safe_load_config
from mbta_board.display import ConsoleBoard
from mbta_board.routes import setup_routes
from mbta_board.runner import BoardRunner

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if constants.DEBUG_MODE else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.FileHandler("mbta_board.log"), logging.StreamHandler()],
)
logger = logging.getLogger(__name__)


def create_runner() -> BoardRunner:
    """Build the board runner from the saved configuration."""
    config = safe_load_config()
    timezone_name = constants.BOARD_TIMEZONE or config.timezone
    logger.info(f"Starting board for stops {config.stops} in {timezone_name}")
    return BoardRunner(
        config.stops,
        timezone_name=timezone_name,
        on_update=ConsoleBoard() if constants.DEBUG_MODE else None,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle manager for FastAPI app"""
    # Start the refresh cycle on startup
    runner = create_runner()
    app.state.runner = runner
    runner.start()
    yield
    # Stop timers and in-flight fetches on shutdown
    await runner.stop()
    app.state.runner = None


app = FastAPI(title="MBTA Departure Board", lifespan=lifespan)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=constants.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "Authorization", "X-API-Key"],
    expose_headers=["X-RateLimit-Limit", "X-RateLimit-Remaining", "X-RateLimit-Reset"],
    max_age=3600,  # Cache preflight requests for 1 hour
)

setup_routes(app)


async def run_once() -> None:
    """Fetch the board once and print it."""
    runner = create_runner()
    entries = await runner.run_once()
    logger.info(f"Got {len(entries)} departures for {runner.selected_stop_label}")
    ConsoleBoard()(runner)
