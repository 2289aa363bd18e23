import logging
import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

# Load environment variables
DEBUG_MODE = os.getenv("DEBUG_MODE", "false").lower() == "true"
MBTA_API_KEY = os.getenv("MBTA_API_KEY")
API_KEY = os.getenv("API_KEY")
BOARD_TIMEZONE = os.getenv("BOARD_TIMEZONE")
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("ALLOWED_ORIGINS", "http://localhost:8000").split(",")
    if origin.strip()
]

if not MBTA_API_KEY:
    logger.warning("MBTA_API_KEY environment variable is not set, requests will be rate limited")

# API Configuration
MBTA_API_BASE = "https://api-v3.mbta.com"
HEADERS = {"x-api-key": MBTA_API_KEY} if MBTA_API_KEY else {}
REQUEST_TIMEOUT_SECONDS = 10

# File paths
CONFIG_FILE = Path(__file__).parent.parent.parent / "config" / "config.json"

# Board configuration
CARRIER = "MBTA"
DEFAULT_STOPS = ["North Station", "South Station"]
DEFAULT_TIMEZONE = "America/New_York"
MAX_BOARD_ENTRIES = 15

# Fallback display values
DEFAULT_STATUS = "ON TIME"
DEFAULT_TRACK = "TBD"
MISSING_TRIP_FIELD = "-"
TRACK_DELIMITER = "-"

# Timers
CLOCK_INTERVAL_SECONDS = 1
REFRESH_INTERVAL_SECONDS = 30
