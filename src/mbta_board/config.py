import fcntl
import json
import logging
import os

from pydantic import ValidationError

from mbta_board import constants
from mbta_board.models import BoardConfig

logger = logging.getLogger(__name__)


def safe_save_config(config: BoardConfig):
    """Save configuration to file with proper locking."""
    try:
        os.makedirs(os.path.dirname(constants.CONFIG_FILE), exist_ok=True)
        with open(constants.CONFIG_FILE, "w") as f:
            # Get an exclusive lock
            fcntl.flock(f.fileno(), fcntl.LOCK_EX)
            try:
                json.dump(config.model_dump(), f, indent=2)
            finally:
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
    except OSError as e:
        logger.error(f"Error saving config: {str(e)}")
        raise RuntimeError(f"Could not save configuration: {str(e)}")


def safe_load_config() -> BoardConfig:
    """Load configuration from file, writing the defaults if it is missing."""
    try:
        if not os.path.exists(constants.CONFIG_FILE):
            default_config = BoardConfig()
            safe_save_config(default_config)
            return default_config

        with open(constants.CONFIG_FILE, "r") as f:
            # Get a shared lock for reading
            fcntl.flock(f.fileno(), fcntl.LOCK_SH)
            try:
                config_data = json.load(f)
            finally:
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        return BoardConfig(**config_data)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        logger.error(f"Error loading config: {str(e)}")
        raise RuntimeError(f"Could not load configuration: {str(e)}")
