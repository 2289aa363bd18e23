from fastapi import Depends, FastAPI, HTTPException, Request, Security
from fastapi.security import APIKeyHeader
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from mbta_board import constants
from mbta_board.config import safe_load_config
from mbta_board.models import BoardConfig, BoardSnapshot

# Configure rate limiter
limiter = Limiter(key_func=get_remote_address)

# API Security
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


async def verify_api_key(api_key: str = Security(api_key_header)):
    """Verify the API key."""
    if not constants.API_KEY:
        return  # Skip validation if API_KEY is not set
    if not api_key:
        raise HTTPException(
            status_code=401,
            detail="Missing API Key",
            headers={"WWW-Authenticate": "ApiKey"},
        )
    if api_key != constants.API_KEY:
        raise HTTPException(
            status_code=403,
            detail="Invalid API Key",
            headers={"WWW-Authenticate": "ApiKey"},
        )
    return api_key


def get_runner(request: Request):
    """Board runner started by the app lifespan."""
    runner = getattr(request.app.state, "runner", None)
    if runner is None:
        raise HTTPException(status_code=503, detail="Board is not running")
    return runner


def setup_routes(app: FastAPI):
    """Set up FastAPI routes."""
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    @app.get("/board", response_model=BoardSnapshot)
    @limiter.limit("120/minute")
    async def get_board(request: Request, runner=Depends(get_runner)):
        """Current departures for the selected stop."""
        return runner.snapshot()

    @app.post("/toggle")
    @limiter.limit("30/minute")
    async def toggle_stop(
        request: Request, runner=Depends(get_runner), api_key: str = Depends(verify_api_key)
    ):
        """Switch to the next configured stop and refresh."""
        selected = runner.toggle_stop()
        return {"status": "success", "selected_stop": selected}

    @app.get("/config", response_model=BoardConfig)
    @limiter.limit("60/minute")
    async def get_config(request: Request, api_key: str = Depends(verify_api_key)):
        """Get current configuration."""
        try:
            return safe_load_config()
        except RuntimeError:
            raise HTTPException(status_code=500, detail="Could not load configuration")
