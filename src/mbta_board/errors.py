class FetchError(Exception):
    """Raised when the schedule fetch fails. ``category`` names the failure kind."""
    category = "fetch"


class BadUrlError(FetchError):
    category = "bad url"


class FetchTimeoutError(FetchError):
    category = "timeout"


class NetworkError(FetchError):
    category = "network"


class BadStatusError(FetchError):
    category = "bad status"

    def __init__(self, status: int, detail: str = ""):
        self.status = status
        message = f"Status {status}"
        if detail:
            message = f"{message}, Body: {detail}"
        super().__init__(message)


class BadBodyError(FetchError):
    category = "bad body"
