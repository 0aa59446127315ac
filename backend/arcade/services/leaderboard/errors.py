class LeaderboardError(Exception):
    """Failure surfaced to the HTTP caller as ``{success: false, error: message}``."""

    def __init__(self, code: str, message: str, status: int = 400):
        self.code = code
        self.message = message
        self.status = status
        super().__init__(message)


class AdmissionDenied(LeaderboardError):
    def __init__(self, message: str = "Rate limit exceeded. Please wait before submitting again."):
        super().__init__("RATE_LIMITED", message, 429)


class ValidationRejected(LeaderboardError):
    """A plausibility check failed.

    ``reason`` names the failing check and is for server logs only; callers
    get the same generic message whichever check tripped.
    """

    def __init__(self, reason: str, message: str = "Invalid score submission"):
        self.reason = reason
        super().__init__("VALIDATION_ERROR", message, 400)


class StoreUnavailable(LeaderboardError):
    def __init__(self, message: str = "Server error"):
        super().__init__("STORE_UNAVAILABLE", message, 500)


class TransientStoreError(Exception):
    """A single store read or write failed and may succeed if retried."""


class WriteConflictError(Exception):
    """Conditional write lost: the stored revision moved since it was read."""
