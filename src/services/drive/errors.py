"""
Error taxonomy for the Drive proxy.

Connectors raise ProviderError for anything that goes wrong talking to the
provider; the proxy maps those onto the DriveServiceError subclasses, which
are the only errors the HTTP layer renders.
"""


# Drive answers 403 for quota exhaustion as well as for permission problems.
RATE_LIMIT_REASONS = frozenset({"rateLimitExceeded", "userRateLimitExceeded"})

# Raised by connectors for bodies that do not decode as UTF-8.
NOT_TEXT_REASON = "notUtf8Text"


class ProviderError(Exception):
    """Raw failure from a drive connector (HTTP status, timeout, bad payload)."""

    def __init__(self, message: str, status_code: int | None = None, reason: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.reason = reason

    @property
    def retryable(self) -> bool:
        # No status means the request never completed (timeout, connection reset)
        if self.status_code is None:
            return True
        if self.status_code == 403:
            return self.reason in RATE_LIMIT_REASONS
        return self.status_code == 429 or self.status_code >= 500


class DriveServiceError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code: int = 500
    kind: str = "ServiceError"
    retryable: bool = False

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.kind)
        self.message = message or self.kind

    def to_dict(self) -> dict:
        return {"error": self.message, "kind": self.kind, "retryable": self.retryable}


class Unauthorized(DriveServiceError):
    status_code = 401
    kind = "Unauthorized"


class NotFound(DriveServiceError):
    status_code = 404
    kind = "NotFound"


class InvalidArgument(DriveServiceError):
    status_code = 400
    kind = "InvalidArgument"


class ProviderUnavailable(DriveServiceError):
    status_code = 503
    kind = "ProviderUnavailable"
    retryable = True


class AuthExchangeFailed(DriveServiceError):
    """Authorization code was rejected; the user has to restart sign-in."""

    status_code = 400
    kind = "AuthExchangeFailed"
