"""Exception hierarchy and status-code mapping for the API client."""


class JuiceWRLDError(Exception):
    """Base exception for all client errors."""


class APIError(JuiceWRLDError):
    """The server answered with a non-2xx status."""

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.status_code == 0:
            return self.message
        return f"api error: {self.status_code} - {self.message}"


class RateLimitError(APIError):
    """HTTP 429."""


class NotFoundError(APIError):
    """HTTP 404."""


class AuthenticationError(APIError):
    """HTTP 401."""


class ValidationError(APIError):
    """Input rejected on the client side before any request was sent."""

    def __init__(self, message: str) -> None:
        super().__init__(0, message)


class TransportError(JuiceWRLDError):
    """Network-level failure (DNS, refused connection, timeout)."""


class RequestCancelledError(JuiceWRLDError):
    """The caller's cancel token fired before the request completed."""


class ResponseDecodeError(JuiceWRLDError):
    """A 2xx body could not be decoded into the expected type."""


_STATUS_ERRORS: dict[int, type[APIError]] = {
    429: RateLimitError,
    404: NotFoundError,
    401: AuthenticationError,
}


def error_for_status(status_code: int, body: str) -> APIError | None:
    """Map an HTTP status code to the matching exception, or None on success.

    429, 404 and 401 get dedicated types; any other code >= 400 is a
    plain APIError. Codes below 400 are not errors.
    """
    if status_code < 400:
        return None
    exc_type = _STATUS_ERRORS.get(status_code, APIError)
    return exc_type(status_code, body)
