"""Failure taxonomy for session operations.

Every network operation raises one of these internally and catches it at
its public boundary, where it is logged and recorded on the session as
``last_error``. Only ``SessionFailedError`` is meant to reach caller
code, through ``SessionClient.wait_ready()``.
"""


class SessionError(Exception):
    """Base class for all session failures.

    Args:
        message: Human-readable description.
        body: Response body returned by the server, when there was one.
    """

    def __init__(self, message: str, *, body: str | None = None) -> None:
        super().__init__(message)
        self.body = body


class ConfigurationFailure(SessionError):
    """The backend origin could not be determined."""


class TransportFailure(SessionError):
    """Connection-level error: DNS, refused connection, timeout."""


class ProtocolFailure(SessionError):
    """The server answered with a non-2xx status."""

    def __init__(
        self, message: str, *, status_code: int, body: str | None = None
    ) -> None:
        super().__init__(message, body=body)
        self.status_code = status_code


class ApplicationFailure(SessionError):
    """A 2xx response whose body signals failure or has the wrong shape."""


class NotAuthenticatedError(SessionError):
    """A report was requested before a nonce was obtained (strict mode)."""


class SessionFailedError(SessionError):
    """The authentication handshake ended without the session becoming ready."""

    def __init__(self, cause: SessionError | None) -> None:
        message = f"Session failed: {cause}" if cause else "Session failed"
        super().__init__(message, body=cause.body if cause else None)
        self.cause = cause
