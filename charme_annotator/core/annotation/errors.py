"""
Error taxonomy for the annotation core.

Input errors are raised synchronously where they are detected. Remote
failures are raised by the client and caught by the session manager and
the controller, which log them and turn them into events.
"""


class CharmeError(Exception):
    """Base class for every error raised by charme_annotator."""


class PreconditionError(CharmeError, ValueError):
    """A caller contract was violated before any output was produced."""


class GeometryError(PreconditionError):
    """Unrecognised shape kind or degenerate ring."""


class DatasetNotSelectedError(PreconditionError):
    """A query or draft was requested before a dataset was selected."""

    def __init__(self, message: str = "No dataset selected"):
        super().__init__(message)


class AuthenticationError(CharmeError):
    """Missing token, or the OAuth redirect could not be accepted."""


class TransportError(CharmeError):
    """The request never produced a response (network failure)."""


class RemoteServiceError(TransportError):
    """The node answered with a non-2xx status."""

    def __init__(self, status: int, url: str, body: str = ""):
        self.status = status
        self.url = url
        self.body = body
        super().__init__(f"{url} answered with HTTP {status}")
