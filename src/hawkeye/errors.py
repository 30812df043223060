"""Error types raised by the Hawkeye control plane.

Every error carries the HTTP status code the API answers with, so the
transport layer never has to know which operation raised it.
"""


class HawkeyeError(Exception):
    """Base class for all Hawkeye errors."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(HawkeyeError):
    """A Watcher or one of its required backing resources does not exist."""

    status_code = 404


class ConflictError(HawkeyeError):
    """A previous transition has not settled yet."""

    status_code = 409


class NotAcceptableError(HawkeyeError):
    """The Watcher is in the Error status."""

    status_code = 406


class InvalidRequestError(HawkeyeError):
    """The operation is not allowed for the current Watcher status."""

    status_code = 400


class UpstreamFailure(HawkeyeError):
    """A call to the Kubernetes API failed or timed out."""

    status_code = 500


class IntegrityViolation(HawkeyeError):
    """A stored declaration is missing or malformed."""

    status_code = 500


class FrameUnavailableError(HawkeyeError):
    """The Watcher pod could not provide a frame."""

    status_code = 417
