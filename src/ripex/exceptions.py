"""Exception hierarchy for ripex.

All exceptions inherit from :class:`RipexError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`ripex.exit_codes`.
The top-level error handler in :func:`ripex.app.main` catches
``RipexError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    RipexError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- NotFoundError       (exit 4)
    +-- ServerError         (exit 5)
    +-- ConnectionError_    (exit 6)
    +-- EndpointError       (exit 8)
    +-- CacheError          (exit 9)
    +-- ConfigError         (exit 1)
"""

from ripex.exit_codes import (
    EXIT_CACHE_ERROR,
    EXIT_CONNECTION_ERROR,
    EXIT_ENDPOINT_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_SERVER_ERROR,
)


class RipexError(Exception):
    """Base exception for all ripex errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`ripex.exit_codes`.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(RipexError):
    """Raised for invalid CLI arguments, resources or snapshot names."""

    exit_code = EXIT_INVALID_USAGE


class NotFoundError(RipexError):
    """Raised on HTTP 404: an unknown data call, or no such RIPE Database object."""

    exit_code = EXIT_NOT_FOUND


class ServerError(RipexError):
    """Raised when RIPEstat returns an HTTP 5xx server error."""

    exit_code = EXIT_SERVER_ERROR


class ConnectionError_(RipexError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class EndpointError(RipexError):
    """Raised when a data call fails at the RIPEstat level.

    Covers non-200 statuses other than 404/5xx and 200 responses whose body
    ``status`` is not ``"ok"``.

    Args:
        message: Human-readable error description.
        endpoint: Name of the data call, e.g. ``"network-info"``.
        status: HTTP status code, or the body status string.
    """

    exit_code = EXIT_ENDPOINT_ERROR

    def __init__(self, message: str, endpoint: str = "", status: int | str | None = None):
        super().__init__(message)
        self.endpoint = endpoint
        self.status = status


class CacheError(RipexError):
    """Raised when a cache snapshot cannot be saved or loaded (I/O or corrupt data)."""

    exit_code = EXIT_CACHE_ERROR


class ConfigError(RipexError):
    """Raised for configuration problems (invalid JSON, failed validation)."""

    exit_code = EXIT_GENERIC_FAILURE
