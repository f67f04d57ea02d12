"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~ripex.exceptions.RipexError` subclass.  Shell
scripts that drive ``ripex`` can branch on the exit code instead of parsing
stderr.

Example::

    $ ripex stat network-info 999.1.1.1
    $ echo $?
    8   # EXIT_ENDPOINT_ERROR -- RIPEstat rejected the resource
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_NOT_FOUND = 4
"""The requested endpoint or resource was not found (HTTP 404)."""

EXIT_SERVER_ERROR = 5
"""RIPEstat returned an HTTP 5xx server error."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_ENDPOINT_ERROR = 8
"""RIPEstat answered, but reported the data call as failed."""

EXIT_CACHE_ERROR = 9
"""A cache snapshot could not be written or read back."""
