"""Exception hierarchy for tumblrkit.

All exceptions inherit from :class:`TumblrError`, which carries an
``exit_code`` attribute mapped to a constant from
:mod:`tumblrkit.exit_codes`. Library callers catch the specific subclasses;
the CLI entry point in :func:`tumblrkit.app.main` catches ``TumblrError``
and exits with the matching code.

Subclass hierarchy::

    TumblrError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- ConfigurationError  (exit 1)
    +-- TransportError      (exit 6)
    +-- DecodeError         (exit 7)

Non-2xx responses are not exceptions: a 404 resolves to the ``Not Found``
marker and any other status returns the raw body.
"""

from tumblrkit.exit_codes import (
    EXIT_DECODE_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_TRANSPORT_ERROR,
)


class TumblrError(Exception):
    """Base exception for all tumblrkit errors.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(TumblrError):
    """Raised for unusable path segments, arguments, or CLI input."""

    exit_code = EXIT_INVALID_USAGE


class ConfigurationError(TumblrError):
    """Raised for missing credentials, a missing hostname, or an unusable cache directory."""

    exit_code = EXIT_GENERIC_FAILURE


class TransportError(TumblrError):
    """Raised by a transport when the request could not be completed.

    The resolver never wraps this; it reaches the caller as the transport
    raised it.
    """

    exit_code = EXIT_TRANSPORT_ERROR


class DecodeError(TumblrError):
    """Raised by a decoder when a response body is malformed for its format."""

    exit_code = EXIT_DECODE_ERROR
