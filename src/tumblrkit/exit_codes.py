"""Numeric process exit codes for the ``tumblrkit`` command line tool.

Each constant maps to an error category and is referenced by the
corresponding :class:`~tumblrkit.exceptions.TumblrError` subclass, so shell
scripts can tell failure classes apart without parsing stderr.
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred, including configuration problems."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_TRANSPORT_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_DECODE_ERROR = 7
"""The response body could not be decoded in the requested output format."""
