"""tumblrkit -- a dynamic client for the Tumblr REST API.

Endpoint paths are accumulated through attribute access on a
:class:`~tumblrkit.client.builder.Tumblr` view and the final call names the
action to run::

    client = Tumblr("example.tumblr.com")
    client.posts.read(tag="cats")

Requests are composed by :func:`~tumblrkit.client.composer.compose`,
dispatched through a pluggable transport, decoded by output format and,
optionally, cached to disk by :class:`~tumblrkit.cache.ResponseCache`.

Modules:
    models: Pydantic models shared across the package.
    config: XDG-aware paths and credential configuration.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes used by the CLI.
    output: stdout/stderr formatting for the CLI.
    app: Typer CLI entry point.
"""

__version__ = "1.0.0"

PROJECT_URL = "https://github.com/jaywilliams/tumblr/"

USER_AGENT = f"tumblrkit/{__version__} (Tumblr Toolkit; {PROJECT_URL}) Build/{__version__}"

from tumblrkit.client.builder import Tumblr  # noqa: E402
from tumblrkit.exceptions import (  # noqa: E402
    ConfigurationError,
    DecodeError,
    InvalidUsageError,
    TransportError,
    TumblrError,
)

__all__ = [
    "Tumblr",
    "TumblrError",
    "ConfigurationError",
    "DecodeError",
    "InvalidUsageError",
    "TransportError",
    "USER_AGENT",
    "__version__",
]
