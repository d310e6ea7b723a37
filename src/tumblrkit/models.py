"""Canonical Pydantic models shared across all tumblrkit modules.

The models fall into three groups:

**Client configuration** -- the immutable snapshot threaded through every
path-builder step:
    :class:`Credentials`, :class:`CacheSettings`, and :class:`ClientState`.

**Requests** -- produced by the composer and consumed by the resolver and
the transport:
    :class:`HTTPMethod`, :class:`OutputFormat`, and :class:`RequestDescriptor`.

**Responses** -- what transports return and what callers receive:
    :class:`TransportResponse` and :class:`ResponseEnvelope`.

Configuration and request models are frozen. Derived client views are built
with ``model_copy(update=...)`` so a view never changes underneath another.
"""

from __future__ import annotations

import enum
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class OutputFormat(str, enum.Enum):
    """Response formats the API can produce.

    ``XML`` is the API default and adds nothing to the URL; any other
    format is appended to the action as an extra path segment.
    """

    XML = "xml"
    JSON = "json"


class HTTPMethod(str, enum.Enum):
    """HTTP methods used by the API."""

    GET = "GET"
    POST = "POST"


# --- Client configuration ---


class Credentials(BaseModel):
    """Blog hostname and login credentials.

    Loaded from explicit constructor arguments, the environment, or the
    config file (see :func:`~tumblrkit.config.resolve_credentials`).
    ``auth_hostname`` is the host that auth-mode requests go to; when unset
    they go to ``hostname``.
    """

    model_config = ConfigDict(frozen=True)

    hostname: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = Field(default=None, repr=False)
    auth_hostname: Optional[str] = None

    def is_empty(self) -> bool:
        """Return True when none of hostname, email, or password is set."""
        return not (self.hostname or self.email or self.password)


class CacheSettings(BaseModel):
    """Response cache settings carried by a client view."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = Field(default=False, description="Enable response caching")
    ttl_seconds: int = Field(default=3600, ge=0, description="Cache TTL in seconds")
    directory: Optional[Path] = Field(
        default=None, description="Cache directory (defaults to the XDG cache dir)"
    )


class ClientState(BaseModel):
    """Immutable snapshot carried through the path-building chain.

    ``segments`` holds the lower-cased path segments in access order. Each
    configuration call on a view produces a new ``ClientState`` rather
    than mutating this one.
    """

    model_config = ConfigDict(frozen=True)

    credentials: Credentials = Field(default_factory=Credentials)
    output: OutputFormat = OutputFormat.XML
    api_version: Optional[str] = "v2"
    test_mode: bool = False
    header_mode: bool = False
    segments: tuple[str, ...] = ()
    cache: CacheSettings = Field(default_factory=CacheSettings)


# --- Requests ---


class RequestDescriptor(BaseModel):
    """A fully composed request, built once per terminal call.

    ``body`` is the form-encoded argument string for POST requests and
    empty for GET requests, whose arguments live in the URL query string.
    """

    model_config = ConfigDict(frozen=True)

    url: str
    method: HTTPMethod = HTTPMethod.GET
    body: str = ""
    output: OutputFormat = OutputFormat.XML


# --- Responses ---


class TransportResponse(BaseModel):
    """Raw result of a transport ``send`` call."""

    status_code: int
    headers: dict[str, str] = Field(default_factory=dict)
    body: bytes = b""

    @property
    def is_success(self) -> bool:
        """True for any 2xx status."""
        return 200 <= self.status_code < 300


class ResponseEnvelope(BaseModel):
    """What a terminal call returns when not in test mode.

    ``body`` is the decoded value for 200 responses, the ``Not Found``
    marker for 404, and the raw body text for anything else. ``headers``
    is only populated in header mode, and never for cache hits.
    """

    status_code: int
    headers: Optional[dict[str, str]] = None
    body: Any = None
    cached: bool = False
