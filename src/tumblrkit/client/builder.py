"""Endpoint path builder -- the public :class:`Tumblr` client.

A :class:`Tumblr` object is a *view*: an immutable
:class:`~tumblrkit.models.ClientState` plus the collaborators needed to run
requests. Every step returns a new view and leaves the receiver untouched::

    client = Tumblr("example.tumblr.com")
    posts = client.posts                    # path: posts
    posts.read(tag="cats")                  # GET .../api/v2/posts/read?tag=cats
    client.test_mode().posts.read()         # returns the RequestDescriptor

Attribute access appends a lower-cased path segment and calling a view runs
the last segment as the action. The same operations are available without
the sugar as :meth:`Tumblr.segment` and :meth:`Tumblr.call`.

Configuration methods are looked up in :data:`RESERVED_NAMES` and can never
become path segments, whatever the API's resource names are.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Union

from tumblrkit.cache import check_cache_dir
from tumblrkit.client.composer import compose
from tumblrkit.client.decoder import Decoder
from tumblrkit.client.resolver import ResponseResolver
from tumblrkit.client.transport import Transport
from tumblrkit.config import get_cache_dir, resolve_credentials
from tumblrkit.exceptions import InvalidUsageError
from tumblrkit.models import ClientState, OutputFormat, RequestDescriptor, ResponseEnvelope

RESERVED_NAMES = frozenset(
    {
        "segment",
        "call",
        "close",
        "from_state",
        "segments",
        "state",
        "resolver",
        "test_mode",
        "auth_mode",
        "login",
        "output",
        "api_version",
        "set_hostname",
        "cache_mode",
        "header_mode",
    }
)
"""Client methods and properties that are never treated as path segments."""


class _AuthTicket:
    """One-shot permission to send credentials, shared along a view lineage."""

    def __init__(self) -> None:
        self._armed = True
        self._lock = threading.Lock()

    def consume(self) -> bool:
        with self._lock:
            armed, self._armed = self._armed, False
            return armed

    @property
    def armed(self) -> bool:
        return self._armed


class Tumblr:
    """Client view over the Tumblr API.

    Args:
        hostname: Blog hostname, e.g. ``example.tumblr.com``.
        email: Login e-mail for auth-mode requests.
        password: Login password for auth-mode requests.
        auth_hostname: Host for auth-mode requests (defaults to *hostname*).
        transport: Transport collaborator (defaults to httpx).
        decoder: Decoder collaborator (defaults to the xml/json decoder).
        clock: Time source for cache freshness checks.

    Values not passed explicitly are read from ``TUMBLR_*`` environment
    variables or the config file.

    Raises:
        ConfigurationError: If no hostname or credentials can be found at all.
    """

    def __init__(
        self,
        hostname: Optional[str] = None,
        email: Optional[str] = None,
        password: Optional[str] = None,
        *,
        auth_hostname: Optional[str] = None,
        transport: Optional[Transport] = None,
        decoder: Optional[Decoder] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        credentials = resolve_credentials(hostname, email, password)
        if auth_hostname:
            credentials = credentials.model_copy(update={"auth_hostname": auth_hostname})
        self._state = ClientState(credentials=credentials)
        self._resolver = ResponseResolver(transport=transport, decoder=decoder, clock=clock)
        self._auth_ticket: Optional[_AuthTicket] = None

    @classmethod
    def from_state(
        cls,
        state: ClientState,
        resolver: Optional[ResponseResolver] = None,
    ) -> Tumblr:
        """Build a view directly from a state snapshot, skipping credential lookup."""
        view = cls.__new__(cls)
        view._state = state
        view._resolver = resolver or ResponseResolver()
        view._auth_ticket = None
        return view

    def _derive(self, ticket: Any = ..., **changes: Any) -> Tumblr:
        view = self.from_state(self._state.model_copy(update=changes), self._resolver)
        view._auth_ticket = self._auth_ticket if ticket is ... else ticket
        return view

    # ------------------------------------------------------------------ #
    # Introspection
    # ------------------------------------------------------------------ #

    @property
    def state(self) -> ClientState:
        return self._state

    @property
    def segments(self) -> tuple[str, ...]:
        return self._state.segments

    @property
    def resolver(self) -> ResponseResolver:
        return self._resolver

    def __repr__(self) -> str:
        path = "/".join(self._state.segments) or "/"
        return f"<Tumblr {self._state.credentials.hostname or '?'} {path}>"

    def __enter__(self) -> Tumblr:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        """Release the HTTP connection pool shared by this view and its relatives.

        Views stay usable; the next request opens a new pool.
        """
        self._resolver.close()

    # ------------------------------------------------------------------ #
    # Path building
    # ------------------------------------------------------------------ #

    def segment(self, name: str) -> Tumblr:
        """Return a new view with *name* (lower-cased) appended to the path.

        Raises:
            InvalidUsageError: If *name* is empty or a reserved client name.
        """
        segment = str(name).strip().lower()
        if not segment:
            raise InvalidUsageError("Path segments cannot be empty")
        if segment in RESERVED_NAMES:
            raise InvalidUsageError(f"'{segment}' is a client method, not a path segment")
        return self._derive(segments=self._state.segments + (segment,))

    def __getattr__(self, name: str) -> Tumblr:
        # Only reached for names that are not real attributes.
        if name.startswith("_") or name.lower() in RESERVED_NAMES:
            raise AttributeError(name)
        return self.segment(name)

    def call(
        self,
        action: str,
        params: Optional[Mapping[str, Any]] = None,
        **kwargs: Any,
    ) -> Union[RequestDescriptor, ResponseEnvelope]:
        """Run *action* on the current path.

        Arguments come from *params* (for keys that are not identifiers)
        and keyword arguments; keyword arguments win on conflicts.

        Returns:
            The :class:`~tumblrkit.models.RequestDescriptor` in test mode,
            otherwise a :class:`~tumblrkit.models.ResponseEnvelope`.
        """
        args = {**(params or {}), **kwargs}
        auth = self._auth_ticket.consume() if self._auth_ticket is not None else False
        descriptor = compose(self._state, action, args, auth_mode=auth)
        return self._resolver.resolve(descriptor, self._state)

    def __call__(
        self,
        params: Optional[Mapping[str, Any]] = None,
        **kwargs: Any,
    ) -> Union[RequestDescriptor, ResponseEnvelope]:
        segments = self._state.segments
        if not segments:
            raise InvalidUsageError("No action given: access a resource before calling the client")
        parent = self._derive(segments=segments[:-1])
        return parent.call(segments[-1], params, **kwargs)

    # ------------------------------------------------------------------ #
    # Configuration (each returns a new view)
    # ------------------------------------------------------------------ #

    def test_mode(self, enabled: bool = True) -> Tumblr:
        """Return composed requests instead of sending them."""
        return self._derive(test_mode=enabled)

    def auth_mode(self, enabled: bool = True) -> Tumblr:
        """Send credentials with the next request made through this lineage.

        The next terminal call on this view, or on any view derived from it,
        is a POST carrying ``email`` and ``password``; calls after that are
        plain GETs again until auth mode is re-enabled.
        """
        return self._derive(ticket=_AuthTicket() if enabled else None)

    def login(self) -> Tumblr:
        """Shorthand for ``auth_mode(True)``."""
        return self.auth_mode(True)

    def output(self, fmt: Union[str, OutputFormat]) -> Tumblr:
        """Select the response format (``xml`` or ``json``)."""
        try:
            value = OutputFormat(str(getattr(fmt, "value", fmt)).lower())
        except ValueError:
            raise InvalidUsageError(f"Unknown output format: {fmt!r}") from None
        return self._derive(output=value)

    def api_version(self, version: Optional[str]) -> Tumblr:
        """Set the API version segment, or drop it with ``None``."""
        return self._derive(api_version=version or None)

    def set_hostname(self, hostname: str) -> Tumblr:
        """Point requests at another blog hostname."""
        credentials = self._state.credentials.model_copy(update={"hostname": hostname})
        return self._derive(credentials=credentials)

    def header_mode(self, enabled: bool = True) -> Tumblr:
        """Include response headers in returned envelopes."""
        return self._derive(header_mode=enabled)

    def cache_mode(
        self,
        enabled: bool = True,
        ttl: Optional[int] = None,
        path: Optional[Union[str, Path]] = None,
    ) -> Tumblr:
        """Enable or disable the response cache.

        Args:
            enabled: Whether responses are read from and written to the cache.
            ttl: Maximum entry age in seconds (unchanged when ``None``).
            path: Cache directory (unchanged when ``None``; the XDG cache
                directory when never set).

        Raises:
            ConfigurationError: If enabling and the directory does not exist
                or is not writable.
        """
        current = self._state.cache
        changes: dict[str, Any] = {"enabled": enabled}
        if ttl is not None:
            changes["ttl_seconds"] = ttl
        if path is not None:
            changes["directory"] = Path(path)
        settings = current.model_copy(update=changes)
        if enabled:
            check_cache_dir(settings.directory or get_cache_dir())
        return self._derive(cache=settings)
