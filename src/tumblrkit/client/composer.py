"""Request composition: client state + action + arguments -> RequestDescriptor.

:func:`compose` is a pure function. It joins the accumulated path segments,
picks GET or POST, folds credentials into auth-mode requests, and
form-encodes the arguments either into the query string (GET) or the body
(POST). Argument order is preserved so that composing the same call twice
yields identical descriptors, which the response cache depends on.

URL shape::

    http://{host}/api/{version}/{segment}/.../{action}[/{output}]

The version segment is left out when no version is configured and for the
``oembed`` action, which the API serves unversioned.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

import httpx

from tumblrkit.exceptions import ConfigurationError, InvalidUsageError
from tumblrkit.models import ClientState, HTTPMethod, OutputFormat, RequestDescriptor

UNVERSIONED_ACTIONS = frozenset({"oembed"})
"""Actions whose URL never carries an API version segment."""

CONTROL_KEYS = frozenset({"hostname", "output", "login"})
"""Per-call keys that steer composition and are never sent to the API."""

_TRUE_VALUES = frozenset({"true", "1"})
_FALSE_VALUES = frozenset({"false", "0", ""})


def compose(
    state: ClientState,
    action: str,
    args: Optional[Mapping[str, Any]] = None,
    *,
    auth_mode: bool = False,
) -> RequestDescriptor:
    """Build the request for calling *action* on the path held by *state*.

    Args:
        state: The client snapshot (credentials, segments, output format,
            API version).
        action: Terminal action name, e.g. ``"read"``. Lower-cased.
        args: API arguments. The control keys ``hostname`` (host override),
            ``output`` (output format override) and ``login`` (``true`` or
            ``1`` forces an authenticated POST) are consumed here and not
            encoded.
        auth_mode: Send credentials and use POST for this call only.

    Returns:
        A frozen :class:`~tumblrkit.models.RequestDescriptor`.

    Raises:
        InvalidUsageError: If *action* is empty, the output override is
            not a known format, or ``login`` is not a boolean.
        ConfigurationError: If no hostname is available.
    """
    action = action.strip().lower()
    if not action:
        raise InvalidUsageError("An action name is required")

    params = dict(args or {})
    host_override = params.pop("hostname", None)
    output = _resolve_output(params.pop("output", None), state.output)
    login = _parse_flag("login", params.pop("login", False))
    use_auth = auth_mode or login

    credentials = state.credentials
    hostname = host_override or credentials.hostname
    if use_auth and credentials.auth_hostname:
        hostname = credentials.auth_hostname
    if not hostname:
        raise ConfigurationError("No Tumblr hostname has been configured")

    version = None if action in UNVERSIONED_ACTIONS else state.api_version
    url = build_url(hostname, state.segments, action, output, version)

    if use_auth:
        login_args = {"email": credentials.email, "password": credentials.password}
        return RequestDescriptor(
            url=url,
            method=HTTPMethod.POST,
            body=encode_args({**login_args, **params}),
            output=output,
        )

    query = encode_args(params)
    return RequestDescriptor(
        url=f"{url}?{query}" if query else url,
        method=HTTPMethod.GET,
        body="",
        output=output,
    )


def build_url(
    hostname: str,
    segments: tuple[str, ...],
    action: str,
    output: OutputFormat = OutputFormat.XML,
    api_version: Optional[str] = None,
) -> str:
    """Join host, version, segments, action and output suffix into a URL."""
    parts = ["api"]
    if api_version:
        parts.append(api_version)
    parts.extend(segments)
    parts.append(action)
    if output != OutputFormat.XML:
        parts.append(output.value)
    return f"http://{hostname}/" + "/".join(parts)


def encode_args(args: Mapping[str, Any]) -> str:
    """Form-encode *args* in insertion order.

    ``None`` values are dropped, sequences become repeated keys, and
    booleans are sent as ``true``/``false``.
    """
    cleaned: list[tuple[str, Any]] = []
    for key, value in args.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            cleaned.extend((key, item) for item in value if item is not None)
        else:
            cleaned.append((key, value))
    return str(httpx.QueryParams(cleaned))


def _parse_flag(name: str, value: Any) -> bool:
    if isinstance(value, bool) or value is None:
        return bool(value)
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise InvalidUsageError(f"Expected true or false for '{name}', got: {value!r}")


def _resolve_output(override: Any, default: OutputFormat) -> OutputFormat:
    if override is None:
        return default
    try:
        return OutputFormat(str(override).lower())
    except ValueError:
        raise InvalidUsageError(f"Unknown output format: {override!r}") from None
