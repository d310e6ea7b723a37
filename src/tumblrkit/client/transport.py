"""Transport collaborator: sends a composed request over HTTP.

The resolver only needs something with a ``send`` method matching
:class:`Transport`. :class:`HttpxTransport` is the default implementation,
backed by :class:`httpx.Client`. It owns connection handling, TLS, redirects
and timeouts; the rest of the library never touches the network directly.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

import httpx

from tumblrkit.exceptions import TransportError
from tumblrkit.models import HTTPMethod, TransportResponse

logger = logging.getLogger(__name__)

_FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class Transport(Protocol):
    """Anything that can deliver a request and return the raw response."""

    def send(
        self,
        url: str,
        method: HTTPMethod,
        body: str,
        user_agent: str,
    ) -> TransportResponse: ...


class HttpxTransport:
    """Default transport backed by :class:`httpx.Client`.

    Args:
        timeout: Request timeout in seconds.
        client: Optional preconfigured client (tests pass one built on
            :class:`httpx.MockTransport`). A client created here is closed
            by :meth:`close`; a supplied one is left to its owner.

    Example::

        with HttpxTransport(timeout=10) as transport:
            resp = transport.send(url, HTTPMethod.GET, "", USER_AGENT)
    """

    def __init__(self, timeout: float = 30.0, client: Optional[httpx.Client] = None) -> None:
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout, follow_redirects=True)

    def __enter__(self) -> HttpxTransport:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def send(
        self,
        url: str,
        method: HTTPMethod,
        body: str,
        user_agent: str,
    ) -> TransportResponse:
        """Send one request.

        Raises:
            TransportError: On connection, timeout or other network errors.
        """
        headers = {"User-Agent": user_agent}
        content: Optional[str] = None
        if method == HTTPMethod.POST:
            headers["Content-Type"] = _FORM_CONTENT_TYPE
            content = body

        logger.debug("%s %s", method.value, url)
        try:
            response = self._client.request(
                method.value, url, headers=headers, content=content
            )
        except httpx.TransportError as exc:
            raise TransportError(f"Request to {url} failed: {exc}") from exc

        return TransportResponse(
            status_code=response.status_code,
            headers=dict(response.headers),
            body=response.content,
        )
