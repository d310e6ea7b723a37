"""Response resolution: descriptor -> transport -> decoder -> envelope.

:class:`ResponseResolver` performs the single network round trip for a
composed request and layers on:

- **Test mode** -- returns the :class:`~tumblrkit.models.RequestDescriptor`
  itself without touching the cache or the transport.
- **Read-through cache** -- a fresh entry for the request is returned as
  is; neither the transport nor the decoder runs.
- **Status mapping** -- 200 decodes the body, 404 yields :data:`NOT_FOUND`,
  anything else returns the raw body text.
- **Write-through cache** -- 2xx results are stored when caching is on.
- **Header mode** -- response headers are attached on cache misses only
  and are never stored in the cache.

There is no retry. Transport and decoder errors propagate unchanged. A
failed cache write is logged as a warning and the response is returned
anyway.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Union

from tumblrkit import USER_AGENT
from tumblrkit.cache import ResponseCache
from tumblrkit.client.decoder import Decoder, ResponseDecoder
from tumblrkit.client.transport import HttpxTransport, Transport
from tumblrkit.models import (
    CacheSettings,
    ClientState,
    RequestDescriptor,
    ResponseEnvelope,
    TransportResponse,
)

logger = logging.getLogger(__name__)

NOT_FOUND = "Not Found"
"""Body returned for HTTP 404 responses."""


class ResponseResolver:
    """Dispatches composed requests and shapes their results.

    Args:
        transport: Transport collaborator. Defaults to a lazily created
            :class:`~tumblrkit.client.transport.HttpxTransport`.
        decoder: Decoder collaborator. Defaults to
            :class:`~tumblrkit.client.decoder.ResponseDecoder`.
        user_agent: ``User-Agent`` header sent with every request.
        clock: Time source handed to the response cache.
    """

    def __init__(
        self,
        transport: Optional[Transport] = None,
        decoder: Optional[Decoder] = None,
        user_agent: str = USER_AGENT,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self._transport = transport
        self._owned_transport: Optional[HttpxTransport] = None
        self._decoder = decoder or ResponseDecoder()
        self._user_agent = user_agent
        self._clock = clock

    @property
    def transport(self) -> Transport:
        if self._transport is None:
            self._owned_transport = HttpxTransport()
            self._transport = self._owned_transport
        return self._transport

    def resolve(
        self,
        descriptor: RequestDescriptor,
        state: ClientState,
    ) -> Union[RequestDescriptor, ResponseEnvelope]:
        """Resolve *descriptor* under the modes recorded in *state*.

        Returns:
            The descriptor itself in test mode, otherwise a
            :class:`~tumblrkit.models.ResponseEnvelope`.

        Raises:
            ConfigurationError: If caching is on and its directory is unusable.
            TransportError: Raised by the transport.
            DecodeError: Raised by the decoder for a malformed 200 body.
        """
        if state.test_mode:
            return descriptor

        cache = self.open_cache(state.cache)
        key = ResponseCache.make_key(descriptor.url, descriptor.body) if cache else ""

        if cache is not None:
            entry = cache.get(key)
            if entry is not None:
                return ResponseEnvelope(
                    status_code=int(entry.get("status_code", 200)),
                    body=entry.get("payload"),
                    cached=True,
                )

        logger.debug("Dispatching %s %s", descriptor.method.value, descriptor.url)
        response = self.transport.send(
            descriptor.url, descriptor.method, descriptor.body, self._user_agent
        )
        body = self._map_body(response, descriptor)

        if cache is not None and response.is_success:
            self._store(cache, key, body, descriptor, response.status_code)

        return ResponseEnvelope(
            status_code=response.status_code,
            headers=dict(response.headers) if state.header_mode else None,
            body=body,
        )

    def open_cache(self, settings: CacheSettings) -> Optional[ResponseCache]:
        """Return the cache for *settings*, or ``None`` when caching is off."""
        if not settings.enabled:
            return None
        from tumblrkit.config import get_cache_dir

        directory = settings.directory or get_cache_dir()
        return ResponseCache(directory, settings.ttl_seconds, clock=self._clock)

    def close(self) -> None:
        """Close a transport this resolver created. Injected transports are left open."""
        if self._owned_transport is not None:
            self._owned_transport.close()
            self._owned_transport = None
            self._transport = None

    def _store(
        self,
        cache: ResponseCache,
        key: str,
        body: Any,
        descriptor: RequestDescriptor,
        status_code: int,
    ) -> None:
        # write failures are logged; the envelope is still returned
        try:
            cache.put(key, body, url=descriptor.url, status_code=status_code)
        except (TypeError, ValueError, OSError) as exc:
            logger.warning("Could not cache response for %s: %s", descriptor.url, exc)

    def _map_body(self, response: TransportResponse, descriptor: RequestDescriptor) -> Any:
        if response.status_code == 200:
            return self._decoder.decode(response.body, descriptor.output)
        if response.status_code == 404:
            return NOT_FOUND
        return response.body.decode("utf-8", errors="replace")
