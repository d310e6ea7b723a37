"""Client layer for tumblrkit.

Components, leaf-first:

* :mod:`~tumblrkit.client.composer` -- turns state + action + arguments
  into a :class:`~tumblrkit.models.RequestDescriptor` (pure).
* :mod:`~tumblrkit.client.transport` -- the httpx-backed transport.
* :mod:`~tumblrkit.client.decoder` -- xml/json response decoding.
* :mod:`~tumblrkit.client.resolver` -- test mode, cache, dispatch, status
  mapping and header attachment.
* :mod:`~tumblrkit.client.builder` -- the :class:`Tumblr` view users chain
  attribute access on.

Example::

    from tumblrkit.client import Tumblr

    client = Tumblr("example.tumblr.com").output("json")
    client.posts.read(tag="cats").body
"""

from tumblrkit.client.builder import RESERVED_NAMES, Tumblr
from tumblrkit.client.composer import compose
from tumblrkit.client.decoder import ResponseDecoder
from tumblrkit.client.resolver import NOT_FOUND, ResponseResolver
from tumblrkit.client.transport import HttpxTransport

__all__ = [
    "Tumblr",
    "RESERVED_NAMES",
    "compose",
    "ResponseDecoder",
    "ResponseResolver",
    "NOT_FOUND",
    "HttpxTransport",
]
