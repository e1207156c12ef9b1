"""Request relay -- turns an inbound browser request into an outbound one.

:class:`RequestRelay` is the gatekeeper between whatever received the
browser's request (see :mod:`ogrelay.relay.server`) and the execution
engine. It enforces, in order:

1. **Path allow-list** -- the path-and-query must start with one of
   :data:`SERVED_PREFIXES`, otherwise :class:`~ogrelay.exceptions.UnsupportedPath`
   is raised before any network I/O. This keeps the relay from being used as
   an open proxy.
2. **Method translation** -- the method token is matched case-sensitively
   against :data:`SUPPORTED_METHODS`. Unknown tokens become ``GET``, or raise
   :class:`~ogrelay.exceptions.UnsupportedMethod` when ``strict_methods`` is
   on.
3. **Body** -- for state-changing methods with a declared content type the
   body is attached verbatim, up to ``max_body_bytes``
   (:class:`~ogrelay.exceptions.PayloadTooLarge` beyond that).
4. **Headers** -- only names in :data:`FORWARD_HEADERS` are copied.
5. **Cookies** -- all copied, unfiltered.
"""

from __future__ import annotations

from typing import AsyncIterable, Optional

from ogrelay.exceptions import PayloadTooLarge, UnsupportedMethod, UnsupportedPath
from ogrelay.models import SAFE_METHODS, InboundRequest, OutboundRequest, RelayConfig

SERVED_PREFIXES: tuple[str, ...] = (
    "/game/",
    "/cdn/",
    "/assets/",
    "/headerCache/",
    "/favicon.ico",
)

FORWARD_HEADERS = frozenset({"x-requested-with"})

SUPPORTED_METHODS = frozenset(
    {"GET", "POST", "PUT", "DELETE", "HEAD", "OPTIONS", "PATCH", "MERGE", "COPY"}
)

DEFAULT_METHOD = "GET"


def is_served_path(path: str) -> bool:
    """Whether *path* (path and query) falls under one of the served prefixes."""
    return path.startswith(SERVED_PREFIXES)


async def read_capped(stream: AsyncIterable[bytes], limit: int) -> bytes:
    """Read an async byte stream in full, failing as soon as it exceeds *limit*.

    Raises:
        PayloadTooLarge: If more than *limit* bytes arrive.
    """
    chunks: list[bytes] = []
    size = 0
    async for chunk in stream:
        size += len(chunk)
        if size > limit:
            raise PayloadTooLarge(limit)
        chunks.append(chunk)
    return b"".join(chunks)


class RequestRelay:
    """Validates and translates :class:`~ogrelay.models.InboundRequest` values.

    Args:
        config: Relay settings (``strict_methods``, ``max_body_bytes``).
    """

    def __init__(self, config: Optional[RelayConfig] = None) -> None:
        self._config = config or RelayConfig()

    @property
    def max_body_bytes(self) -> int:
        return self._config.max_body_bytes

    def translate(self, inbound: InboundRequest) -> OutboundRequest:
        """Translate *inbound* into an :class:`~ogrelay.models.OutboundRequest`.

        The path and its query string are passed through unchanged.

        Raises:
            UnsupportedPath: The path is not allow-listed.
            UnsupportedMethod: Strict mode is on and the method is unknown.
            PayloadTooLarge: The body exceeds ``max_body_bytes``.
        """
        if not is_served_path(inbound.path):
            raise UnsupportedPath(inbound.path)

        method = self.translate_method(inbound.method)
        outbound = OutboundRequest(method=method, path=inbound.path)

        if method not in SAFE_METHODS and inbound.content_type and inbound.body is not None:
            if len(inbound.body) > self._config.max_body_bytes:
                raise PayloadTooLarge(self._config.max_body_bytes)
            outbound.body = inbound.body
            outbound.content_type = inbound.content_type

        outbound.cookies = dict(inbound.cookies)
        outbound.headers = {
            name: value
            for name, value in inbound.headers.items()
            if name.lower() in FORWARD_HEADERS and value is not None
        }
        return outbound

    def translate_method(self, method: str) -> str:
        """Map a method token onto a supported verb.

        Matching is case-sensitive: ``"post"`` is not ``"POST"``.
        """
        if method in SUPPORTED_METHODS:
            return method
        if self._config.strict_methods:
            raise UnsupportedMethod(method)
        return DEFAULT_METHOD
