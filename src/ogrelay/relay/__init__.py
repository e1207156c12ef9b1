"""Inbound request relay for ogrelay.

:class:`RequestRelay` validates and translates browser requests (path
allow-list, method translation, header and cookie forwarding, body cap).
The HTTP server that feeds it lives in :mod:`ogrelay.relay.server` and is
imported on demand, since it pulls in FastAPI.
"""

from ogrelay.relay.relay import (
    FORWARD_HEADERS,
    SERVED_PREFIXES,
    SUPPORTED_METHODS,
    RequestRelay,
    is_served_path,
    read_capped,
)

__all__ = [
    "FORWARD_HEADERS",
    "SERVED_PREFIXES",
    "SUPPORTED_METHODS",
    "RequestRelay",
    "is_served_path",
    "read_capped",
]
