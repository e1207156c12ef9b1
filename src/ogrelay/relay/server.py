"""Relay server -- the inbound HTTP surface in front of the game session.

A browser pointed at this server sees the game as if it were talking to the
game server directly, while every request actually goes out through the
account's session (and is renewed transparently when that session expires).

:func:`create_app` builds a FastAPI application whose catch-all route
accepts *any* method token, so the relay's own method translation decides
what an unknown verb becomes. Failures are answered locally:

==============================  ======
Failure                         Status
==============================  ======
UnsupportedPath                 404
UnsupportedMethod               405
PayloadTooLarge                 413
SessionRenewalFailed            502
ExpiredSessionRetryExhausted    502
TransportFailure                504
==============================  ======

Of the game server's response headers only Content-Type and the
caching and download headers in :data:`PASSTHROUGH_HEADERS` reach the
browser. Set-Cookie in particular stays with the session.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from fastapi import FastAPI
from fastapi.responses import JSONResponse, Response
from starlette.requests import Request
from starlette.types import Receive, Scope, Send

from ogrelay import __version__
from ogrelay.client.game_client import GameClient
from ogrelay.exceptions import FailureKind, OgRelayError, PayloadTooLarge
from ogrelay.models import SAFE_METHODS, InboundRequest
from ogrelay.output import debug, info, warning
from ogrelay.relay.relay import read_capped

HEALTH_PATH = "/_relay/health"

FAILURE_STATUS: dict[FailureKind, int] = {
    FailureKind.UNSUPPORTED_PATH: 404,
    FailureKind.UNSUPPORTED_METHOD: 405,
    FailureKind.PAYLOAD_TOO_LARGE: 413,
    FailureKind.SESSION_RENEWAL_FAILED: 502,
    FailureKind.RETRY_EXHAUSTED: 502,
    FailureKind.TRANSPORT_FAILURE: 504,
}

PASSTHROUGH_HEADERS = frozenset(
    {
        "cache-control",
        "content-disposition",
        "content-language",
        "etag",
        "expires",
        "last-modified",
    }
)


def _request_path(request: Request) -> str:
    raw_path: bytes = request.scope.get("raw_path") or request.url.path.encode()
    path = raw_path.decode("latin-1")
    query = request.scope.get("query_string", b"").decode("latin-1")
    return f"{path}?{query}" if query else path


async def read_inbound(request: Request, max_body_bytes: int) -> InboundRequest:
    """Build an :class:`~ogrelay.models.InboundRequest` from a Starlette request.

    The body is only read for state-changing methods that declare a content
    type, through a capped reader.

    Raises:
        PayloadTooLarge: The declared or actual body size exceeds
            *max_body_bytes*.
    """
    content_type = request.headers.get("content-type")
    body = None
    if request.method not in SAFE_METHODS and content_type:
        declared = request.headers.get("content-length")
        if declared is not None and declared.isdigit() and int(declared) > max_body_bytes:
            raise PayloadTooLarge(max_body_bytes)
        body = await read_capped(request.stream(), max_body_bytes)

    return InboundRequest(
        path=_request_path(request),
        method=request.method,
        headers=dict(request.headers),
        cookies=dict(request.cookies),
        body=body,
        content_type=content_type,
    )


def error_response(exc: OgRelayError) -> JSONResponse:
    """Map a failure onto a local JSON error response."""
    status = FAILURE_STATUS.get(exc.kind, 500)
    return JSONResponse({"error": exc.kind.value, "detail": str(exc)}, status_code=status)


class RelayEndpoint:
    """Raw ASGI endpoint, so the route matches every method token."""

    def __init__(self, client: GameClient, max_body_bytes: int) -> None:
        self._client = client
        self._max_body_bytes = max_body_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope, receive)
        response = await self.handle(request)
        await response(scope, receive, send)

    async def handle(self, request: Request) -> Response:
        try:
            inbound = await read_inbound(request, self._max_body_bytes)
            remote = await self._client.relay(inbound)
        except OgRelayError as exc:
            warning(f"{request.method} {request.url.path}: {exc}")
            return error_response(exc)

        debug(f"{inbound.method} {inbound.path} -> HTTP {remote.status_code}")
        return Response(
            content=remote.content,
            status_code=remote.status_code,
            headers={k: v for k, v in remote.headers.items() if k in PASSTHROUGH_HEADERS},
            media_type=remote.headers.get("content-type"),
        )


def create_app(client: GameClient, max_body_bytes: int = 1024 * 1024) -> FastAPI:
    """Create the relay application around *client*.

    The client is entered (opened, and logged in if configured so) when the
    application starts and closed when it stops.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        async with client:
            info(f"Relaying to {client.engine.host}")
            yield

    app = FastAPI(title="ogrelay", version=__version__, lifespan=lifespan)

    @app.get(HEALTH_PATH)
    async def health() -> dict[str, Any]:
        session = client.engine.session
        return {
            "status": "ok",
            "host": client.engine.host,
            "logged_in": session is not None,
            "cache": client.engine.cache.stats(),
        }

    app.add_route("/{path:path}", RelayEndpoint(client, max_body_bytes))
    return app


def run(app: FastAPI, host: str, port: int, log_level: str = "info") -> None:
    """Serve *app* with uvicorn until interrupted."""
    import uvicorn

    uvicorn.run(app, host=host, port=port, log_level=log_level)
