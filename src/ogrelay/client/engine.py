"""Execution engine -- cache, transport, expiry detection and one renewal retry.

:class:`ExecutionEngine` is the only component that talks to the game
server after login. Every call goes through :meth:`ExecutionEngine.execute`,
which runs this protocol:

1. **Cache check** -- only when the caller opted in and the request is a
   read: a fresh hit returns immediately, with no transport call.
2. **Transport call** -- against the account's server host.
3. **Expiry detection** -- the response ended on a different host *and*
   has status 401 or 403 (an expired session is bounced to the lobby).
4. **Renewal** -- log in again; failure raises
   :class:`~ogrelay.exceptions.SessionRenewalFailed`.
5. **Single retry** -- steps 2-3 once more. A second expiry raises
   :class:`~ogrelay.exceptions.ExpiredSessionRetryExhausted`; renewal is
   bounded to one attempt per call.
6. **Cache update** -- a 2xx response to a cacheable read overwrites the
   entry for its key.

The engine owns the response cache and the session. Renewal is serialised
by a lock plus an epoch counter: a call remembers the epoch it sent under,
and renews only if nobody else has since, so a burst of concurrent 403s
costs a single login.
"""

from __future__ import annotations

import asyncio
from typing import Optional

import httpx

from ogrelay.auth.broker import IdentityBroker
from ogrelay.auth.session import SessionManager
from ogrelay.cache import ResponseCache
from ogrelay.exceptions import (
    ExpiredSessionRetryExhausted,
    LoginFailure,
    SessionRenewalFailed,
    TransportFailure,
)
from ogrelay.models import (
    DEFAULT_REMOTE_DOMAIN,
    AccountConfig,
    OutboundRequest,
    RequestConfig,
    Session,
)
from ogrelay.output import debug

AUTH_FAILURE_STATUSES = frozenset({401, 403})


def cache_key(url: httpx.URL) -> str:
    """Return the normalized path-plus-query used to index cached responses."""
    return url.raw_path.decode("ascii")


class ExecutionEngine:
    """Runs outbound requests against one account's game server.

    Must be used as an async context manager, which opens (and later closes)
    the underlying :class:`httpx.AsyncClient`.

    Args:
        account: The account whose server is targeted.
        broker: Identity broker used for every (re)login.
        domain: Domain under which game server hosts live.
        request_config: Timeout and SSL settings.
        cache: Response cache; a fresh 60 second cache when omitted.
        transport: Optional httpx transport, e.g. :class:`httpx.MockTransport`.

    Example::

        async with ExecutionEngine(account, broker) as engine:
            await engine.login()
            response = await engine.execute(
                OutboundRequest("GET", "/game/index.php?page=ingame&component=overview"),
                use_cache=True,
            )
    """

    def __init__(
        self,
        account: AccountConfig,
        broker: IdentityBroker,
        domain: str = DEFAULT_REMOTE_DOMAIN,
        request_config: Optional[RequestConfig] = None,
        cache: Optional[ResponseCache[httpx.Response]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._account = account
        self._broker = broker
        self._host = account.host(domain)
        self._request_config = request_config or RequestConfig()
        self._cache: ResponseCache[httpx.Response] = cache if cache is not None else ResponseCache()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._sessions: Optional[SessionManager] = None
        self._renew_lock = asyncio.Lock()
        self._epoch = 0

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> ExecutionEngine:
        self._client = httpx.AsyncClient(
            base_url=f"https://{self._host}",
            timeout=self._request_config.timeout,
            verify=self._request_config.verify_ssl,
            follow_redirects=True,
            transport=self._transport,
        )
        self._sessions = SessionManager(self._account, self._broker, self._client, self._host)
        return self

    async def __aexit__(self, *args: object) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None
        await self._broker.aclose()

    # ------------------------------------------------------------------ #
    # Properties
    # ------------------------------------------------------------------ #

    @property
    def host(self) -> str:
        """The account's game server host."""
        return self._host

    @property
    def cache(self) -> ResponseCache[httpx.Response]:
        return self._cache

    @property
    def session(self) -> Optional[Session]:
        return self._sessions.session if self._sessions else None

    @property
    def epoch(self) -> int:
        """Number of successful logins performed by this engine."""
        return self._epoch

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    async def login(self) -> Session:
        """Log in explicitly.

        Raises:
            LoginFailure: If the login is rejected.
        """
        sessions = self._require_sessions()
        async with self._renew_lock:
            session = await sessions.login()
            self._epoch += 1
        return session

    async def execute(self, request: OutboundRequest, use_cache: bool = False) -> httpx.Response:
        """Execute *request*, renewing the session at most once.

        Args:
            request: The request to send.
            use_cache: Serve from and store into the response cache. Ignored
                for anything but reads.

        Returns:
            The final :class:`httpx.Response` (possibly from the retry, or
            from the cache).

        Raises:
            SessionRenewalFailed: The session expired and login failed.
            ExpiredSessionRetryExhausted: The session expired again right
                after a successful renewal.
            TransportFailure: A network-level error occurred.
        """
        http_request = self._build_request(request)
        key = cache_key(http_request.url)
        cacheable = use_cache and request.is_read

        if cacheable:
            cached = self._cache.lookup(key)
            if cached is not None:
                debug(f"Cache hit: {key}")
                return cached

        epoch = self._epoch
        response = await self._send(http_request)

        if self._is_expired(response):
            debug(f"Session expired on {request.method} {key} (HTTP {response.status_code})")
            await self._renew(epoch)
            response = await self._send(self._build_request(request))
            if self._is_expired(response):
                raise ExpiredSessionRetryExhausted(
                    f"Session expired again after renewal on {request.method} {key} "
                    f"(HTTP {response.status_code} from {response.url.host})"
                )

        if cacheable and response.is_success:
            self._cache.store(key, response)

        return response

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _require_client(self) -> httpx.AsyncClient:
        assert self._client is not None, "Engine not initialised -- use as async context manager"
        return self._client

    def _require_sessions(self) -> SessionManager:
        assert self._sessions is not None, "Engine not initialised -- use as async context manager"
        return self._sessions

    def _build_request(self, request: OutboundRequest) -> httpx.Request:
        client = self._require_client()
        headers = dict(request.headers)
        if request.content_type:
            headers["Content-Type"] = request.content_type

        http_request = client.build_request(
            request.method,
            request.path,
            params=request.params or None,
            headers=headers,
            content=request.body,
        )
        if request.cookies:
            self._attach_cookies(http_request, request.cookies)
        return http_request

    def _attach_cookies(self, http_request: httpx.Request, cookies: dict[str, str]) -> None:
        """Send relayed *cookies* together with the session cookies from the jar.

        httpx only fills in the jar's cookies while a request has no
        ``Cookie`` header, so both sets are rendered into one header here.
        The jar is read afresh on every call, which puts a renewed session
        on the retry. On a name clash the session cookie wins.
        """
        jar = httpx.Cookies()
        for name, value in cookies.items():
            jar.set(name, value, domain=http_request.url.host)
        jar.update(self._require_client().cookies)
        http_request.headers.pop("Cookie", None)
        jar.set_cookie_header(http_request)

    async def _send(self, http_request: httpx.Request) -> httpx.Response:
        try:
            return await self._require_client().send(http_request)
        except httpx.HTTPError as exc:
            raise TransportFailure(
                f"{http_request.method} {http_request.url} failed: {exc}"
            ) from exc

    def _is_expired(self, response: httpx.Response) -> bool:
        return response.url.host != self._host and response.status_code in AUTH_FAILURE_STATUSES

    async def _renew(self, observed_epoch: int) -> None:
        """Log in again unless another call already did since *observed_epoch*."""
        sessions = self._require_sessions()
        async with self._renew_lock:
            if self._epoch != observed_epoch:
                debug("Session already renewed by a concurrent call")
                return
            try:
                await sessions.login()
            except LoginFailure as exc:
                raise SessionRenewalFailed(exc) from exc
            self._epoch += 1
