"""Session manager -- trades a one-time broker token for a game server session.

The game server keeps the session in cookies, which the shared
:class:`httpx.AsyncClient` jar retains between calls. What this module
tracks is *which* identity that jar belongs to, as a
:class:`~ogrelay.models.Session`, and whether logging in actually landed on
the account's server.

A login is accepted only when the server answers 200 **and** the final
host, after redirects, is the expected per-account host. A rejected token
typically redirects back to the lobby, which is why the host check matters
as much as the status check.

Retry policy does not live here: a failed login raises
:class:`~ogrelay.exceptions.LoginFailure` immediately and the
:class:`~ogrelay.client.engine.ExecutionEngine` decides what to do.
"""

from __future__ import annotations

from typing import Optional

import httpx

from ogrelay.auth.broker import IdentityBroker
from ogrelay.catalog import DEFAULT_CATALOG
from ogrelay.exceptions import AuthError, LoginFailure
from ogrelay.models import AccountConfig, Session
from ogrelay.output import debug, info

LOGIN_PATH = DEFAULT_CATALOG.path("lobby_login")


class SessionManager:
    """Owns the authenticated identity for one account.

    Args:
        account: The account to log in as.
        broker: Source of one-time login tokens.
        client: The HTTP client whose cookie jar carries the session. Its
            ``base_url`` must point at the account's server.
        expected_host: The host every successful login must resolve to.
        login_path: Login endpoint path.
    """

    def __init__(
        self,
        account: AccountConfig,
        broker: IdentityBroker,
        client: httpx.AsyncClient,
        expected_host: str,
        login_path: str = LOGIN_PATH,
    ) -> None:
        self._account = account
        self._broker = broker
        self._client = client
        self._expected_host = expected_host
        self._login_path = login_path
        self._session: Optional[Session] = None

    @property
    def session(self) -> Optional[Session]:
        """The current session, or ``None`` before the first successful login."""
        return self._session

    @property
    def expected_host(self) -> str:
        return self._expected_host

    async def login(self) -> Session:
        """Log in and replace the held session.

        Returns:
            The new :class:`~ogrelay.models.Session`.

        Raises:
            LoginFailure: If no token could be obtained, the transport call
                failed, the status was not 200, or the final host differs
                from :attr:`expected_host`. The previous session is kept
                untouched in that case.
        """
        try:
            token = await self._broker.get_server_token(self._account)
        except AuthError as exc:
            raise LoginFailure(f"Unable to obtain a login token: {exc}") from exc

        debug(f"Logging in account {self._account.id} on {self._expected_host}")
        try:
            response = await self._client.get(
                self._login_path,
                params={"id": str(self._account.id), "token": token},
            )
        except httpx.HTTPError as exc:
            raise LoginFailure(f"Unable to login to server: {exc}") from exc

        if response.status_code != 200:
            raise LoginFailure(
                f"Unable to login to server: invalid status code {response.status_code}",
                status_code=response.status_code,
            )

        host = response.url.host
        if host != self._expected_host:
            raise LoginFailure(
                f"Unable to login to server: invalid host {host}",
                status_code=response.status_code,
                host=host,
            )

        self._session = Session(host=host, account_id=self._account.id, token=token)
        info(f"Logged in as account {self._account.id} on {host}")
        return self._session
