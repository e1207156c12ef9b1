"""Shared test fixtures for ogrelay.

Provides an isolated config environment, output state management, and a
scripted in-memory game server (served through :class:`httpx.MockTransport`)
that the engine, game client, relay server and CLI tests all talk to.
"""

from __future__ import annotations

from typing import Optional

import httpx
import pytest

from ogrelay.auth.broker import IdentityBroker
from ogrelay.exceptions import AuthError
from ogrelay.models import AccountConfig, GlobalConfig, RequestConfig
from ogrelay.output import OutputFormat, OutputManager, reset_output, set_output


GAME_DOMAIN = "example.com"
GAME_HOST = "s5-en.example.com"
LOBBY_HOST = "lobby.example.com"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Fake game server
# ---------------------------------------------------------------------------


SESSION_COOKIE = "PHPSESSID"


class FakeGameServer:
    """Scripted game server behind an :class:`httpx.MockTransport`.

    * ``/game/lobbylogin.php`` -- answers ``login_status``; a 200 starts a
      new session and sets it in the :data:`SESSION_COOKIE` cookie. When
      ``login_lands_on`` is set it redirects there instead.
    * Any other path on :data:`GAME_HOST` -- 200 with a JSON body echoing
      the path and a call counter when the request carries the current
      session cookie; otherwise a 302 to the lobby, which answers 403.
    """

    def __init__(self) -> None:
        self.logins = 0
        self.login_tokens: list[str] = []
        self.page_requests: list[httpx.Request] = []
        self.session_id: Optional[str] = None
        self.always_expired = False
        self.login_status = 200
        self.login_lands_on: Optional[str] = None
        self.page_status = 200
        self.fail_transport = False

    def expire(self) -> None:
        self.session_id = None

    @property
    def page_calls(self) -> int:
        return len(self.page_requests)

    def has_session(self, request: httpx.Request) -> bool:
        return self.session_id is not None and request_cookies(request).get(
            SESSION_COOKIE
        ) == self.session_id

    def handler(self, request: httpx.Request) -> httpx.Response:
        if self.fail_transport:
            raise httpx.ConnectError("connection refused", request=request)

        host = request.url.host
        if host == LOBBY_HOST:
            return httpx.Response(403, text="lobby")
        if host != GAME_HOST:
            return httpx.Response(200, text="elsewhere")

        if request.url.path == "/game/lobbylogin.php":
            self.logins += 1
            self.login_tokens.append(request.url.params.get("token", ""))
            if self.login_lands_on:
                return httpx.Response(
                    302, headers={"Location": f"https://{self.login_lands_on}/game/index.php"}
                )
            if self.login_status != 200:
                return httpx.Response(self.login_status, text="denied")
            self.session_id = f"s{self.logins}"
            return httpx.Response(
                200,
                text="welcome",
                headers={"Set-Cookie": f"{SESSION_COOKIE}={self.session_id}; Path=/"},
            )

        self.page_requests.append(request)
        if self.always_expired or not self.has_session(request):
            return httpx.Response(302, headers={"Location": f"https://{LOBBY_HOST}/"})
        return httpx.Response(
            self.page_status,
            headers={"Cache-Control": "no-store", "X-Powered-By": "PHP/8.1"},
            json={
                "method": request.method,
                "path": request.url.raw_path.decode("ascii"),
                "call": self.page_calls,
            },
        )

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


def request_cookies(request: httpx.Request) -> dict[str, str]:
    """Parse the ``Cookie`` header of an outgoing request."""
    cookies = {}
    for pair in request.headers.get("cookie", "").split(";"):
        name, sep, value = pair.strip().partition("=")
        if sep:
            cookies[name] = value
    return cookies


class StaticBroker(IdentityBroker):
    """Hands out ``token-1``, ``token-2``, ... or fails once ``fail`` is set."""

    def __init__(self) -> None:
        self.issued = 0
        self.fail = False
        self.closed = False

    async def get_server_token(self, account: AccountConfig) -> str:
        if self.fail:
            raise AuthError("broker unavailable")
        self.issued += 1
        return f"token-{self.issued}"

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def game_server() -> FakeGameServer:
    return FakeGameServer()


@pytest.fixture
def broker() -> StaticBroker:
    return StaticBroker()


@pytest.fixture
def account() -> AccountConfig:
    return AccountConfig(
        name="main",
        id=123456,
        server_number=5,
        server_language="en",
        token_source="env:OGRELAY_TEST_TOKEN",
    )


@pytest.fixture
def global_config() -> GlobalConfig:
    return GlobalConfig(
        remote_domain=GAME_DOMAIN,
        request=RequestConfig(timeout=5, verify_ssl=False),
    )


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path, monkeypatch: pytest.MonkeyPatch):
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path,
    clears all OGRELAY_* environment variables and changes the working
    directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("ogrelay.config._is_xdg_platform", lambda: True)

    for var in ["OGRELAY_ACCOUNT", "OGRELAY_REMOTE_DOMAIN"]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager for the test."""
    output = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
