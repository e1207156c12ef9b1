"""Tests for SessionManager login and host validation."""

from __future__ import annotations

import httpx
import pytest

from ogrelay.auth.session import LOGIN_PATH, SessionManager
from ogrelay.exceptions import LoginFailure

from conftest import GAME_HOST


@pytest.fixture(autouse=True)
def _quiet(quiet_output):
    yield


def _manager(account, broker, game_server, expected_host: str = GAME_HOST):
    client = httpx.AsyncClient(
        base_url=f"https://{GAME_HOST}",
        follow_redirects=True,
        transport=game_server.transport(),
    )
    return SessionManager(account, broker, client, expected_host), client


class TestLogin:
    def test_login_path(self) -> None:
        assert LOGIN_PATH == "/game/lobbylogin.php"

    @pytest.mark.asyncio
    async def test_success_sends_id_and_token(self, account, broker, game_server) -> None:
        manager, client = _manager(account, broker, game_server)
        async with client:
            session = await manager.login()

        assert session.host == GAME_HOST
        assert session.account_id == account.id
        assert session.token == "token-1"
        assert manager.session is session
        assert game_server.login_tokens == ["token-1"]

    @pytest.mark.asyncio
    async def test_relogin_replaces_session(self, account, broker, game_server) -> None:
        manager, client = _manager(account, broker, game_server)
        async with client:
            first = await manager.login()
            second = await manager.login()
        assert manager.session is second
        assert second.token != first.token

    @pytest.mark.asyncio
    async def test_rejects_other_host_even_with_200(self, account, broker, game_server) -> None:
        """A 200 that ended up on a look-alike host is not a valid login."""
        game_server.login_lands_on = "s5-en.otherhost.example"
        manager, client = _manager(account, broker, game_server)
        async with client:
            with pytest.raises(LoginFailure) as exc_info:
                await manager.login()

        assert exc_info.value.host == "s5-en.otherhost.example"
        assert manager.session is None

    @pytest.mark.asyncio
    async def test_rejects_non_200(self, account, broker, game_server) -> None:
        game_server.login_status = 500
        manager, client = _manager(account, broker, game_server)
        async with client:
            with pytest.raises(LoginFailure, match="invalid status code 500") as exc_info:
                await manager.login()
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_failed_relogin_keeps_previous_session(
        self, account, broker, game_server
    ) -> None:
        manager, client = _manager(account, broker, game_server)
        async with client:
            first = await manager.login()
            game_server.login_status = 403
            with pytest.raises(LoginFailure):
                await manager.login()
        assert manager.session is first

    @pytest.mark.asyncio
    async def test_broker_failure_becomes_login_failure(
        self, account, broker, game_server
    ) -> None:
        broker.fail = True
        manager, client = _manager(account, broker, game_server)
        async with client:
            with pytest.raises(LoginFailure, match="login token"):
                await manager.login()
        assert game_server.logins == 0

    @pytest.mark.asyncio
    async def test_transport_error_becomes_login_failure(
        self, account, broker, game_server
    ) -> None:
        game_server.fail_transport = True
        manager, client = _manager(account, broker, game_server)
        async with client:
            with pytest.raises(LoginFailure):
                await manager.login()
