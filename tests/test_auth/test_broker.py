"""Tests for identity brokers."""

from __future__ import annotations

import json

import httpx
import pytest

from ogrelay.auth.broker import CredentialTokenBroker, HttpTokenBroker, create_broker
from ogrelay.exceptions import AuthError, ConfigError
from ogrelay.models import AccountConfig


def _account(**overrides) -> AccountConfig:
    data = {
        "name": "main",
        "id": 123456,
        "server_number": 5,
        "server_language": "en",
        "token_source": "env:OGRELAY_TEST_TOKEN",
    }
    data.update(overrides)
    return AccountConfig(**data)


class TestCredentialTokenBroker:
    @pytest.mark.asyncio
    async def test_reads_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OGRELAY_TEST_TOKEN", "  abc123\n")
        assert await CredentialTokenBroker().get_server_token(_account()) == "abc123"

    @pytest.mark.asyncio
    async def test_reads_file(self, tmp_path) -> None:
        token_file = tmp_path / "token"
        token_file.write_text("from-file\n")
        broker = CredentialTokenBroker()
        token = await broker.get_server_token(_account(token_source=f"file:{token_file}"))
        assert token == "from-file"

    @pytest.mark.asyncio
    async def test_missing_env_is_config_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("OGRELAY_TEST_TOKEN", raising=False)
        with pytest.raises(ConfigError):
            await CredentialTokenBroker().get_server_token(_account())

    @pytest.mark.asyncio
    async def test_empty_token(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OGRELAY_TEST_TOKEN", "   ")
        with pytest.raises(AuthError, match="Empty login token"):
            await CredentialTokenBroker().get_server_token(_account())


class TestHttpTokenBroker:
    @pytest.mark.asyncio
    async def test_posts_account_and_server(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BROKER_KEY", "secret")
        captured: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return httpx.Response(200, json={"token": "tok-xyz"})

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        broker = HttpTokenBroker(client=client)
        account = _account(
            token_url="https://broker.example.com/token", token_auth_source="env:BROKER_KEY"
        )

        async with client:
            token = await broker.get_server_token(account)

        assert token == "tok-xyz"
        request = captured[0]
        assert request.method == "POST"
        assert request.headers["Authorization"] == "Bearer secret"
        assert json.loads(request.content) == {
            "id": 123456,
            "server": {"language": "en", "number": 5},
        }

    @pytest.mark.asyncio
    async def test_custom_response_field(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"loginToken": "t"})

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        account = _account(token_url="https://broker.example.com/token", token_response_field="loginToken")
        async with client:
            assert await HttpTokenBroker(client=client).get_server_token(account) == "t"

    @pytest.mark.asyncio
    async def test_http_error(self) -> None:
        client = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(401))
        )
        account = _account(token_url="https://broker.example.com/token")
        async with client:
            with pytest.raises(AuthError, match="HTTP 401"):
                await HttpTokenBroker(client=client).get_server_token(account)

    @pytest.mark.asyncio
    async def test_missing_token_field(self) -> None:
        client = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json={}))
        )
        account = _account(token_url="https://broker.example.com/token")
        async with client:
            with pytest.raises(AuthError, match="no 'token' field"):
                await HttpTokenBroker(client=client).get_server_token(account)

    @pytest.mark.asyncio
    async def test_non_json_body(self) -> None:
        client = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(200, text="<html>"))
        )
        account = _account(token_url="https://broker.example.com/token")
        async with client:
            with pytest.raises(AuthError, match="did not return JSON"):
                await HttpTokenBroker(client=client).get_server_token(account)

    @pytest.mark.asyncio
    async def test_requires_token_url(self) -> None:
        broker = HttpTokenBroker()
        try:
            with pytest.raises(AuthError, match="token_url"):
                await broker.get_server_token(_account())
        finally:
            await broker.aclose()


class TestCreateBroker:
    def test_credential_broker_by_default(self) -> None:
        assert isinstance(create_broker(_account()), CredentialTokenBroker)

    @pytest.mark.asyncio
    async def test_http_broker_when_url_set(self) -> None:
        broker = create_broker(_account(token_url="https://broker.example.com/token"))
        assert isinstance(broker, HttpTokenBroker)
        await broker.aclose()
