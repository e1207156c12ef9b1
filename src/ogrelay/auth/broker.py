"""Identity brokers -- where one-time server login tokens come from.

The game server never sees a password. Instead, an identity broker (the game
lobby) issues a one-time token scoped to an account, and the
:class:`~ogrelay.auth.session.SessionManager` trades it for a session. This
module defines the broker interface and the two brokers ogrelay ships with:

- :class:`CredentialTokenBroker` -- reads the token from a credential source
  (``env:VAR``, ``file:/path``, ``prompt``). Useful when another tool fetches
  tokens, and in tests.
- :class:`HttpTokenBroker` -- requests a token from an HTTP endpoint with an
  optional bearer credential.

Use :func:`create_broker` to pick the right one for an account.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx

from ogrelay.config import resolve_credential
from ogrelay.exceptions import AuthError
from ogrelay.models import AccountConfig


class IdentityBroker(ABC):
    """Abstract source of one-time login tokens."""

    @abstractmethod
    async def get_server_token(self, account: AccountConfig) -> str:
        """Return a fresh one-time token for *account*'s game server.

        Raises:
            AuthError: If no token can be obtained.
        """
        ...

    async def aclose(self) -> None:
        """Release any resources held by the broker."""


class CredentialTokenBroker(IdentityBroker):
    """Resolve the login token from the account's ``token_source``."""

    async def get_server_token(self, account: AccountConfig) -> str:
        token = resolve_credential(account.token_source).strip()
        if not token:
            raise AuthError(f"Empty login token for account '{account.name}'")
        return token


class HttpTokenBroker(IdentityBroker):
    """Request a login token from a broker endpoint over HTTP.

    POSTs ``{"id": ..., "server": {"language": ..., "number": ...}}`` to the
    account's ``token_url``. If ``token_auth_source`` is configured, its
    resolved value is sent as a ``Bearer`` token. The token is read from
    ``token_response_field`` in the JSON response.

    Args:
        client: Optional client to reuse; one is created (and closed by
            :meth:`aclose`) when omitted.
        timeout: Request timeout in seconds for a self-created client.
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None, timeout: float = 30.0) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def get_server_token(self, account: AccountConfig) -> str:
        if not account.token_url:
            raise AuthError(f"Account '{account.name}' has no 'token_url' configured")

        headers: dict[str, str] = {"Accept": "application/json"}
        if account.token_auth_source:
            headers["Authorization"] = f"Bearer {resolve_credential(account.token_auth_source)}"

        body: dict[str, Any] = {
            "id": account.id,
            "server": {"language": account.server_language, "number": account.server_number},
        }

        try:
            response = await self._client.post(account.token_url, json=body, headers=headers)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            raise AuthError(
                f"Token request failed with HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise AuthError(f"Token request failed: {exc}") from exc
        except ValueError as exc:
            raise AuthError("Token endpoint did not return JSON") from exc

        token = payload.get(account.token_response_field) if isinstance(payload, dict) else None
        if not token:
            raise AuthError(
                f"Token response has no '{account.token_response_field}' field"
            )
        return str(token)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


def create_broker(account: AccountConfig) -> IdentityBroker:
    """Return the broker matching *account*'s configuration."""
    if account.token_url:
        return HttpTokenBroker()
    return CredentialTokenBroker()
