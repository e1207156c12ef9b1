"""Canonical data models shared across all ogrelay modules.

This is the single source of truth for data shapes in the project. The models
fall into two groups:

**Configuration models** -- Pydantic models serialised as JSON in the user's
config directory:
    :class:`AccountConfig`, :class:`RequestConfig`, :class:`RelayConfig`,
    :class:`OutputConfig`, and :class:`GlobalConfig`.

**Runtime models** -- produced and consumed while requests are in flight:
    :class:`Session`, :class:`PlayerClass`, :class:`InboundRequest`, and
    :class:`OutboundRequest`.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_REMOTE_DOMAIN = "ogame.gameforge.com"
"""Domain under which every game server host lives."""

READ_METHODS = frozenset({"GET"})
"""Methods whose responses may be served from and written to the cache."""

SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})
"""Methods that never carry a relayed body."""


def server_host(server_number: int, server_language: str, domain: str = DEFAULT_REMOTE_DOMAIN) -> str:
    """Return the game server host for a server number and language.

    Example::

        >>> server_host(5, "en")
        's5-en.ogame.gameforge.com'
    """
    return f"s{server_number}-{server_language}.{domain}"


# --- Configuration ---


class AccountConfig(BaseModel):
    """A game account stored as JSON under the ``accounts/`` config directory.

    Declares which server the account plays on and where the identity broker
    gets its one-time login token from. Extra fields are preserved in
    ``model_extra``.

    Example::

        AccountConfig(
            name="main",
            id=123456,
            server_number=5,
            server_language="en",
            token_source="env:OGAME_LOGIN_TOKEN",
        )
    """

    model_config = ConfigDict(extra="allow")

    name: str
    id: int = Field(description="Game account identifier")
    server_number: int = Field(description="Universe number, e.g. 5 for s5")
    server_language: str = Field(description="Community language code, e.g. 'en'")
    token_source: str = Field(
        default="prompt",
        description="Login token source: env:VAR, file:/path, prompt",
    )
    token_url: Optional[str] = Field(
        default=None,
        description="Identity broker endpoint; when set, tokens are requested over HTTP",
    )
    token_auth_source: Optional[str] = Field(
        default=None,
        description="Credential source for the bearer token sent to token_url",
    )
    token_response_field: str = Field(
        default="token",
        description="Field in the broker's JSON response holding the token",
    )

    def host(self, domain: str = DEFAULT_REMOTE_DOMAIN) -> str:
        """Return the expected game server host for this account."""
        return server_host(self.server_number, self.server_language, domain)


class RequestConfig(BaseModel):
    """Outbound HTTP settings applied to every call against the game server."""

    timeout: float = Field(default=30.0, description="Per-request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")


class RelayConfig(BaseModel):
    """Settings for the inbound relay server and request translation."""

    host: str = Field(default="127.0.0.1", description="Interface to listen on")
    port: int = Field(default=8080, description="Port to listen on")
    strict_methods: bool = Field(
        default=False,
        description="Reject unrecognised methods instead of relaying them as GET",
    )
    max_body_bytes: int = Field(
        default=1024 * 1024, description="Largest inbound body relayed, in bytes"
    )


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/ogrelay/config.json``.

    Fields here have the lowest precedence and can be overridden by project
    config, environment variables, or CLI flags. See
    :func:`~ogrelay.config.resolve_config` for the full precedence chain.
    """

    default_account: Optional[str] = None
    auto_select_single_account: bool = True
    remote_domain: str = DEFAULT_REMOTE_DOMAIN
    request: RequestConfig = Field(default_factory=RequestConfig)
    relay: RelayConfig = Field(default_factory=RelayConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


# --- Runtime ---


class Session(BaseModel):
    """The live authenticated identity and the host it is bound to.

    Exactly one session is held per client instance; a renewal replaces it
    wholesale.
    """

    host: str
    account_id: int
    token: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class PlayerClass(int, enum.Enum):
    """Character classes a player can pick once per universe."""

    NO_CLASS = 0
    COLLECTOR = 1
    GENERAL = 2
    DISCOVERER = 3


@dataclass
class InboundRequest:
    """A request received from the relayed caller (typically a browser).

    Attributes:
        path: Path and query string exactly as received
            (e.g. ``/game/index.php?page=ingame&component=overview``).
        method: The raw method token. Not validated until translation.
        headers: Inbound request headers.
        cookies: Inbound cookies, forwarded unfiltered.
        body: The request body, if one was read.
        content_type: The declared ``Content-Type`` of ``body``.
    """

    path: str
    method: str = "GET"
    headers: dict[str, str] = field(default_factory=dict)
    cookies: dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None
    content_type: Optional[str] = None


@dataclass
class OutboundRequest:
    """A request the execution engine sends to the game server.

    ``path`` may already carry a query string; ``params`` are merged on top
    of it when the URL is built.
    """

    method: str
    path: str
    params: dict[str, Any] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    cookies: dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None
    content_type: Optional[str] = None

    @property
    def is_read(self) -> bool:
        """Whether the request is idempotent and side-effect free."""
        return self.method.upper() in READ_METHODS
