"""Game client -- typed accessors built on the endpoint catalog.

:class:`GameClient` is what callers hold. It builds requests from the
:mod:`~ogrelay.catalog`, runs them through the
:class:`~ogrelay.client.engine.ExecutionEngine`, and hands the raw body to an
*extractor* -- the external component that turns pages into domain objects.
Without an extractor, accessors return the decoded body (JSON or HTML text).

Reads default to ``use_cache=True``: many fields (player name, server speeds,
celestials, staff, attack state) come out of the same overview page, so a
dashboard fetching them in parallel costs one round-trip per minute.

Example::

    async with GameClient.from_config(global_config, account) as client:
        overview = await client.overview()
        techs = await client.techs(celestial_id=33620001)
"""

from __future__ import annotations

from typing import Any, Callable, Optional

import httpx

from ogrelay.auth.broker import IdentityBroker, create_broker
from ogrelay.catalog import DEFAULT_CATALOG, EndpointCatalog
from ogrelay.client.engine import ExecutionEngine
from ogrelay.client.response import extract_response_data
from ogrelay.exceptions import ClassSelectionFailed
from ogrelay.models import (
    AccountConfig,
    GlobalConfig,
    InboundRequest,
    OutboundRequest,
    PlayerClass,
    Session,
)
from ogrelay.relay.relay import RequestRelay

Extractor = Callable[[str, httpx.Response], Any]
"""Field extractor: receives the endpoint name and the raw response."""


class GameClient:
    """High-level client for one game account.

    Args:
        engine: The execution engine (opened and closed with this client).
        catalog: Endpoint catalog used to build requests.
        relay: Relay used by :meth:`relay`; a default one when omitted.
        extractor: Optional field extractor.
        login_on_enter: Log in when entering the async context.
    """

    def __init__(
        self,
        engine: ExecutionEngine,
        catalog: EndpointCatalog = DEFAULT_CATALOG,
        relay: Optional[RequestRelay] = None,
        extractor: Optional[Extractor] = None,
        login_on_enter: bool = True,
    ) -> None:
        self._engine = engine
        self._catalog = catalog
        self._relay = relay or RequestRelay()
        self._extractor = extractor
        self._login_on_enter = login_on_enter

    @classmethod
    def from_config(
        cls,
        config: GlobalConfig,
        account: AccountConfig,
        broker: Optional[IdentityBroker] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        **kwargs: Any,
    ) -> GameClient:
        """Build a client (and its engine and relay) from configuration."""
        engine = ExecutionEngine(
            account,
            broker or create_broker(account),
            domain=config.remote_domain,
            request_config=config.request,
            transport=transport,
        )
        return cls(engine, relay=RequestRelay(config.relay), **kwargs)

    async def __aenter__(self) -> GameClient:
        await self._engine.__aenter__()
        if self._login_on_enter:
            try:
                await self._engine.login()
            except BaseException:
                await self._engine.__aexit__(None, None, None)
                raise
        return self

    async def __aexit__(self, *args: object) -> None:
        await self._engine.__aexit__(*args)

    @property
    def engine(self) -> ExecutionEngine:
        return self._engine

    @property
    def catalog(self) -> EndpointCatalog:
        return self._catalog

    async def login(self) -> Session:
        return await self._engine.login()

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #

    async def fetch(
        self,
        name: str,
        params: Optional[dict[str, Any]] = None,
        use_cache: bool = True,
    ) -> httpx.Response:
        """GET the catalog endpoint *name* and return the raw response."""
        request = OutboundRequest("GET", self._catalog.path(name), params=dict(params or {}))
        return await self._engine.execute(request, use_cache=use_cache)

    async def page(self, name: str, use_cache: bool = True, **params: Any) -> Any:
        """Fetch the catalog endpoint *name* and run it through the extractor."""
        response = await self.fetch(name, params, use_cache=use_cache)
        return self._extract(name, response)

    async def overview(self, use_cache: bool = True) -> Any:
        return await self.page("overview", use_cache=use_cache)

    async def techs(self, celestial_id: Optional[int] = None, use_cache: bool = True) -> Any:
        """Buildings, research, ships and defences of a celestial, as JSON."""
        params: dict[str, Any] = {"ajax": "1"}
        if celestial_id is not None:
            params["cp"] = str(celestial_id)
        return await self.page("fetch_techs", use_cache=use_cache, **params)

    async def resources(self, celestial_id: int, use_cache: bool = True) -> Any:
        """Resource amounts and production of a celestial, as JSON."""
        return await self.page(
            "fetch_resources", use_cache=use_cache, ajax="1", asJson="1", cp=str(celestial_id)
        )

    async def resource_settings(self, celestial_id: int, use_cache: bool = True) -> Any:
        return await self.page("resource_settings", use_cache=use_cache, cp=str(celestial_id))

    async def fleet_slots(self, use_cache: bool = True) -> Any:
        return await self.page("fleet_dispatch", use_cache=use_cache)

    # ------------------------------------------------------------------ #
    # Writes
    # ------------------------------------------------------------------ #

    async def select_initial_player_class(self, player_class: PlayerClass) -> None:
        """Pick the account's character class.

        Raises:
            ClassSelectionFailed: Unless the server answers 200 with a JSON
                ``status`` of ``"success"``.
        """
        path = self._catalog.path("character_class_selection")
        request = OutboundRequest(
            "POST",
            path,
            params={
                "ajax": "1",
                "asJson": "1",
                "characterClassId": str(int(player_class)),
                "action": "selectClass",
            },
            headers={
                "Referer": f"https://{self._engine.host}{path}",
                "X-Requested-With": "XMLHttpRequest",
            },
        )
        response = await self._engine.execute(request)
        if response.status_code != 200:
            raise ClassSelectionFailed(
                f"Failed to select player class {player_class.name}: HTTP {response.status_code}"
            )
        try:
            payload = response.json()
        except ValueError:
            payload = None
        if not isinstance(payload, dict) or payload.get("status") != "success":
            raise ClassSelectionFailed(f"Failed to select player class {player_class.name}")

    # ------------------------------------------------------------------ #
    # Relay
    # ------------------------------------------------------------------ #

    async def relay(self, inbound: InboundRequest) -> httpx.Response:
        """Translate a browser request and execute it, bypassing the cache."""
        outbound = self._relay.translate(inbound)
        return await self._engine.execute(outbound, use_cache=False)

    def _extract(self, name: str, response: httpx.Response) -> Any:
        if self._extractor is not None:
            return self._extractor(name, response)
        return extract_response_data(response)
