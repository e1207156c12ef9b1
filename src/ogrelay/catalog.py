"""The endpoint catalog: logical page names mapped to game server paths.

The catalog is an immutable mapping built once at import time and injected
into :class:`~ogrelay.client.game_client.GameClient`. Nothing mutates it at
runtime; callers that need a different table construct their own
:class:`EndpointCatalog`.

In-game pages live under ``/game/index.php?page=ingame&component=<name>``;
AJAX data endpoints use ``/game/index.php?page=<name>`` directly.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterator, Mapping, Optional

from ogrelay.exceptions import ConfigError

GAME_INDEX = "/game/index.php"


@dataclass(frozen=True)
class Endpoint:
    """A single catalog entry.

    Attributes:
        name: Logical operation name (e.g. ``"overview"``).
        path: Path template, possibly including a fixed query string.
    """

    name: str
    path: str


def game_page(name: str, page: str, component: Optional[str] = None) -> Endpoint:
    """Build an endpoint for ``/game/index.php?page=<page>[&component=<component>]``."""
    path = f"{GAME_INDEX}?page={page}"
    if component is not None:
        path += f"&component={component}"
    return Endpoint(name, path)


class EndpointCatalog(Mapping[str, Endpoint]):
    """Read-only mapping from logical name to :class:`Endpoint`."""

    def __init__(self, endpoints: list[Endpoint]) -> None:
        self._entries = MappingProxyType({e.name: e for e in endpoints})

    def __getitem__(self, name: str) -> Endpoint:
        return self._entries[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def path(self, name: str) -> str:
        """Return the path for *name*.

        Raises:
            ConfigError: If *name* is not in the catalog.
        """
        try:
            return self._entries[name].path
        except KeyError:
            available = ", ".join(sorted(self._entries))
            raise ConfigError(
                f"Unknown endpoint '{name}'. Available endpoints: {available}"
            ) from None


DEFAULT_CATALOG = EndpointCatalog(
    [
        Endpoint("lobby_login", "/game/lobbylogin.php"),
        game_page("overview", "ingame", "overview"),
        game_page("rewards", "ingame", "rewards"),
        game_page("supplies", "ingame", "supplies"),
        game_page("resource_settings", "ingame", "resourceSettings"),
        game_page("facilities", "ingame", "facilities"),
        game_page("trader_overview", "ingame", "traderOverview"),
        game_page("research", "ingame", "research"),
        game_page("shipyard", "ingame", "shipyard"),
        game_page("defenses", "ingame", "defenses"),
        game_page("fleet_dispatch", "ingame", "fleetdispatch"),
        game_page("movement", "ingame", "movement"),
        game_page("galaxy", "ingame", "galaxy"),
        game_page("alliance", "ingame", "alliance"),
        game_page("premium", "ingame", "premium"),
        game_page("shop", "ingame", "shop"),
        game_page("fetch_resources", "fetchResources"),
        game_page("fetch_techs", "fetchTechs"),
        game_page("character_class_selection", "ingame", "characterclassselection"),
    ]
)
