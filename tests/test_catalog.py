"""Tests for the endpoint catalog."""

from __future__ import annotations

import pytest

from ogrelay.catalog import DEFAULT_CATALOG, Endpoint, EndpointCatalog, game_page
from ogrelay.exceptions import ConfigError
from ogrelay.relay import is_served_path


class TestGamePage:
    def test_component_page(self) -> None:
        endpoint = game_page("overview", "ingame", "overview")
        assert endpoint == Endpoint("overview", "/game/index.php?page=ingame&component=overview")

    def test_direct_page(self) -> None:
        assert game_page("fetch_techs", "fetchTechs").path == "/game/index.php?page=fetchTechs"


class TestDefaultCatalog:
    @pytest.mark.parametrize(
        ("name", "path"),
        [
            ("lobby_login", "/game/lobbylogin.php"),
            ("overview", "/game/index.php?page=ingame&component=overview"),
            ("resource_settings", "/game/index.php?page=ingame&component=resourceSettings"),
            ("trader_overview", "/game/index.php?page=ingame&component=traderOverview"),
            ("fleet_dispatch", "/game/index.php?page=ingame&component=fleetdispatch"),
            ("fetch_resources", "/game/index.php?page=fetchResources"),
            ("fetch_techs", "/game/index.php?page=fetchTechs"),
        ],
    )
    def test_paths(self, name: str, path: str) -> None:
        assert DEFAULT_CATALOG.path(name) == path

    def test_every_entry_is_relayable(self) -> None:
        assert all(is_served_path(e.path) for e in DEFAULT_CATALOG.values())

    def test_unknown_name_lists_available(self) -> None:
        with pytest.raises(ConfigError, match="Available endpoints: .*overview"):
            DEFAULT_CATALOG.path("nope")

    def test_catalog_is_read_only(self) -> None:
        with pytest.raises(TypeError):
            DEFAULT_CATALOG._entries["overview"] = Endpoint("overview", "/x")  # type: ignore[index]

    def test_custom_catalog(self) -> None:
        catalog = EndpointCatalog([Endpoint("home", "/game/home")])
        assert len(catalog) == 1
        assert list(catalog) == ["home"]
        assert catalog["home"].path == "/game/home"
