"""Session commands -- log in, fetch game pages, list the endpoint catalog.

These run a single short-lived :class:`~ogrelay.client.GameClient` per
invocation::

    ogrelay login
    ogrelay fetch overview
    ogrelay fetch fetch_resources --cp 33620001 --param ajax=1 --param asJson=1
    ogrelay endpoints
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional

import typer

from ogrelay.commands import resolve_active
from ogrelay.output import error, print_table, success


def _parse_params(values: list[str]) -> dict[str, Any]:
    params: dict[str, Any] = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key:
            error(f"Invalid --param '{item}', expected KEY=VALUE.")
            raise typer.Exit(code=2)
        params[key] = value
    return params


def login_command(ctx: typer.Context) -> None:
    """Log in to the active account's game server and report the session."""
    from ogrelay.client import GameClient

    config, account = resolve_active(ctx)

    async def _run() -> None:
        async with GameClient.from_config(config, account, login_on_enter=False) as client:
            session = await client.login()
            success(f"Session established on {session.host} for account {session.account_id}.")

    asyncio.run(_run())


def fetch_command(
    ctx: typer.Context,
    page: str = typer.Argument(help="Catalog endpoint name (see 'ogrelay endpoints')."),
    cp: Optional[int] = typer.Option(None, "--cp", help="Celestial (planet or moon) id."),
    param: list[str] = typer.Option(
        [], "--param", "-P", help="Extra query parameter as KEY=VALUE (repeatable)."
    ),
    no_cache: bool = typer.Option(False, "--no-cache", help="Bypass the response cache."),
) -> None:
    """Fetch a game page through the session and print its body.

    Example::

        ogrelay fetch overview
        ogrelay --json fetch fetch_techs --cp 33620001 -P ajax=1
    """
    from ogrelay.catalog import DEFAULT_CATALOG
    from ogrelay.client import GameClient
    from ogrelay.client.response import format_api_response

    config, account = resolve_active(ctx)
    params = _parse_params(param)
    if cp is not None:
        params["cp"] = str(cp)

    # Unknown names fail before any login traffic.
    DEFAULT_CATALOG.path(page)

    async def _run() -> None:
        async with GameClient.from_config(config, account) as client:
            response = await client.fetch(page, params, use_cache=not no_cache)
            format_api_response(response)

    asyncio.run(_run())


def endpoints_command() -> None:
    """List the named endpoints of the catalog."""
    from ogrelay.catalog import DEFAULT_CATALOG

    rows = [[endpoint.name, endpoint.path] for endpoint in DEFAULT_CATALOG.values()]
    print_table(["Name", "Path"], rows, title="Endpoints")
