"""Serve command -- run the relay server in front of the active account."""

from __future__ import annotations

from typing import Optional

import typer

from ogrelay.commands import resolve_active


def serve_command(
    ctx: typer.Context,
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (default: relay.host)."),
    port: Optional[int] = typer.Option(None, "--port", help="Bind port (default: relay.port)."),
) -> None:
    """Serve the game through this machine, renewing the session as needed.

    Example::

        ogrelay serve --port 8080
        # then browse http://127.0.0.1:8080/game/index.php?page=ingame&component=overview
    """
    from ogrelay.client import GameClient
    from ogrelay.relay.server import create_app, run

    config, account = resolve_active(ctx)
    client = GameClient.from_config(config, account)
    app = create_app(client, max_body_bytes=config.relay.max_body_bytes)

    verbose = ctx.obj.get("verbose", False) if ctx.obj else False
    run(
        app,
        host=host or config.relay.host,
        port=port if port is not None else config.relay.port,
        log_level="debug" if verbose else "info",
    )
