"""Built-in CLI sub-commands for ogrelay.

* :mod:`~ogrelay.commands.account` -- add, list, show and remove accounts.
* :mod:`~ogrelay.commands.config` -- view and modify global settings.
* :mod:`~ogrelay.commands.session` -- ``login``, ``fetch`` and ``endpoints``.
* :mod:`~ogrelay.commands.serve` -- run the relay server.

Multi-command groups export a :class:`typer.Typer` sub-application; single
commands export a plain callback registered on the root app.
"""

from __future__ import annotations

from typing import Optional

import typer

from ogrelay.exceptions import ConfigError
from ogrelay.models import AccountConfig, GlobalConfig


def resolve_active(ctx: typer.Context) -> tuple[GlobalConfig, AccountConfig]:
    """Resolve the global config and the active account for a command.

    Raises:
        ConfigError: If no account could be resolved.
    """
    from ogrelay.config import resolve_config

    cli_account: Optional[str] = ctx.obj.get("account") if ctx.obj else None
    config, account = resolve_config(cli_account=cli_account)
    if account is None:
        raise ConfigError(
            "No account selected. Add one with 'ogrelay account add' "
            "or pass --account."
        )
    return config, account
