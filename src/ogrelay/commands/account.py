"""Account commands -- manage the game accounts ogrelay can log in as.

Typical workflow::

    ogrelay account add main --id 123456 --server 5 --language en \\
        --token-source env:OGAME_LOGIN_TOKEN
    ogrelay account list
    ogrelay account remove main
"""

from __future__ import annotations

from typing import Optional

import typer

from ogrelay.output import error, format_response, info, print_table, success


account_app = typer.Typer(no_args_is_help=True)


@account_app.command("add")
def account_add(
    name: str = typer.Argument(help="Local name for the account."),
    account_id: int = typer.Option(..., "--id", help="Game account identifier."),
    server: int = typer.Option(..., "--server", help="Universe number (5 for s5)."),
    language: str = typer.Option("en", "--language", help="Community language code."),
    token_source: str = typer.Option(
        "prompt", "--token-source", help="Login token source: env:VAR, file:/path, prompt."
    ),
    token_url: Optional[str] = typer.Option(
        None, "--token-url", help="Identity broker endpoint to request tokens from."
    ),
    token_auth_source: Optional[str] = typer.Option(
        None, "--token-auth-source", help="Bearer credential source for --token-url."
    ),
    default: bool = typer.Option(False, "--default", help="Make this the default account."),
) -> None:
    """Add (or overwrite) an account.

    Example::

        ogrelay account add main --id 123456 --server 5 --language en
    """
    from ogrelay.config import load_global_config, save_account, save_global_config
    from ogrelay.models import AccountConfig

    account = AccountConfig(
        name=name,
        id=account_id,
        server_number=server,
        server_language=language,
        token_source=token_source,
        token_url=token_url,
        token_auth_source=token_auth_source,
    )
    save_account(account)

    config = load_global_config()
    if default:
        config.default_account = name
        save_global_config(config)

    success(f'Account "{name}" saved ({account.host(config.remote_domain)}).')


@account_app.command("list")
def account_list() -> None:
    """List configured accounts."""
    from ogrelay.config import list_accounts, load_account, load_global_config

    names = list_accounts()
    if not names:
        info("No accounts configured.")
        return

    config = load_global_config()
    rows = []
    for name in names:
        account = load_account(name)
        marker = "*" if name == config.default_account else ""
        rows.append([marker, name, str(account.id), account.host(config.remote_domain)])
    print_table(["", "Name", "ID", "Server"], rows, title="Accounts")


@account_app.command("show")
def account_show(name: str = typer.Argument(help="Account name.")) -> None:
    """Show an account's configuration."""
    from ogrelay.config import load_account

    format_response(load_account(name).model_dump(mode="json"))


@account_app.command("remove")
def account_remove(
    ctx: typer.Context,
    name: str = typer.Argument(help="Account name."),
) -> None:
    """Remove an account. Asks for confirmation unless ``--force`` is active."""
    from ogrelay.config import account_exists, delete_account, load_global_config, save_global_config

    if not account_exists(name):
        error(f'Account "{name}" not found.')
        raise typer.Exit(code=2)

    force = ctx.obj.get("force", False) if ctx.obj else False
    if not force and not typer.confirm(f'Remove account "{name}"?'):
        info("Cancelled.")
        raise typer.Exit()

    delete_account(name)
    config = load_global_config()
    if config.default_account == name:
        config.default_account = None
        save_global_config(config)
    success(f'Account "{name}" removed.')
