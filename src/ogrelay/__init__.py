"""ogrelay -- session-aware client and request relay for an OGame game server.

This package talks to a single, session-authenticated game server on behalf
of a local caller. It logs in through an identity broker, keeps a short-lived
response cache, relays browser requests through a path allow-list, and
transparently renews the session when the server rejects it.

Typical workflow::

    ogrelay account add main --id 123456 --server 5 --language en
    ogrelay login                 # validate the account can log in
    ogrelay fetch overview        # fetch a page through the engine
    ogrelay serve                 # relay a browser through the session

Modules:
    app: Typer application factory and CLI entry point.
    models: Pydantic models shared across the entire package.
    config: XDG-aware configuration and account management.
    catalog: The immutable endpoint catalog.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
