"""Authentication for ogrelay: identity brokers and the session manager.

- :class:`IdentityBroker` -- abstract source of one-time login tokens, with
  :class:`CredentialTokenBroker` and :class:`HttpTokenBroker` implementations.
- :func:`create_broker` -- picks the broker matching an account's config.
- :class:`SessionManager` -- logs in and validates the resulting session.

Typical usage::

    from ogrelay.auth import SessionManager, create_broker

    manager = SessionManager(account, create_broker(account), client, account.host())
    session = await manager.login()
"""

from ogrelay.auth.broker import (
    CredentialTokenBroker,
    HttpTokenBroker,
    IdentityBroker,
    create_broker,
)
from ogrelay.auth.session import SessionManager

__all__ = [
    "IdentityBroker",
    "CredentialTokenBroker",
    "HttpTokenBroker",
    "SessionManager",
    "create_broker",
]
