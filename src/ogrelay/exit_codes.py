"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~ogrelay.exceptions.OgRelayError` subclass.
Shell wrappers can inspect the exit code to tell a rejected login apart from
a dead network without parsing stderr.

Example::

    $ ogrelay login
    $ echo $?
    3   # EXIT_AUTH_FAILURE -- the server refused the session
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The request was rejected locally (disallowed path, method, or body size)."""

EXIT_AUTH_FAILURE = 3
"""Login, session renewal, or the post-renewal retry failed."""

EXIT_REMOTE_ERROR = 5
"""The game server answered, but not with the expected outcome."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection reset)."""
