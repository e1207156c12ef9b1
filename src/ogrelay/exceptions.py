"""Exception hierarchy for ogrelay.

All exceptions inherit from :class:`OgRelayError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`ogrelay.exit_codes`
and a ``kind`` naming the failure category. The CLI entry point catches
``OgRelayError`` and exits with the matching code; the relay server maps
``kind`` to an HTTP status.

Subclass hierarchy::

    OgRelayError (exit 1)
    +-- ConfigError                       (exit 1)
    +-- AuthError                         (exit 3)
    |   +-- LoginFailure                  (exit 3)
    +-- RelayError                        (exit 2)
    |   +-- UnsupportedPath
    |   +-- UnsupportedMethod
    |   +-- PayloadTooLarge
    +-- ExecutionError                    (exit 5)
    |   +-- SessionRenewalFailed          (exit 3)
    |   +-- ExpiredSessionRetryExhausted  (exit 3)
    |   +-- TransportFailure              (exit 6)
    +-- ClassSelectionFailed              (exit 5)
"""

from __future__ import annotations

import enum
from typing import Optional

from ogrelay.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_REMOTE_ERROR,
)


class FailureKind(str, enum.Enum):
    """Explicit failure categories surfaced to callers of the engine and relay."""

    GENERIC = "generic"
    CONFIG = "config"
    AUTH = "auth"
    LOGIN_FAILURE = "login_failure"
    UNSUPPORTED_PATH = "unsupported_path"
    UNSUPPORTED_METHOD = "unsupported_method"
    PAYLOAD_TOO_LARGE = "payload_too_large"
    SESSION_RENEWAL_FAILED = "session_renewal_failed"
    RETRY_EXHAUSTED = "expired_session_retry_exhausted"
    TRANSPORT_FAILURE = "transport_failure"
    CLASS_SELECTION_FAILED = "class_selection_failed"


class OgRelayError(Exception):
    """Base exception for all ogrelay errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE
    kind: FailureKind = FailureKind.GENERIC

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigError(OgRelayError):
    """Raised for configuration problems (missing accounts, invalid JSON, bad credential sources)."""

    kind = FailureKind.CONFIG


class AuthError(OgRelayError):
    """Raised when the identity broker cannot hand out a login token."""

    exit_code = EXIT_AUTH_FAILURE
    kind = FailureKind.AUTH


class LoginFailure(AuthError):
    """Raised when logging in to the game server fails.

    Carries the offending ``status_code`` when the server answered with
    anything but 200, or the offending ``host`` when the final response
    resolved somewhere other than the account's server.
    """

    kind = FailureKind.LOGIN_FAILURE

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        host: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.host = host


# --- Relay (client-side usage errors) ---


class RelayError(OgRelayError):
    """Raised when an inbound request is rejected before any network I/O."""

    exit_code = EXIT_INVALID_USAGE


class UnsupportedPath(RelayError):
    """Raised when an inbound path is not under one of the served prefixes."""

    kind = FailureKind.UNSUPPORTED_PATH

    def __init__(self, path: str):
        super().__init__(f"Unsupported path: {path}")
        self.path = path


class UnsupportedMethod(RelayError):
    """Raised in strict mode when an inbound method token is not recognised."""

    kind = FailureKind.UNSUPPORTED_METHOD

    def __init__(self, method: str):
        super().__init__(f"Unsupported method: {method!r}")
        self.method = method


class PayloadTooLarge(RelayError):
    """Raised when an inbound body exceeds the configured size cap."""

    kind = FailureKind.PAYLOAD_TOO_LARGE

    def __init__(self, limit: int):
        super().__init__(f"Request body exceeds {limit} bytes")
        self.limit = limit


# --- Execution ---


class ExecutionError(OgRelayError):
    """Base class for failures raised by the execution engine."""

    exit_code = EXIT_REMOTE_ERROR


class SessionRenewalFailed(ExecutionError):
    """Raised when the session expired mid-call and logging in again failed."""

    exit_code = EXIT_AUTH_FAILURE
    kind = FailureKind.SESSION_RENEWAL_FAILED

    def __init__(self, login_failure: LoginFailure):
        super().__init__(f"Session renewal failed: {login_failure}")
        self.login_failure = login_failure


class ExpiredSessionRetryExhausted(ExecutionError):
    """Raised when the session is reported expired again right after a renewal."""

    exit_code = EXIT_AUTH_FAILURE
    kind = FailureKind.RETRY_EXHAUSTED


class TransportFailure(ExecutionError):
    """Raised on network-level failures (timeout, DNS resolution, TLS, reset)."""

    exit_code = EXIT_CONNECTION_ERROR
    kind = FailureKind.TRANSPORT_FAILURE


class ClassSelectionFailed(OgRelayError):
    """Raised when the server does not confirm an initial player class selection."""

    exit_code = EXIT_REMOTE_ERROR
    kind = FailureKind.CLASS_SELECTION_FAILED
