"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for ogrelay:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.ogrelay/`` on macOS and Windows. See :func:`get_config_dir`,
  :func:`get_data_dir`, :func:`get_accounts_dir`.
* **Global config** -- A single :class:`~ogrelay.models.GlobalConfig`
  JSON file storing defaults (remote domain, request and relay settings).
* **Accounts** -- One JSON file per game account, each deserialised into an
  :class:`~ogrelay.models.AccountConfig`.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, project-local config, and global config into the
  final effective configuration.
* **Credential resolution** -- :func:`resolve_credential` reads secrets
  from env vars, files, or interactive prompts.

Nothing about the live session or the response cache is ever written here;
both live in memory only.
"""

from __future__ import annotations

import getpass
import json
import os
import platform
import sys
import tempfile
from pathlib import Path
from typing import Any, Optional

from ogrelay.exceptions import ConfigError
from ogrelay.models import AccountConfig, GlobalConfig

_APP_NAME = "ogrelay"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "ogrelay.json"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/ogrelay/`` (default ``~/.config/ogrelay/``).
    On macOS/Windows: ``~/.ogrelay/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/ogrelay/`` (default ``~/.local/share/ogrelay/``).
    On macOS/Windows: ``~/.ogrelay/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_accounts_dir() -> Path:
    """Return the accounts directory (``<config_dir>/accounts/``), creating it if necessary."""
    path = get_config_dir() / "accounts"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file lives in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is removed and the original exception re-raised.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


def _read_json(path: Path, what: str) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid {what} at {path}: {exc}") from exc


# --- Global config ---


def _global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the XDG config directory.

    Returns:
        The deserialised :class:`~ogrelay.models.GlobalConfig`, or a default
        instance if the file does not exist.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    data = _read_json(path, "global config")
    try:
        return GlobalConfig.model_validate(data)
    except ValueError as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk."""
    data = config.model_dump(mode="json")
    _atomic_write(_global_config_path(), json.dumps(data, indent=2) + "\n")


# --- Accounts ---


def _account_path(name: str) -> Path:
    return get_accounts_dir() / f"{name}.json"


def list_accounts() -> list[str]:
    """Return all account names found in the accounts directory, sorted alphabetically."""
    return sorted(p.stem for p in get_accounts_dir().glob("*.json") if p.is_file())


def load_account(name: str) -> AccountConfig:
    """Load and validate an account from disk.

    Raises:
        ConfigError: If the account file does not exist, contains invalid
            JSON, or fails Pydantic validation.
    """
    path = _account_path(name)
    if not path.is_file():
        raise ConfigError(f"Account '{name}' not found at {path}")
    data = _read_json(path, f"account '{name}'")
    try:
        return AccountConfig.model_validate(data)
    except ValueError as exc:
        raise ConfigError(f"Invalid account '{name}' at {path}: {exc}") from exc


def save_account(account: AccountConfig) -> None:
    """Persist an account atomically; the file name is derived from ``account.name``."""
    data = account.model_dump(mode="json")
    _atomic_write(_account_path(account.name), json.dumps(data, indent=2) + "\n")


def delete_account(name: str) -> None:
    """Delete an account's JSON file.

    Raises:
        ConfigError: If the account does not exist.
    """
    path = _account_path(name)
    if not path.is_file():
        raise ConfigError(f"Account '{name}' not found at {path}")
    path.unlink()


def account_exists(name: str) -> bool:
    return _account_path(name).is_file()


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./ogrelay.json``.

    Project-local config sits between global config and environment variables
    in the precedence chain. It typically sets ``default_account``.

    Returns:
        The parsed JSON as a dict, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but contains invalid JSON.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    return _read_json(path, "project config")


# --- Precedence resolution ---


def resolve_config(
    cli_account: Optional[str] = None,
    cli_format: Optional[str] = None,
) -> tuple[GlobalConfig, Optional[AccountConfig]]:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_account``, ``cli_format``)
        2. Environment variables (``OGRELAY_ACCOUNT``, ``OGRELAY_REMOTE_DOMAIN``)
        3. Project config (``./ogrelay.json``)
        4. User config (``~/.config/ogrelay/config.json``)
        5. Defaults, including auto-selecting a lone account

    Returns:
        A tuple of ``(global_config, active_account_or_None)``.
    """
    global_cfg = load_global_config()

    resolved_name: Optional[str] = global_cfg.default_account

    project = load_project_config()
    if project is not None and project.get("default_account") is not None:
        resolved_name = project["default_account"]

    env_account = os.environ.get("OGRELAY_ACCOUNT")
    if env_account:
        resolved_name = env_account

    if cli_account is not None:
        resolved_name = cli_account

    if resolved_name is None and global_cfg.auto_select_single_account:
        accounts = list_accounts()
        if len(accounts) == 1:
            resolved_name = accounts[0]

    account: Optional[AccountConfig] = None
    if resolved_name is not None:
        account = load_account(resolved_name)

    env_domain = os.environ.get("OGRELAY_REMOTE_DOMAIN")
    if env_domain:
        global_cfg.remote_domain = env_domain

    if cli_format is not None:
        global_cfg.output.format = cli_format

    return global_cfg, account


# --- Credential source resolution ---


def resolve_credential(source: str) -> str:
    """Resolve a credential from its source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
        - ``"file:/path/to/file"`` -- reads file content, stripped of whitespace
        - ``"prompt"`` -- prompts user interactively (requires a TTY)

    Raises:
        ConfigError: If the source can't be resolved.
    """
    if source.startswith("env:"):
        var_name = source[4:]
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigError(
                f"Environment variable '{var_name}' is not set (source: {source})"
            )
        return value

    if source.startswith("file:"):
        path = Path(source[5:]).expanduser()
        if not path.is_file():
            raise ConfigError(f"Credential file not found: {path} (source: {source})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read credential file {path}: {exc}") from exc

    if source == "prompt":
        if not sys.stdin.isatty():
            raise ConfigError(
                "Cannot prompt for credentials: stdin is not a TTY (source: prompt)"
            )
        return getpass.getpass("Enter login token: ")

    raise ConfigError(f"Unknown credential source format: {source}")
