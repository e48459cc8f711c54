"""Optional ``.env`` support for the CLI and host applications.

Purpose
-------
Let operators keep ``LOG_ROLLING_*`` settings in a ``.env`` file next to the
application. Loading is opt-in (``--use-dotenv`` or
``LOG_ROLLING_USE_DOTENV=1``) and never overrides variables that are already
set in the real environment.

Contents
--------
* :data:`DOTENV_ENV_VAR` – environment toggle.
* :func:`should_use_dotenv` – resolve CLI flag vs. environment toggle.
* :func:`enable_dotenv` – locate and load the nearest ``.env`` once.
"""

from __future__ import annotations

import threading
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

DOTENV_ENV_VAR = "LOG_ROLLING_USE_DOTENV"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}

_lock = threading.Lock()
_loaded_path: Path | None = None
_attempted = False


def should_use_dotenv(*, explicit: bool | None = None, env_value: str | None = None) -> bool:
    """Return whether ``.env`` loading is requested.

    An explicit CLI flag wins; otherwise the environment toggle decides.

    Examples
    --------
    >>> should_use_dotenv(explicit=False, env_value='1')
    False
    >>> should_use_dotenv(env_value='yes')
    True
    >>> should_use_dotenv()
    False
    """

    if explicit is not None:
        return explicit
    if env_value is None:
        return False
    normalized = env_value.strip().lower()
    if normalized in _TRUTHY:
        return True
    if normalized in _FALSY or not normalized:
        return False
    raise ValueError(f"{DOTENV_ENV_VAR} must be a boolean flag, got {env_value!r}")


def _locate(search_from: Path | None) -> Path | None:
    if search_from is None:
        found = find_dotenv(usecwd=True)
        return Path(found).resolve() if found else None
    for directory in (search_from.resolve(), *search_from.resolve().parents):
        candidate = directory / ".env"
        if candidate.is_file():
            return candidate
    return None


def enable_dotenv(*, search_from: Path | None = None) -> Path | None:
    """Load the nearest ``.env`` file into :data:`os.environ`.

    The search walks from ``search_from`` (default: the working directory) up
    to the filesystem root. Existing variables keep precedence. Repeated calls
    return the path loaded by the first call.
    """

    global _loaded_path, _attempted
    with _lock:
        if _attempted:
            return _loaded_path
        _attempted = True
        path = _locate(search_from)
        if path is not None:
            load_dotenv(path, override=False)
        _loaded_path = path
        return path


def _reset_dotenv_state_for_testing() -> None:
    global _loaded_path, _attempted
    with _lock:
        _loaded_path = None
        _attempted = False


__all__ = ["DOTENV_ENV_VAR", "enable_dotenv", "should_use_dotenv"]
