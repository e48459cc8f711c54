"""Allow ``python -m lib_log_rolling`` to run the Click CLI."""

from __future__ import annotations

from .cli import main

if __name__ == "__main__":
    raise SystemExit(main())
