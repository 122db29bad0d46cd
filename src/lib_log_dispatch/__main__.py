"""Module entry point enabling ``python -m lib_log_dispatch``."""

from __future__ import annotations

from .cli import main


if __name__ == "__main__":
    raise SystemExit(main())
