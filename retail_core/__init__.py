"""Retail deposit gateway in front of the King vault."""

from typing import NoReturn

from retail_core.core import RetailCore
from retail_core.models import TokenAmount

__version__ = "0.1.0"

__all__ = ["RetailCore", "TokenAmount", "__version__"]


def _entry_point() -> NoReturn:
    """Entry point for the retail-core script."""
    import sys

    from retail_core.cli import main

    raise SystemExit(main(sys.argv[1:]))


def _clear_cache_entry_point() -> NoReturn:
    """Entry point for clearing the cache."""
    from retail_core.cache import clear_cache

    clear_cache()
    raise SystemExit(0)
