"""Formatting and conversion utilities."""

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation

from retail_core.constants import TOTAL_BASIS_POINTS, USD_DECIMALS


def as_int(value, *, default: int = 0) -> int:
    """Convert value to int, handling various types."""
    if value is None:
        return default
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        v = value.strip()
        if v.startswith("0x"):
            return int(v, 16)
        return int(v)
    return int(value)


def format_bp(bp: int) -> str:
    """Format basis points as percentage."""
    return f"{(Decimal(bp) * Decimal(100) / Decimal(TOTAL_BASIS_POINTS)):.2f}%"


def parse_units(value: str, decimals: int) -> int:
    """Parse a human amount ("1.5") into base units; rejects extra precision."""
    try:
        d = Decimal(value.strip())
    except InvalidOperation as ex:
        raise ValueError(f"invalid amount: {value!r}") from ex
    if d < 0:
        raise ValueError(f"amount must be >= 0: {value!r}")
    scaled = d * (Decimal(10) ** decimals)
    if scaled != scaled.to_integral_value():
        raise ValueError(f"{value!r} has more than {decimals} decimals")
    return int(scaled)


def format_units(value: int, decimals: int, *, places: int = 6) -> str:
    """Format base units as a trimmed decimal string."""
    d = Decimal(value) / (Decimal(10) ** decimals)
    s = f"{d:.{places}f}".rstrip("0").rstrip(".")
    return s or "0"


def format_usd(value_18: int | None) -> str:
    """Format an 18-decimal USD amount."""
    if value_18 is None:
        return "n/a"
    d = Decimal(value_18) / (Decimal(10) ** USD_DECIMALS)
    return f"${d:,.2f}"


def format_timestamp(ts: int) -> str:
    return datetime.fromtimestamp(ts, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")


def short_address(address: str) -> str:
    if len(address) <= 16:
        return address
    return f"{address[:10]}...{address[-6:]}"
