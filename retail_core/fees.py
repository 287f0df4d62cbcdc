"""Basis-point fee arithmetic shared by the deposit, unwrap and preview paths."""

from retail_core.constants import TOTAL_BASIS_POINTS


def compute_fee(amount: int, fee_bps: int) -> int:
    """Fee in the same unit as `amount`, rounded down."""
    if amount < 0:
        raise ValueError("amount must be >= 0")
    if not 0 <= fee_bps <= TOTAL_BASIS_POINTS:
        raise ValueError(f"fee_bps must be within [0, {TOTAL_BASIS_POINTS}]")
    return amount * fee_bps // TOTAL_BASIS_POINTS


def split_fee(amount: int, fee_bps: int) -> tuple[int, int]:
    """Returns (net, fee) where net + fee == amount."""
    fee = compute_fee(amount, fee_bps)
    return amount - fee, fee


def min_amount_with_nonzero_fee(fee_bps: int) -> int:
    """Smallest amount whose fee does not round down to 0 (0 if the fee is disabled)."""
    if fee_bps <= 0:
        return 0
    return -(-TOTAL_BASIS_POINTS // fee_bps)
