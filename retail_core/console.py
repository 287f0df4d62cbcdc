"""Console output formatting."""

from retail_core.formatters import format_bp, format_units, format_usd, short_address
from retail_core.models import DepositPreview, TokenRow, UnwrapPreview


def print_token_table(rows: list[TokenRow]) -> None:
    """Print King's tokens with whitelisting, custody balance and USD price."""
    print("=" * 70)
    print("👑 KING TOKENS")
    print("=" * 70)
    if not rows:
        print("   (King tracks no tokens)")
    for row in rows:
        marker = "✅" if row.whitelisted else "⛔"
        print(f"{marker} {row.symbol:<8} {short_address(row.token)}")
        print(f"   💰 Held by King: {format_units(row.vault_balance, row.decimals, places=4)} {row.symbol}")
        print(f"   💵 Unit price:   {format_usd(row.unit_price_usd)}")
    print("")


def print_deposit_preview(
    symbols: list[str], amounts: list[str], preview: DepositPreview, *, fee_bps: int
) -> None:
    batch = ", ".join(f"{a} {s}" for s, a in zip(symbols, amounts))
    print("📥 DEPOSIT PREVIEW")
    print(f"   Batch: {batch}")
    print(f"   • King internal fee: {format_units(preview.king_internal_fee_amount, 18)} KING")
    print(f"   • Retail fee ({format_bp(fee_bps)}): {format_units(preview.retail_fee_amount, 18)} KING")
    print(f"   • You receive:       {format_units(preview.king_to_receive_net, 18)} KING")
    if preview.king_to_receive_net == 0:
        print("   ⚠️  Net amount is 0, this deposit would be rejected as too small")
    print("")


def print_unwrap_preview(
    shares: str, preview: UnwrapPreview, symbols: dict[str, str], decimals: dict[str, int], *, fee_bps: int
) -> None:
    print("📤 UNWRAP PREVIEW")
    print(f"   Shares in: {shares} KING")
    print(f"   • Retail fee ({format_bp(fee_bps)}): {format_units(preview.fee_amount, 18)} KING")
    print(f"   • King internal fee: {format_units(preview.king_fee_amount, 18)} KING")
    if not preview.tokens:
        print("   ⚠️  Nothing would be paid out")
    for token, amount in zip(preview.tokens, preview.amounts):
        symbol = symbols.get(token, short_address(token))
        print(f"   • {format_units(amount, decimals.get(token, 18))} {symbol}")
    print("")

