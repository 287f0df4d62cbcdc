"""CLI: read-only view of a King deployment through the retail gateway's fee model."""

import argparse
import os
import sys

from retail_core.console import print_deposit_preview, print_token_table, print_unwrap_preview
from retail_core.constants import KING_MAINNET, MAX_FEE_BPS
from retail_core.contracts import resolve_king_contracts
from retail_core.errors import CollaboratorCallError, InputValidationError
from retail_core.formatters import format_timestamp, parse_units
from retail_core.previews import preview_deposit, preview_unwrap

# Internal defaults (not exposed as CLI flags)
DEFAULT_TIMEOUT = 30


def _fee_bps(value: str) -> int:
    bps = int(value)
    if not 0 <= bps <= MAX_FEE_BPS:
        raise argparse.ArgumentTypeError(f"fee must be within [0, {MAX_FEE_BPS}] bps")
    return bps


def _token_amount(value: str) -> tuple[str, str]:
    token, sep, amount = value.partition(":")
    if not sep or not token or not amount:
        raise argparse.ArgumentTypeError("expected TOKEN:AMOUNT, e.g. 0xC02a...Cc2:1.5")
    return token.strip(), amount.strip()


def parse_args(argv: list[str]) -> argparse.Namespace:
    """Parse command-line arguments."""
    p = argparse.ArgumentParser(description="Preview retail deposits and unwraps against a live King vault.")
    p.add_argument(
        "--rpc-url",
        default=None,
        help="Execution-layer RPC URL. Required if ETH_RPC_URL environment variable is not set.",
    )
    p.add_argument(
        "--king",
        default=KING_MAINNET,
        help="King vault address. Default: mainnet King.",
    )
    p.add_argument("--deposit-fee-bps", type=_fee_bps, default=0, help="Retail deposit fee in bps (default 0).")
    p.add_argument("--unwrap-fee-bps", type=_fee_bps, default=0, help="Retail unwrap fee in bps (default 0).")
    p.add_argument(
        "--preview-deposit",
        type=_token_amount,
        action="append",
        default=[],
        metavar="TOKEN:AMOUNT",
        help="Add a token to the deposit preview batch (whole-token units). Repeatable.",
    )
    p.add_argument(
        "--preview-unwrap",
        default=None,
        metavar="SHARES",
        help="Preview unwrapping this many KING shares (whole units).",
    )
    p.add_argument(
        "--no-cache",
        action="store_true",
        help="Disable caching of token metadata for this run.",
    )
    return p.parse_args(argv)


def main(argv: list[str]) -> int:
    """Main entry point."""
    args = parse_args(argv)

    use_cache = not args.no_cache

    try:
        from web3 import Web3
    except ImportError as ex:  # pragma: no cover
        print("Missing dependency. Run: uv sync", file=sys.stderr)
        raise SystemExit(2) from ex

    from retail_core.onchain import Web3King, Web3TokenMetadata, collect_token_rows

    rpc_url = args.rpc_url or os.getenv("ETH_RPC_URL")
    if not rpc_url:
        print(
            "Error: RPC URL is required. Provide --rpc-url or set ETH_RPC_URL environment variable.",
            file=sys.stderr,
        )
        return 2

    w3 = Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": DEFAULT_TIMEOUT}))
    if not w3.is_connected():
        print(f"Error: failed to connect to RPC at {rpc_url}", file=sys.stderr)
        return 2

    try:
        contracts = resolve_king_contracts(w3, args.king)
        print(f"ℹ️ Resolved price provider from King ({args.king[:10]}...)", file=sys.stderr)
    except Exception as ex:  # pylint: disable=broad-exception-caught
        print(f"Error: failed to resolve contracts from King ({args.king}): {ex}", file=sys.stderr)
        return 2

    block = w3.eth.get_block("latest")
    king = Web3King(w3, contracts.king, block_identifier=block["number"])
    oracle = king.price_provider()
    metadata = Web3TokenMetadata(w3, use_cache=use_cache)

    print(f"\n🕐 Block {block['number']}  •  {format_timestamp(int(block['timestamp']))}")
    print(f"   King:           {contracts.king}")
    print(f"   Price provider: {contracts.price_provider}\n")

    rows = collect_token_rows(king, oracle, metadata)
    print_token_table(rows)

    status = 0

    if args.preview_deposit:
        tokens = [w3.to_checksum_address(t) for t, _ in args.preview_deposit]
        try:
            amounts = [parse_units(a, metadata.decimals(t)) for t, (_, a) in zip(tokens, args.preview_deposit)]
            preview = preview_deposit(king, tokens, amounts, args.deposit_fee_bps)
        except (ValueError, InputValidationError, CollaboratorCallError) as ex:
            print(f"❌ Deposit preview failed: {ex}", file=sys.stderr)
            status = 1
        else:
            symbols = [metadata.symbol(t) for t in tokens]
            print_deposit_preview(
                symbols, [a for _, a in args.preview_deposit], preview, fee_bps=args.deposit_fee_bps
            )

    if args.preview_unwrap is not None:
        try:
            shares = parse_units(args.preview_unwrap, 18)
            preview = preview_unwrap(king, shares, args.unwrap_fee_bps)
        except (ValueError, CollaboratorCallError) as ex:
            print(f"❌ Unwrap preview failed: {ex}", file=sys.stderr)
            status = 1
        else:
            symbols = {r.token: r.symbol for r in rows}
            decimals = {r.token: r.decimals for r in rows}
            print_unwrap_preview(args.preview_unwrap, preview, symbols, decimals, fee_bps=args.unwrap_fee_bps)

    return status


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
