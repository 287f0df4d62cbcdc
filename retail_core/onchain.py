"""Read-only adapters over a live King deployment."""

import sys
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from tqdm import tqdm

from retail_core.cache import load_token_metadata, store_token_metadata
from retail_core.contracts import erc20_contract, king_contract, price_provider_contract
from retail_core.errors import PriceOracleError, VaultDepositFailedError, VaultRedeemFailedError
from retail_core.formatters import as_int
from retail_core.models import TokenRow
from retail_core.previews import failure_reason
from retail_core.pricing import unit_price_usd

if TYPE_CHECKING:
    from web3 import Web3  # pragma: no cover


class Web3PriceOracle:
    """King's price provider, read through web3."""

    def __init__(self, w3: "Web3", address: str, *, block_identifier: int | str = "latest") -> None:
        self.address = w3.to_checksum_address(address)
        self._contract = price_provider_contract(w3, address)
        self._block = block_identifier

    def get_price_in_eth(self, token: str) -> int:
        try:
            return as_int(self._contract.functions.getPriceInEth(token).call(block_identifier=self._block))
        except Exception as ex:  # pylint: disable=broad-exception-caught
            raise PriceOracleError(failure_reason(ex)) from ex

    def get_eth_usd_price(self) -> tuple[int, int]:
        try:
            price, decimals = self._contract.functions.getEthUsdPrice().call(block_identifier=self._block)
        except Exception as ex:  # pylint: disable=broad-exception-caught
            raise PriceOracleError(failure_reason(ex)) from ex
        return as_int(price), as_int(decimals)


class Web3King:
    """The read side of the King vault. Deposits and redeems fail as vault call errors; no transaction is sent."""

    def __init__(self, w3: "Web3", address: str, *, block_identifier: int | str = "latest") -> None:
        self.address = w3.to_checksum_address(address)
        self._w3 = w3
        self._contract = king_contract(w3, address)
        self._block = block_identifier

    def _call(self, fn: Any) -> Any:
        return fn.call(block_identifier=self._block)

    def is_token_whitelisted(self, token: str) -> bool:
        return bool(self._call(self._contract.functions.isTokenWhitelisted(token)))

    def all_tokens(self) -> list[str]:
        return list(self._call(self._contract.functions.allTokens()))

    def balance_of(self, account: str) -> int:
        return as_int(self._call(self._contract.functions.balanceOf(account)))

    def total_assets(self) -> tuple[list[str], list[int]]:
        tokens, balances = self._call(self._contract.functions.totalAssets())
        return list(tokens), [as_int(b) for b in balances]

    def price_provider(self) -> Web3PriceOracle:
        address = self._call(self._contract.functions.priceProvider())
        return Web3PriceOracle(self._w3, address, block_identifier=self._block)

    def preview_deposit(self, tokens: Sequence[str], amounts: Sequence[int]) -> tuple[int, int]:
        shares, fee = self._call(self._contract.functions.previewDeposit(list(tokens), list(amounts)))
        return as_int(shares), as_int(fee)

    def preview_redeem(self, shares: int) -> tuple[list[str], list[int], int]:
        tokens, amounts, fee = self._call(self._contract.functions.previewRedeem(shares))
        return list(tokens), [as_int(a) for a in amounts], as_int(fee)

    def deposit(self, tokens: Sequence[str], amounts: Sequence[int], receiver: str, *, sender: str) -> None:
        raise VaultDepositFailedError(f"King at {self.address} is read through RPC only; deposits are not sent")

    def redeem(self, shares: int, *, sender: str) -> None:
        raise VaultRedeemFailedError(f"King at {self.address} is read through RPC only; redeems are not sent")


class Web3TokenMetadata:
    """ERC20 decimals/symbol lookups, cached per chain since they never change."""

    def __init__(self, w3: "Web3", *, use_cache: bool = True) -> None:
        self._w3 = w3
        self._use_cache = use_cache
        self._chain_id: int | None = None
        self._memo: dict[str, dict[str, Any]] = {}

    def _metadata(self, token: str) -> dict[str, Any]:
        token = self._w3.to_checksum_address(token)
        if token in self._memo:
            return self._memo[token]

        if self._chain_id is None:
            self._chain_id = int(self._w3.eth.chain_id)
        data = load_token_metadata(self._chain_id, token) if self._use_cache else None
        if data is None:
            contract = erc20_contract(self._w3, token)
            data = {
                "decimals": as_int(contract.functions.decimals().call()),
                "symbol": str(contract.functions.symbol().call()),
            }
            if self._use_cache:
                store_token_metadata(self._chain_id, token, data["decimals"], data["symbol"])
        self._memo[token] = data
        return data

    def decimals(self, token: str) -> int:
        return int(self._metadata(token)["decimals"])

    def symbol(self, token: str) -> str:
        return str(self._metadata(token)["symbol"])


def collect_token_rows(king: Web3King, oracle: Web3PriceOracle, metadata: Web3TokenMetadata) -> list[TokenRow]:
    """Whitelisting, vault balance and USD unit price for every token King tracks."""
    tokens, balances = king.total_assets()
    rows: list[TokenRow] = []
    with tqdm(zip(tokens, balances), total=len(tokens), desc="🔗 Reading King tokens", unit="token", file=sys.stderr) as pbar:
        for token, balance in pbar:
            decimals = metadata.decimals(token)
            symbol = metadata.symbol(token)
            pbar.set_postfix(token=symbol)
            try:
                price = unit_price_usd(oracle, token, decimals)
            except PriceOracleError as ex:
                tqdm.write(f"⚠️  No USD price for {symbol} ({token}): {ex}", file=sys.stderr)
                price = None
            rows.append(
                TokenRow(
                    token=token,
                    symbol=symbol,
                    decimals=decimals,
                    whitelisted=king.is_token_whitelisted(token),
                    vault_balance=balance,
                    unit_price_usd=price,
                )
            )
    return rows
