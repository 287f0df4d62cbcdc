"""In-memory King vault and price provider for simulations and tests.

The share price model is deliberately simple: a deposit mints shares in
proportion to its ETH value relative to the vault's total ETH value, and a
redeem pays out every underlying asset pro rata. Both paths may charge the
vault's own basis-point fee in shares.
"""

from collections.abc import Iterable, Sequence

from retail_core.errors import PriceOracleError
from retail_core.fees import split_fee
from retail_core.ledger import InMemoryLedger


class KingError(Exception):
    """Revert raised by the in-memory King."""


class StaticPriceOracle:
    """Price provider with fixed, settable prices."""

    def __init__(
        self,
        address: str,
        prices_in_eth: dict[str, int] | None = None,
        *,
        eth_usd_price: int = 3_000 * 10**8,
        eth_usd_decimals: int = 8,
    ) -> None:
        self.address = address
        self._prices = dict(prices_in_eth or {})
        self._eth_usd = (eth_usd_price, eth_usd_decimals)

    def set_price(self, token: str, price_in_eth: int) -> None:
        self._prices[token] = price_in_eth

    def set_eth_usd_price(self, price: int, decimals: int) -> None:
        self._eth_usd = (price, decimals)

    def get_price_in_eth(self, token: str) -> int:
        if token not in self._prices:
            raise PriceOracleError(f"TokenNotConfigured({token})")
        return self._prices[token]

    def get_eth_usd_price(self) -> tuple[int, int]:
        return self._eth_usd


class InMemoryKing:
    """A King-like vault whose share token and custody live in an InMemoryLedger."""

    def __init__(
        self,
        address: str,
        ledger: InMemoryLedger,
        oracle: StaticPriceOracle,
        *,
        treasury: str,
        deposit_fee_bps: int = 0,
        redeem_fee_bps: int = 0,
    ) -> None:
        self.address = address
        self.ledger = ledger
        self.treasury = treasury
        self.deposit_fee_bps = deposit_fee_bps
        self.redeem_fee_bps = redeem_fee_bps
        self._oracle = oracle
        self._tokens: list[str] = []
        self._whitelisted: dict[str, bool] = {}
        self._depositors: set[str] = set()
        ledger.register_token(address, 18)

    # -- administration (the vault's own governance, outside the gateway)

    def add_token(self, token: str, *, whitelisted: bool = True) -> None:
        if token not in self._whitelisted:
            self._tokens.append(token)
        self._whitelisted[token] = whitelisted

    def set_token_whitelisted(self, token: str, whitelisted: bool) -> None:
        if token not in self._whitelisted:
            raise KingError(f"TokenNotRegistered({token})")
        self._whitelisted[token] = whitelisted

    def set_depositors(self, depositors: Iterable[str], allowed: Iterable[bool]) -> None:
        for account, ok in zip(depositors, allowed, strict=True):
            if ok:
                self._depositors.add(account)
            else:
                self._depositors.discard(account)

    def set_price_provider(self, oracle: StaticPriceOracle) -> None:
        self._oracle = oracle

    def snapshot(self) -> tuple:
        return (
            list(self._tokens),
            dict(self._whitelisted),
            set(self._depositors),
            self._oracle,
            self.deposit_fee_bps,
            self.redeem_fee_bps,
        )

    def restore(self, snapshot: tuple) -> None:
        tokens, whitelisted, depositors, oracle, deposit_fee_bps, redeem_fee_bps = snapshot
        self._tokens = list(tokens)
        self._whitelisted = dict(whitelisted)
        self._depositors = set(depositors)
        self._oracle = oracle
        self.deposit_fee_bps = deposit_fee_bps
        self.redeem_fee_bps = redeem_fee_bps

    # -- views

    def is_token_whitelisted(self, token: str) -> bool:
        return self._whitelisted.get(token, False)

    def all_tokens(self) -> list[str]:
        return list(self._tokens)

    def balance_of(self, account: str) -> int:
        return self.ledger.balance_of(self.address, account)

    def total_supply(self) -> int:
        return self.ledger.total_supply(self.address)

    def price_provider(self) -> StaticPriceOracle:
        return self._oracle

    def total_assets(self) -> tuple[list[str], list[int]]:
        tokens = self.all_tokens()
        return tokens, [self.ledger.balance_of(t, self.address) for t in tokens]

    def _value_in_eth(self, token: str, amount: int) -> int:
        return amount * self._oracle.get_price_in_eth(token) // 10 ** self.ledger.decimals(token)

    def total_value_in_eth(self) -> int:
        tokens, balances = self.total_assets()
        return sum(self._value_in_eth(t, b) for t, b in zip(tokens, balances))

    def preview_deposit(self, tokens: Sequence[str], amounts: Sequence[int]) -> tuple[int, int]:
        if len(tokens) != len(amounts):
            raise KingError("ArrayLengthMismatch")
        value = 0
        for token, amount in zip(tokens, amounts):
            if not self.is_token_whitelisted(token):
                raise KingError(f"TokenNotWhitelisted({token})")
            value += self._value_in_eth(token, amount)

        supply = self.total_supply()
        total_value = self.total_value_in_eth()
        if supply == 0 or total_value == 0:
            shares = value
        else:
            shares = value * supply // total_value
        net, fee = split_fee(shares, self.deposit_fee_bps)
        return net, fee

    def preview_redeem(self, shares: int) -> tuple[list[str], list[int], int]:
        supply = self.total_supply()
        if shares > supply:
            raise KingError("InsufficientShares")
        burn, fee = split_fee(shares, self.redeem_fee_bps)
        tokens, balances = self.total_assets()
        amounts = [b * burn // supply if supply else 0 for b in balances]
        return tokens, amounts, fee

    # -- mutations

    def deposit(self, tokens: Sequence[str], amounts: Sequence[int], receiver: str, *, sender: str) -> None:
        if sender not in self._depositors:
            raise KingError("OnlyDepositors")
        net, fee = self.preview_deposit(tokens, amounts)
        for token, amount in zip(tokens, amounts):
            if amount:
                self.ledger.transfer_from(token, self.address, sender, self.address, amount)
        if net:
            self.ledger.mint(self.address, receiver, net)
        if fee:
            self.ledger.mint(self.address, self.treasury, fee)

    def redeem(self, shares: int, *, sender: str) -> None:
        if shares == 0:
            raise KingError("InvalidValue")
        tokens, amounts, fee = self.preview_redeem(shares)
        if fee:
            self.ledger.transfer(self.address, sender, self.treasury, fee)
        self.ledger.burn(self.address, sender, shares - fee)
        for token, amount in zip(tokens, amounts):
            if amount:
                self.ledger.transfer(token, self.address, sender, amount)
