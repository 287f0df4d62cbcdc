"""Interfaces of the gateway's external collaborators."""

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable


class PriceOracle(Protocol):
    address: str

    def get_price_in_eth(self, token: str) -> int:
        """Price of one whole `token` in ETH, 18 decimals."""

    def get_eth_usd_price(self) -> tuple[int, int]:
        """(ETH/USD price, decimals of that price)."""


class Vault(Protocol):
    """The King vault as seen by the gateway.

    The vault's share token is tracked in the token ledger under ``address``.
    """

    address: str

    def is_token_whitelisted(self, token: str) -> bool: ...

    def all_tokens(self) -> list[str]: ...

    def balance_of(self, account: str) -> int: ...

    def total_assets(self) -> tuple[list[str], list[int]]: ...

    def price_provider(self) -> PriceOracle: ...

    def preview_deposit(self, tokens: Sequence[str], amounts: Sequence[int]) -> tuple[int, int]:
        """(shares the receiver would get, vault's own fee in shares)."""

    def preview_redeem(self, shares: int) -> tuple[list[str], list[int], int]:
        """(tokens, amounts paid out, vault's own fee in shares)."""

    def deposit(self, tokens: Sequence[str], amounts: Sequence[int], receiver: str, *, sender: str) -> None: ...

    def redeem(self, shares: int, *, sender: str) -> None: ...


class TokenLedger(Protocol):
    """Standard fungible-token pull/push transfers and allowances."""

    def decimals(self, token: str) -> int: ...

    def balance_of(self, token: str, account: str) -> int: ...

    def allowance(self, token: str, owner: str, spender: str) -> int: ...

    def approve(self, token: str, owner: str, spender: str, amount: int) -> None: ...

    def transfer(self, token: str, sender: str, recipient: str, amount: int) -> None: ...

    def transfer_from(self, token: str, spender: str, owner: str, recipient: str, amount: int) -> None: ...


@runtime_checkable
class SupportsSnapshot(Protocol):
    """State that can be captured and restored to undo a failed call."""

    def snapshot(self) -> Any: ...

    def restore(self, snapshot: Any) -> None: ...
