"""In-memory fungible-token ledger with ERC20-style allowances."""

from collections import defaultdict

from retail_core.constants import MAX_UINT256
from retail_core.errors import InsufficientAllowanceError, InsufficientBalanceError, UnknownTokenError


class InMemoryLedger:
    """Balances, allowances and supplies for any number of tokens.

    Tokens must be registered with their decimals before use. An allowance of
    ``MAX_UINT256`` is never decreased.
    """

    def __init__(self) -> None:
        self._decimals: dict[str, int] = {}
        self._balances: dict[str, dict[str, int]] = defaultdict(dict)
        self._allowances: dict[tuple[str, str, str], int] = {}
        self._supply: dict[str, int] = defaultdict(int)

    def register_token(self, token: str, decimals: int = 18) -> None:
        self._decimals[token] = decimals

    def _require_token(self, token: str) -> None:
        if token not in self._decimals:
            raise UnknownTokenError(token)

    def decimals(self, token: str) -> int:
        self._require_token(token)
        return self._decimals[token]

    def total_supply(self, token: str) -> int:
        return self._supply[token]

    def balance_of(self, token: str, account: str) -> int:
        return self._balances[token].get(account, 0)

    def allowance(self, token: str, owner: str, spender: str) -> int:
        return self._allowances.get((token, owner, spender), 0)

    def approve(self, token: str, owner: str, spender: str, amount: int) -> None:
        self._require_token(token)
        self._allowances[(token, owner, spender)] = amount

    def mint(self, token: str, to: str, amount: int) -> None:
        self._require_token(token)
        self._balances[token][to] = self.balance_of(token, to) + amount
        self._supply[token] += amount

    def burn(self, token: str, account: str, amount: int) -> None:
        self._debit(token, account, amount)
        self._supply[token] -= amount

    def _debit(self, token: str, account: str, amount: int) -> None:
        self._require_token(token)
        balance = self.balance_of(token, account)
        if balance < amount:
            raise InsufficientBalanceError(token, account, balance, amount)
        self._balances[token][account] = balance - amount

    def transfer(self, token: str, sender: str, recipient: str, amount: int) -> None:
        self._debit(token, sender, amount)
        self._balances[token][recipient] = self.balance_of(token, recipient) + amount

    def transfer_from(self, token: str, spender: str, owner: str, recipient: str, amount: int) -> None:
        current = self.allowance(token, owner, spender)
        if current < amount:
            raise InsufficientAllowanceError(token, owner, spender, current, amount)
        self.transfer(token, owner, recipient, amount)
        if current != MAX_UINT256:
            self._allowances[(token, owner, spender)] = current - amount

    def snapshot(self) -> tuple:
        return (
            dict(self._decimals),
            {token: dict(balances) for token, balances in self._balances.items()},
            dict(self._allowances),
            dict(self._supply),
        )

    def restore(self, snapshot: tuple) -> None:
        decimals, balances, allowances, supply = snapshot
        self._decimals = dict(decimals)
        self._balances = defaultdict(dict, {token: dict(b) for token, b in balances.items()})
        self._allowances = dict(allowances)
        self._supply = defaultdict(int, supply)
