"""Events recorded by the gateway, one per state change."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Deposited:
    user: str
    tokens: tuple[str, ...]
    amounts: tuple[int, ...]
    king_minted_net: int
    fee: int


@dataclass(frozen=True)
class Unwrapped:
    user: str
    share_amount: int
    fee: int


@dataclass(frozen=True)
class FeesSet:
    deposit_fee_bps: int
    unwrap_fee_bps: int


@dataclass(frozen=True)
class FeesWithdrawn:
    recipient: str
    amount: int


@dataclass(frozen=True)
class DepositLimitSet:
    token: str
    limit: int


@dataclass(frozen=True)
class TokenPauseChanged:
    token: str
    paused: bool


@dataclass(frozen=True)
class EpochDurationSet:
    duration: int
    next_epoch_timestamp: int


@dataclass(frozen=True)
class EpochRolledOver:
    next_epoch_timestamp: int


@dataclass(frozen=True)
class EpochReset:
    next_epoch_timestamp: int


@dataclass(frozen=True)
class Paused:
    account: str


@dataclass(frozen=True)
class Unpaused:
    account: str


@dataclass(frozen=True)
class PriceProviderUpdated:
    old: str
    new: str


@dataclass(frozen=True)
class RoleGranted:
    role: str
    account: str
    sender: str


@dataclass(frozen=True)
class RoleRevoked:
    role: str
    account: str
    sender: str
