"""Data models for the retail deposit gateway."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class TokenAmount:
    """A single (token, amount) entry of a deposit batch."""

    token: str
    amount: int


@dataclass
class TokenState:
    """Per-token limiter state. Created with defaults on first reference."""

    deposit_limit: int = 0
    # May exceed `deposit_limit` after governance shrinks the limit mid-epoch;
    # that only blocks new deposits.
    deposit_used: int = 0
    paused: bool = False


@dataclass
class GatewayState:
    """All mutable gateway state. Copied wholesale for rollback."""

    deposit_fee_bps: int
    unwrap_fee_bps: int
    epoch_duration: int
    next_epoch_timestamp: int
    price_provider: str
    accrued_fees: int = 0
    paused: bool = False
    tokens: dict[str, TokenState] = field(default_factory=dict)
    roles: dict[str, set[str]] = field(default_factory=dict)


@dataclass(frozen=True)
class TokenDepositInfo:
    limit: int
    used: int


@dataclass(frozen=True)
class EpochInfo:
    duration: int
    next_epoch_timestamp: int
    current_epoch_start: int
    seconds_remaining: int


@dataclass(frozen=True)
class GlobalConfig:
    """Snapshot of the gateway's global configuration."""

    king_contract_address: str
    deposit_fee_bps: int
    unwrap_fee_bps: int
    epoch_duration: int
    next_epoch_timestamp: int
    accrued_fees: int
    price_provider_address: str
    paused: bool


@dataclass(frozen=True)
class AllInfo:
    """Global config plus a per-token table, index-aligned across the lists."""

    config: GlobalConfig
    tokens: list[str]
    limits: list[int]
    used: list[int]
    paused_statuses: list[bool]
    # USD value of one whole token (18 decimals); 0 if the oracle cannot price it.
    prices: list[int]


@dataclass(frozen=True)
class DepositPreview:
    king_to_receive_net: int
    retail_fee_amount: int
    king_internal_fee_amount: int


@dataclass(frozen=True)
class UnwrapPreview:
    tokens: list[str]
    amounts: list[int]
    fee_amount: int
    king_fee_amount: int


@dataclass(frozen=True)
class UnwrapResult:
    """Underlying assets forwarded to the caller by an unwrap."""

    tokens: list[str]
    amounts: list[int]
    fee_amount: int


@dataclass(frozen=True)
class KingContracts:
    """Addresses resolved from a King deployment."""

    king: str
    price_provider: str


@dataclass(frozen=True)
class TokenRow:
    """One row of the on-chain token table printed by the CLI."""

    token: str
    symbol: str
    decimals: int
    whitelisted: bool
    vault_balance: int
    # USD value of one whole token (18 decimals); None if the oracle cannot price it.
    unit_price_usd: int | None
