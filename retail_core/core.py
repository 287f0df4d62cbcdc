"""The retail deposit gateway in front of the King vault.

Users deposit whitelisted tokens under per-token caps that reset every epoch
and receive King shares minus a deposit fee; they can unwrap shares back into
the underlying basket minus an unwrap fee. Governance configures fees, caps,
pauses and the epoch length, and withdraws the accrued fees.

Every public mutating method is atomic: if it raises, the gateway state, its
event log and every collaborator that supports snapshots are restored.
"""

import copy
import functools
import time
from collections.abc import Callable, Sequence
from typing import Any

from retail_core.access import AccessControlMixin
from retail_core.constants import (
    DEFAULT_ADMIN_ROLE,
    MAX_FEE_BPS,
    PAUSER_ROLE,
    ZERO_ADDRESS,
)
from retail_core.epoch import is_epoch_due, is_valid_epoch_duration, next_epoch_boundary
from retail_core.errors import (
    AlreadyInThisStateError,
    AssetArrayLengthMismatchError,
    AssetSnapshotMismatchError,
    DepositFeeTooBigError,
    DepositLimitExceededError,
    DepositTooSmallError,
    DuplicateTokenError,
    EmptyDepositError,
    EnforcedPauseError,
    ExpectedPauseError,
    InvalidAmountError,
    InvalidEpochDurationError,
    NetUnwrapAmountZeroError,
    NoFeesToWithdrawError,
    PriceOracleError,
    ReentrantCallError,
    RetailCoreError,
    TokenNotWhitelistedError,
    TokenPausedError,
    UnwrapFeeTooBigError,
    VaultDepositFailedError,
    VaultRedeemFailedError,
    ZeroAddressError,
)
from retail_core.events import (
    Deposited,
    DepositLimitSet,
    EpochDurationSet,
    EpochReset,
    EpochRolledOver,
    FeesSet,
    FeesWithdrawn,
    Paused,
    PriceProviderUpdated,
    TokenPauseChanged,
    Unpaused,
    Unwrapped,
)
from retail_core.fees import split_fee
from retail_core.interfaces import PriceOracle, SupportsSnapshot, TokenLedger, Vault
from retail_core.models import (
    AllInfo,
    DepositPreview,
    EpochInfo,
    GatewayState,
    GlobalConfig,
    TokenAmount,
    TokenDepositInfo,
    TokenState,
    UnwrapPreview,
    UnwrapResult,
)
from retail_core.previews import failure_reason, preview_deposit, preview_unwrap
from retail_core.pricing import token_amount_to_usd, unit_price_usd


def atomic(method: Callable) -> Callable:
    """Run `method` as one all-or-nothing call.

    Each call takes its own snapshot, so a nested call made from a collaborator
    callback is undone on failure even when the collaborator swallows the error.
    """

    @functools.wraps(method)
    def wrapper(self: "RetailCore", *args: Any, **kwargs: Any) -> Any:
        saved = self._snapshot()
        try:
            return method(self, *args, **kwargs)
        except BaseException:
            self._restore(saved)
            raise

    return wrapper


class RetailCore(AccessControlMixin):
    """Deposit/unwrap gateway with epoch-scoped per-token caps and fee accrual."""

    def __init__(
        self,
        vault: Vault,
        ledger: TokenLedger,
        admin: str,
        deposit_fee_bps: int,
        unwrap_fee_bps: int,
        epoch_duration: int,
        *,
        address: str,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if vault is None or not vault.address or vault.address == ZERO_ADDRESS:
            raise ZeroAddressError("king")
        if not admin or admin == ZERO_ADDRESS:
            raise ZeroAddressError("admin")
        if not 0 <= deposit_fee_bps <= MAX_FEE_BPS:
            raise DepositFeeTooBigError(deposit_fee_bps, MAX_FEE_BPS)
        if not 0 <= unwrap_fee_bps <= MAX_FEE_BPS:
            raise UnwrapFeeTooBigError(unwrap_fee_bps, MAX_FEE_BPS)
        if not is_valid_epoch_duration(epoch_duration):
            raise InvalidEpochDurationError(epoch_duration)

        self.vault = vault
        self.ledger = ledger
        self.address = address
        self._clock = clock
        self._oracle: PriceOracle = vault.price_provider()
        self._state = GatewayState(
            deposit_fee_bps=deposit_fee_bps,
            unwrap_fee_bps=unwrap_fee_bps,
            epoch_duration=epoch_duration,
            next_epoch_timestamp=self._now() + epoch_duration,
            price_provider=self._oracle.address,
        )
        self.events: list = []
        self._entered = False
        self._grant_role(DEFAULT_ADMIN_ROLE, admin, admin)
        self._grant_role(PAUSER_ROLE, admin, admin)

    # ------------------------------------------------------------------ plumbing

    def _now(self) -> int:
        return int(self._clock())

    def _emit(self, event: Any) -> None:
        self.events.append(event)

    def _collaborators(self) -> list[SupportsSnapshot]:
        seen: list[SupportsSnapshot] = []
        for obj in (self.ledger, self.vault):
            if isinstance(obj, SupportsSnapshot) and all(obj is not s for s in seen):
                seen.append(obj)
        return seen

    def _snapshot(self) -> tuple:
        return (
            copy.deepcopy(self._state),
            self._oracle,
            len(self.events),
            [(c, c.snapshot()) for c in self._collaborators()],
        )

    def _restore(self, saved: tuple) -> None:
        state, oracle, events_len, collaborators = saved
        self._state = state
        self._oracle = oracle
        del self.events[events_len:]
        for collaborator, snap in collaborators:
            collaborator.restore(snap)

    def _token(self, token: str) -> TokenState:
        return self._state.tokens.setdefault(token, TokenState())

    def _share_balance(self) -> int:
        return self.vault.balance_of(self.address)

    # ------------------------------------------------------------------ epochs

    def compute_effective_next_boundary(self) -> int:
        """The boundary the next mutating call would store, without storing it."""
        return next_epoch_boundary(self._state.next_epoch_timestamp, self._state.epoch_duration, self._now())

    def _reset_usage(self) -> None:
        for token in self.vault.all_tokens():
            self._token(token).deposit_used = 0

    @atomic
    def advance_epoch_if_due(self) -> bool:
        """Roll over to the current epoch if its boundary has passed. Returns True on rollover."""
        now = self._now()
        if not is_epoch_due(self._state.next_epoch_timestamp, self._state.epoch_duration, now):
            return False
        self._state.next_epoch_timestamp = next_epoch_boundary(
            self._state.next_epoch_timestamp, self._state.epoch_duration, now
        )
        self._reset_usage()
        self._emit(EpochRolledOver(next_epoch_timestamp=self._state.next_epoch_timestamp))
        return True

    def _start_fresh_epoch(self) -> None:
        self._state.next_epoch_timestamp = self._now() + self._state.epoch_duration
        self._reset_usage()

    @atomic
    def reset_epoch(self, *, caller: str) -> None:
        """Clear usage for every vault token and restart the epoch now."""
        self._check_role(DEFAULT_ADMIN_ROLE, caller)
        self._start_fresh_epoch()
        self._emit(EpochReset(next_epoch_timestamp=self._state.next_epoch_timestamp))

    @atomic
    def set_epoch_duration(self, duration: int, reset_epoch: bool, *, caller: str) -> None:
        """Change the epoch length; with `reset_epoch` a new epoch starts immediately."""
        self._check_role(DEFAULT_ADMIN_ROLE, caller)
        if not is_valid_epoch_duration(duration):
            raise InvalidEpochDurationError(duration)
        self._state.epoch_duration = duration
        if reset_epoch:
            self._start_fresh_epoch()
        self._emit(EpochDurationSet(duration=duration, next_epoch_timestamp=self._state.next_epoch_timestamp))

    # ------------------------------------------------------------------ deposit

    def deposit(self, batch: Sequence[TokenAmount], *, caller: str) -> int:
        return self.deposit_multiple([e.token for e in batch], [e.amount for e in batch], caller=caller)

    @atomic
    def deposit_multiple(self, tokens: Sequence[str], amounts: Sequence[int], *, caller: str) -> int:
        """Deposit a batch of tokens; returns the King shares sent to `caller`."""
        if self._entered:
            raise ReentrantCallError()
        self._entered = True
        try:
            return self._deposit(list(tokens), list(amounts), caller)
        finally:
            self._entered = False

    def _deposit(self, tokens: list[str], amounts: list[int], caller: str) -> int:
        if self._state.paused:
            raise EnforcedPauseError()
        if len(tokens) != len(amounts):
            raise AssetArrayLengthMismatchError(len(tokens), len(amounts))
        if not tokens:
            raise EmptyDepositError()

        self.advance_epoch_if_due()

        seen: set[str] = set()
        for token, amount in zip(tokens, amounts):
            if amount <= 0:
                raise InvalidAmountError(token)
            if token in seen:
                raise DuplicateTokenError(token)
            seen.add(token)
            if not self.vault.is_token_whitelisted(token):
                raise TokenNotWhitelistedError(token)
            state = self._token(token)
            if state.paused:
                raise TokenPausedError(token)
            if state.deposit_limit == 0 or state.deposit_used + amount > state.deposit_limit:
                raise DepositLimitExceededError(
                    token, limit=state.deposit_limit, used=state.deposit_used, amount=amount
                )
            state.deposit_used += amount

        for token, amount in zip(tokens, amounts):
            self.ledger.transfer_from(token, self.address, caller, self.address, amount)
            self.ledger.approve(token, self.address, self.vault.address, amount)

        before = self._share_balance()
        try:
            self.vault.deposit(tokens, amounts, self.address, sender=self.address)
        except RetailCoreError:
            raise
        except Exception as ex:  # pylint: disable=broad-exception-caught
            raise VaultDepositFailedError(failure_reason(ex)) from ex
        minted_gross = self._share_balance() - before

        net, fee = split_fee(minted_gross, self._state.deposit_fee_bps)
        if net == 0:
            raise DepositTooSmallError(minted_gross)
        self._state.accrued_fees += fee

        self.ledger.transfer(self.vault.address, self.address, caller, net)
        self._emit(Deposited(user=caller, tokens=tuple(tokens), amounts=tuple(amounts), king_minted_net=net, fee=fee))
        return net

    # ------------------------------------------------------------------ unwrap

    @atomic
    def unwrap(self, share_amount: int, *, caller: str) -> UnwrapResult:
        """Redeem King shares for the underlying basket, minus the unwrap fee."""
        if share_amount <= 0:
            raise InvalidAmountError()

        self.ledger.transfer_from(self.vault.address, self.address, caller, self.address, share_amount)

        net, fee = split_fee(share_amount, self._state.unwrap_fee_bps)
        if fee > 0:
            self._state.accrued_fees += fee
        if net == 0:
            raise NetUnwrapAmountZeroError(share_amount)

        tokens_before, balances_before = self.vault.total_assets()
        try:
            self.vault.redeem(net, sender=self.address)
        except RetailCoreError:
            raise
        except Exception as ex:  # pylint: disable=broad-exception-caught
            raise VaultRedeemFailedError(failure_reason(ex)) from ex
        tokens_after, balances_after = self.vault.total_assets()
        if len(tokens_before) != len(tokens_after) or len(balances_before) != len(balances_after):
            raise AssetSnapshotMismatchError(len(balances_before), len(balances_after))

        paid_tokens: list[str] = []
        paid_amounts: list[int] = []
        for token, before, after in zip(tokens_before, balances_before, balances_after):
            if after < before:
                self.ledger.transfer(token, self.address, caller, before - after)
                paid_tokens.append(token)
                paid_amounts.append(before - after)

        self._emit(Unwrapped(user=caller, share_amount=share_amount, fee=fee))
        return UnwrapResult(tokens=paid_tokens, amounts=paid_amounts, fee_amount=fee)

    # ------------------------------------------------------------------ governance

    @atomic
    def set_deposit_limits(self, tokens: Sequence[str], limits: Sequence[int], *, caller: str) -> None:
        self._check_role(DEFAULT_ADMIN_ROLE, caller)
        if len(tokens) != len(limits):
            raise AssetArrayLengthMismatchError(len(tokens), len(limits))
        for token, limit in zip(tokens, limits):
            if limit < 0:
                raise InvalidAmountError(token)
            # Usage is left as is, even when above the new limit.
            self._token(token).deposit_limit = limit
            self._emit(DepositLimitSet(token=token, limit=limit))

    @atomic
    def set_token_pause(self, token: str, paused: bool, *, caller: str) -> None:
        self._check_role(DEFAULT_ADMIN_ROLE, caller)
        if not self.vault.is_token_whitelisted(token):
            raise TokenNotWhitelistedError(token)
        state = self._token(token)
        if state.paused == paused:
            raise AlreadyInThisStateError(f"pause flag of {token}")
        state.paused = paused
        self._emit(TokenPauseChanged(token=token, paused=paused))

    @atomic
    def pause_deposits(self, *, caller: str) -> None:
        self._check_role(PAUSER_ROLE, caller)
        if self._state.paused:
            raise EnforcedPauseError()
        self._state.paused = True
        self._emit(Paused(account=caller))

    @atomic
    def unpause_deposits(self, *, caller: str) -> None:
        self._check_role(PAUSER_ROLE, caller)
        if not self._state.paused:
            raise ExpectedPauseError()
        self._state.paused = False
        self._emit(Unpaused(account=caller))

    @atomic
    def set_deposit_fee_bps(self, bps: int, *, caller: str) -> None:
        self._check_role(DEFAULT_ADMIN_ROLE, caller)
        if not 0 <= bps <= MAX_FEE_BPS:
            raise DepositFeeTooBigError(bps, MAX_FEE_BPS)
        self._state.deposit_fee_bps = bps
        self._emit(FeesSet(deposit_fee_bps=bps, unwrap_fee_bps=self._state.unwrap_fee_bps))

    @atomic
    def set_unwrap_fee_bps(self, bps: int, *, caller: str) -> None:
        self._check_role(DEFAULT_ADMIN_ROLE, caller)
        if not 0 <= bps <= MAX_FEE_BPS:
            raise UnwrapFeeTooBigError(bps, MAX_FEE_BPS)
        self._state.unwrap_fee_bps = bps
        self._emit(FeesSet(deposit_fee_bps=self._state.deposit_fee_bps, unwrap_fee_bps=bps))

    @atomic
    def update_price_provider(self, *, caller: str) -> None:
        """Resync the cached price provider with the vault's current one."""
        self._check_role(DEFAULT_ADMIN_ROLE, caller)
        oracle = self.vault.price_provider()
        if oracle.address == self._state.price_provider:
            raise AlreadyInThisStateError("price provider")
        old = self._state.price_provider
        self._oracle = oracle
        self._state.price_provider = oracle.address
        self._emit(PriceProviderUpdated(old=old, new=oracle.address))

    @atomic
    def withdraw_fees(self, amount: int, *, caller: str) -> int:
        """Send up to `amount` accrued King shares to `caller`; returns the amount sent."""
        self._check_role(DEFAULT_ADMIN_ROLE, caller)
        to_withdraw = min(amount, self._state.accrued_fees)
        if to_withdraw <= 0:
            raise NoFeesToWithdrawError()
        self._state.accrued_fees -= to_withdraw
        self.ledger.transfer(self.vault.address, self.address, caller, to_withdraw)
        self._emit(FeesWithdrawn(recipient=caller, amount=to_withdraw))
        return to_withdraw

    # ------------------------------------------------------------------ views

    @property
    def deposit_fee_bps(self) -> int:
        return self._state.deposit_fee_bps

    @property
    def unwrap_fee_bps(self) -> int:
        return self._state.unwrap_fee_bps

    @property
    def epoch_duration(self) -> int:
        return self._state.epoch_duration

    @property
    def accrued_fees(self) -> int:
        return self._state.accrued_fees

    @property
    def paused(self) -> bool:
        return self._state.paused

    def token_amount_to_usd(self, token: str, amount: int) -> int:
        return token_amount_to_usd(self._oracle, token, amount, self.ledger.decimals(token))

    def get_token_deposit_info(self, token: str) -> TokenDepositInfo:
        state = self._state.tokens.get(token, TokenState())
        return TokenDepositInfo(limit=state.deposit_limit, used=state.deposit_used)

    def is_token_paused(self, token: str) -> bool:
        return self._state.tokens.get(token, TokenState()).paused

    def get_epoch_info(self) -> EpochInfo:
        next_ts = self.compute_effective_next_boundary()
        return EpochInfo(
            duration=self._state.epoch_duration,
            next_epoch_timestamp=next_ts,
            current_epoch_start=next_ts - self._state.epoch_duration,
            seconds_remaining=max(next_ts - self._now(), 0),
        )

    def get_global_config(self) -> GlobalConfig:
        return GlobalConfig(
            king_contract_address=self.vault.address,
            deposit_fee_bps=self._state.deposit_fee_bps,
            unwrap_fee_bps=self._state.unwrap_fee_bps,
            epoch_duration=self._state.epoch_duration,
            next_epoch_timestamp=self.compute_effective_next_boundary(),
            accrued_fees=self._state.accrued_fees,
            price_provider_address=self._state.price_provider,
            paused=self._state.paused,
        )

    def get_tokens_and_limits(self) -> tuple[list[str], list[int]]:
        tokens = self.vault.all_tokens()
        return tokens, [self.get_token_deposit_info(t).limit for t in tokens]

    def get_depositable_tokens(self) -> list[str]:
        """Tokens that would currently accept at least one more base unit."""
        if self._state.paused:
            return []
        out = []
        for token in self.vault.all_tokens():
            state = self._state.tokens.get(token, TokenState())
            if not self.vault.is_token_whitelisted(token) or state.paused:
                continue
            if state.deposit_used < state.deposit_limit:
                out.append(token)
        return out

    def get_all_info(self) -> AllInfo:
        tokens = self.vault.all_tokens()
        infos = [self.get_token_deposit_info(t) for t in tokens]
        prices = []
        for token in tokens:
            try:
                prices.append(unit_price_usd(self._oracle, token, self.ledger.decimals(token)))
            except PriceOracleError:
                prices.append(0)
        return AllInfo(
            config=self.get_global_config(),
            tokens=tokens,
            limits=[i.limit for i in infos],
            used=[i.used for i in infos],
            paused_statuses=[self.is_token_paused(t) for t in tokens],
            prices=prices,
        )

    def preview_deposit_multiple(self, tokens: Sequence[str], amounts: Sequence[int]) -> DepositPreview:
        return preview_deposit(self.vault, tokens, amounts, self._state.deposit_fee_bps)

    def preview_unwrap(self, share_amount: int) -> UnwrapPreview:
        return preview_unwrap(self.vault, share_amount, self._state.unwrap_fee_bps)
