import pytest

from retail_core.errors import (
    AssetArrayLengthMismatchError,
    DepositLimitExceededError,
    DepositTooSmallError,
    DuplicateTokenError,
    EmptyDepositError,
    EnforcedPauseError,
    InputValidationError,
    InsufficientAllowanceError,
    InvalidAmountError,
    PolicyRejectionError,
    ReentrantCallError,
    TokenNotWhitelistedError,
    TokenPausedError,
    VaultDepositFailedError,
    VaultRedeemFailedError,
)
from retail_core.events import Deposited, Unwrapped
from retail_core.models import TokenAmount
from retail_core.sim import KingError

from conftest import ADMIN, ALT, E18, EIGEN, ETHFI, KING, LIMITS, RETAIL, SWELL, USDC, USER1, USER2, USER3


def _balances(ledger, account):
    return {token: ledger.balance_of(token, account) for token in (ETHFI, EIGEN, ALT, SWELL, KING)}


def test_deposit_mints_net_shares_and_accrues_fee(core, ledger) -> None:
    net = core.deposit_multiple([ETHFI], [E18], caller=USER1)

    assert net == 99 * E18 // 100
    assert ledger.balance_of(KING, USER1) == net
    assert core.accrued_fees == E18 // 100
    assert ledger.balance_of(KING, RETAIL) == core.accrued_fees
    assert ledger.balance_of(ETHFI, USER1) == 1_000_000 * E18 - E18
    assert ledger.balance_of(ETHFI, KING) == E18
    assert core.get_token_deposit_info(ETHFI).used == E18
    assert core.events[-1] == Deposited(
        user=USER1, tokens=(ETHFI,), amounts=(E18,), king_minted_net=net, fee=E18 // 100
    )


def test_multi_token_deposit(core, ledger) -> None:
    net = core.deposit_multiple([ETHFI, EIGEN], [10 * E18, 20 * E18], caller=USER2)

    assert net == 30 * E18 * 99 // 100
    assert core.accrued_fees == 30 * E18 // 100
    assert core.get_token_deposit_info(ETHFI).used == 10 * E18
    assert core.get_token_deposit_info(EIGEN).used == 20 * E18
    assert ledger.balance_of(KING, USER2) == net


def test_deposit_accepts_token_amount_batch(core) -> None:
    net = core.deposit([TokenAmount(ALT, 2 * E18), TokenAmount(SWELL, 3 * E18)], caller=USER3)
    assert net == 5 * E18 * 99 // 100
    assert core.get_token_deposit_info(SWELL).used == 3 * E18


def test_users_share_the_epoch_cap(core) -> None:
    core.deposit_multiple([ETHFI], [60_000 * E18], caller=USER1)
    with pytest.raises(DepositLimitExceededError) as exc:
        core.deposit_multiple([ETHFI], [40_001 * E18], caller=USER2)
    assert exc.value.limit == LIMITS[ETHFI]
    assert exc.value.used == 60_000 * E18
    assert exc.value.amount == 40_001 * E18

    core.deposit_multiple([ETHFI], [40_000 * E18], caller=USER2)
    assert core.get_token_deposit_info(ETHFI).used == LIMITS[ETHFI]


def test_cap_reached_then_admin_reset(core, ledger) -> None:
    core.deposit_multiple([ALT], [200_000 * E18], caller=USER3)
    with pytest.raises(DepositLimitExceededError):
        core.deposit_multiple([ALT], [1], caller=USER3)

    core.reset_epoch(caller=ADMIN)
    assert core.get_token_deposit_info(ALT).used == 0
    core.deposit_multiple([ALT], [200_000 * E18], caller=USER3)
    assert ledger.balance_of(ALT, USER3) == 600_000 * E18


def test_cap_resets_at_the_epoch_boundary(core, clock) -> None:
    core.deposit_multiple([ALT], [200_000 * E18], caller=USER3)
    clock.now = core.get_global_config().next_epoch_timestamp
    core.deposit_multiple([ALT], [200_000 * E18], caller=USER3)
    assert core.get_token_deposit_info(ALT).used == 200_000 * E18


@pytest.mark.parametrize(
    ("tokens", "amounts", "error"),
    [
        ([ETHFI], [0], InvalidAmountError),
        ([ETHFI, EIGEN], [E18, 0], InvalidAmountError),
        ([ETHFI], [-1], InvalidAmountError),
        ([ETHFI, ETHFI], [E18, E18], DuplicateTokenError),
        ([], [], EmptyDepositError),
        ([ETHFI, EIGEN], [E18], AssetArrayLengthMismatchError),
        ([USDC], [E18], TokenNotWhitelistedError),
    ],
)
def test_malformed_or_rejected_batches(core, ledger, tokens, amounts, error) -> None:
    before = _balances(ledger, USER1)
    events_before = len(core.events)
    with pytest.raises(error):
        core.deposit_multiple(tokens, amounts, caller=USER1)
    assert _balances(ledger, USER1) == before
    assert len(core.events) == events_before
    assert core.get_token_deposit_info(ETHFI).used == 0


def test_error_categories(core) -> None:
    with pytest.raises(InputValidationError):
        core.deposit_multiple([], [], caller=USER1)
    with pytest.raises(PolicyRejectionError):
        core.deposit_multiple([USDC], [1], caller=USER1)


def test_token_not_whitelisted_after_vault_delists_it(core, king) -> None:
    king.set_token_whitelisted(EIGEN, False)
    with pytest.raises(TokenNotWhitelistedError) as exc:
        core.deposit_multiple([EIGEN], [E18], caller=USER1)
    assert exc.value.token == EIGEN


def test_paused_token_is_rejected(core) -> None:
    core.set_token_pause(EIGEN, True, caller=ADMIN)
    with pytest.raises(TokenPausedError):
        core.deposit_multiple([ETHFI, EIGEN], [E18, E18], caller=USER1)
    assert core.get_token_deposit_info(ETHFI).used == 0

    core.set_token_pause(EIGEN, False, caller=ADMIN)
    core.deposit_multiple([EIGEN], [E18], caller=USER1)


def test_global_pause_is_checked_first(core) -> None:
    core.pause_deposits(caller=ADMIN)
    with pytest.raises(EnforcedPauseError):
        core.deposit_multiple([ETHFI], [E18], caller=USER1)
    with pytest.raises(EnforcedPauseError):
        core.deposit_multiple([ETHFI, EIGEN], [E18], caller=USER1)

    core.unpause_deposits(caller=ADMIN)
    core.deposit_multiple([ETHFI], [E18], caller=USER1)


def test_zero_limit_disables_token(core) -> None:
    core.set_deposit_limits([SWELL], [0], caller=ADMIN)
    with pytest.raises(DepositLimitExceededError) as exc:
        core.deposit_multiple([SWELL], [1], caller=USER1)
    assert exc.value.limit == 0


def test_failed_entry_rolls_back_the_whole_batch(core, ledger) -> None:
    before = _balances(ledger, USER1)
    with pytest.raises(DepositLimitExceededError):
        core.deposit_multiple([ETHFI, EIGEN], [E18, LIMITS[EIGEN] + 1], caller=USER1)

    assert core.get_token_deposit_info(ETHFI).used == 0
    assert core.get_token_deposit_info(EIGEN).used == 0
    assert _balances(ledger, USER1) == before
    assert core.accrued_fees == 0


def test_limit_shrunk_mid_epoch_blocks_further_deposits(core) -> None:
    core.deposit_multiple([ETHFI], [50_000 * E18], caller=USER1)
    core.set_deposit_limits([ETHFI], [10_000 * E18], caller=ADMIN)

    info = core.get_token_deposit_info(ETHFI)
    assert info.used == 50_000 * E18
    assert info.limit == 10_000 * E18
    with pytest.raises(DepositLimitExceededError):
        core.deposit_multiple([ETHFI], [1], caller=USER1)
    assert ETHFI not in core.get_depositable_tokens()


def test_vault_rejection_surfaces_its_reason(core, king, ledger) -> None:
    king.set_depositors([RETAIL], [False])
    before = _balances(ledger, USER1)

    with pytest.raises(VaultDepositFailedError) as exc:
        core.deposit_multiple([ETHFI], [E18], caller=USER1)

    assert exc.value.reason == "OnlyDepositors"
    assert _balances(ledger, USER1) == before
    assert ledger.balance_of(ETHFI, RETAIL) == 0
    assert ledger.allowance(ETHFI, RETAIL, KING) == 0
    assert core.get_token_deposit_info(ETHFI).used == 0


def test_vault_failure_without_reason_uses_generic_message(core, king, monkeypatch) -> None:
    def fail(tokens, amounts, receiver, *, sender):
        raise KingError()

    monkeypatch.setattr(king, "deposit", fail)
    with pytest.raises(VaultDepositFailedError) as exc:
        core.deposit_multiple([ETHFI], [E18], caller=USER1)
    assert exc.value.reason is None
    assert str(exc.value) == "vault deposit failed"


def test_missing_allowance_aborts(core, ledger) -> None:
    ledger.approve(ETHFI, USER2, RETAIL, 0)
    with pytest.raises(InsufficientAllowanceError):
        core.deposit_multiple([ETHFI], [E18], caller=USER2)
    assert core.get_token_deposit_info(ETHFI).used == 0


def test_reentrant_deposit_is_rejected(core, king, ledger, monkeypatch) -> None:
    def reenter(tokens, amounts, receiver, *, sender):
        core.deposit_multiple([EIGEN], [E18], caller=USER2)

    monkeypatch.setattr(king, "deposit", reenter)
    before = _balances(ledger, USER1)

    with pytest.raises(ReentrantCallError):
        core.deposit_multiple([ETHFI], [E18], caller=USER1)

    assert _balances(ledger, USER1) == before
    assert core.get_token_deposit_info(ETHFI).used == 0
    assert core.get_token_deposit_info(EIGEN).used == 0

    monkeypatch.undo()
    core.deposit_multiple([ETHFI], [E18], caller=USER1)


def test_failed_unwrap_inside_vault_callback_leaves_no_trace(core, king, ledger, monkeypatch) -> None:
    core.deposit_multiple([ETHFI], [100 * E18], caller=USER1)
    accrued = core.accrued_fees
    deposit = king.deposit

    def fail_redeem(shares, *, sender):
        raise KingError("EnforcedPause")

    def deposit_after_swallowed_unwrap(tokens, amounts, receiver, *, sender):
        with pytest.raises(VaultRedeemFailedError):
            core.unwrap(10 * E18, caller=USER1)
        deposit(tokens, amounts, receiver, sender=sender)

    monkeypatch.setattr(king, "redeem", fail_redeem)
    monkeypatch.setattr(king, "deposit", deposit_after_swallowed_unwrap)

    net = core.deposit_multiple([EIGEN], [E18], caller=USER2)

    assert ledger.balance_of(KING, USER1) == 99 * E18
    assert ledger.balance_of(KING, USER2) == net == 99 * E18 // 100
    assert core.accrued_fees == accrued + E18 // 100
    assert ledger.balance_of(KING, RETAIL) == core.accrued_fees
    assert not any(isinstance(e, Unwrapped) for e in core.events)
    assert core.events[-1] == Deposited(
        user=USER2, tokens=(EIGEN,), amounts=(E18,), king_minted_net=net, fee=E18 // 100
    )


def test_single_share_with_zero_fee_is_accepted(core, ledger) -> None:
    """1 wei into an empty vault mints 1 share; the fee rounds to 0 and the deposit goes through."""
    net = core.deposit_multiple([ETHFI], [1], caller=USER1)
    assert net == 1
    assert core.accrued_fees == 0
    assert ledger.balance_of(KING, USER1) == 1


def test_dust_deposit_minting_nothing_is_rejected(core, ledger) -> None:
    core.deposit_multiple([ETHFI], [E18], caller=USER1)
    # Assets sent straight to the vault raise the share price so 1 wei mints 0 shares.
    ledger.mint(ETHFI, KING, 1_000_000 * E18)
    before = _balances(ledger, USER2)

    with pytest.raises(DepositTooSmallError) as exc:
        core.deposit_multiple([EIGEN], [1], caller=USER2)

    assert exc.value.minted_gross == 0
    assert _balances(ledger, USER2) == before
    assert core.get_token_deposit_info(EIGEN).used == 0
    assert core.accrued_fees == E18 // 100


def test_deposit_with_zero_fee(core, ledger) -> None:
    core.set_deposit_fee_bps(0, caller=ADMIN)
    net = core.deposit_multiple([ETHFI], [E18], caller=USER1)
    assert net == E18
    assert core.accrued_fees == 0
    assert core.events[-1].fee == 0
