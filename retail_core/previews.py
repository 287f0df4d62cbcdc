"""Non-mutating simulations of the deposit and unwrap paths."""

from collections.abc import Sequence

from retail_core.errors import (
    AssetArrayLengthMismatchError,
    CollaboratorCallError,
    PreviewDepositFailedError,
    PreviewRedeemFailedError,
)
from retail_core.fees import split_fee
from retail_core.interfaces import Vault
from retail_core.models import DepositPreview, UnwrapPreview


def failure_reason(ex: BaseException) -> str | None:
    """The collaborator's own failure text, if it gave one."""
    if isinstance(ex, CollaboratorCallError):
        return ex.reason
    text = str(ex).strip()
    return text or None


def preview_deposit(vault: Vault, tokens: Sequence[str], amounts: Sequence[int], fee_bps: int) -> DepositPreview:
    """Shares the depositor would receive after the vault's and the retail fee."""
    if len(tokens) != len(amounts):
        raise AssetArrayLengthMismatchError(len(tokens), len(amounts))
    if not tokens:
        return DepositPreview(king_to_receive_net=0, retail_fee_amount=0, king_internal_fee_amount=0)

    try:
        gross, king_fee = vault.preview_deposit(list(tokens), list(amounts))
    except Exception as ex:  # pylint: disable=broad-exception-caught
        raise PreviewDepositFailedError(failure_reason(ex)) from ex

    net, fee = split_fee(int(gross), fee_bps)
    return DepositPreview(king_to_receive_net=net, retail_fee_amount=fee, king_internal_fee_amount=int(king_fee))


def preview_unwrap(vault: Vault, share_amount: int, fee_bps: int) -> UnwrapPreview:
    """Underlying assets an unwrap of `share_amount` would pay out."""
    if share_amount == 0:
        return UnwrapPreview(tokens=[], amounts=[], fee_amount=0, king_fee_amount=0)

    net, fee = split_fee(share_amount, fee_bps)
    if net == 0:
        return UnwrapPreview(tokens=[], amounts=[], fee_amount=fee, king_fee_amount=0)

    try:
        tokens, amounts, king_fee = vault.preview_redeem(net)
    except Exception as ex:  # pylint: disable=broad-exception-caught
        raise PreviewRedeemFailedError(failure_reason(ex)) from ex

    return UnwrapPreview(
        tokens=list(tokens),
        amounts=[int(a) for a in amounts],
        fee_amount=fee,
        king_fee_amount=int(king_fee),
    )
