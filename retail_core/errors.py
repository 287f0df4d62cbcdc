"""Error taxonomy for the retail deposit gateway.

Every failure aborts the whole operation; callers can catch a category
(``PolicyRejectionError``) or a specific condition (``TokenPausedError``).
"""


class RetailCoreError(Exception):
    """Base class for all gateway failures."""


# Input validation


class InputValidationError(RetailCoreError):
    """Malformed call arguments."""


class ZeroAddressError(InputValidationError):
    def __init__(self, what: str) -> None:
        super().__init__(f"{what} must not be the zero address")
        self.what = what


class AssetArrayLengthMismatchError(InputValidationError):
    def __init__(self, tokens_len: int, amounts_len: int) -> None:
        super().__init__(f"tokens/amounts length mismatch: {tokens_len} != {amounts_len}")
        self.tokens_len = tokens_len
        self.amounts_len = amounts_len


class EmptyDepositError(InputValidationError):
    def __init__(self) -> None:
        super().__init__("deposit batch is empty")


class InvalidAmountError(InputValidationError):
    def __init__(self, token: str | None = None) -> None:
        msg = "amount must be > 0" if token is None else f"amount for {token} must be > 0"
        super().__init__(msg)
        self.token = token


class DuplicateTokenError(InputValidationError):
    def __init__(self, token: str) -> None:
        super().__init__(f"token {token} appears more than once in the batch")
        self.token = token


# Policy rejection


class PolicyRejectionError(RetailCoreError):
    """The request is well-formed but current policy forbids it."""


class TokenNotWhitelistedError(PolicyRejectionError):
    def __init__(self, token: str) -> None:
        super().__init__(f"token {token} is not whitelisted by the vault")
        self.token = token


class TokenPausedError(PolicyRejectionError):
    def __init__(self, token: str) -> None:
        super().__init__(f"deposits of {token} are paused")
        self.token = token


class EnforcedPauseError(PolicyRejectionError):
    def __init__(self) -> None:
        super().__init__("deposits are globally paused")


class ExpectedPauseError(PolicyRejectionError):
    def __init__(self) -> None:
        super().__init__("deposits are not paused")


class DepositLimitExceededError(PolicyRejectionError):
    def __init__(self, token: str, *, limit: int, used: int, amount: int) -> None:
        super().__init__(f"deposit limit exceeded for {token}: used={used} + amount={amount} > limit={limit}")
        self.token = token
        self.limit = limit
        self.used = used
        self.amount = amount


class ReentrantCallError(PolicyRejectionError):
    def __init__(self) -> None:
        super().__init__("reentrant call")


# Arithmetic / result rejection


class ResultRejectionError(RetailCoreError):
    """The operation would produce an unusable result."""


class DepositTooSmallError(ResultRejectionError):
    def __init__(self, minted_gross: int) -> None:
        super().__init__(f"deposit too small: net shares after fee is 0 (minted={minted_gross})")
        self.minted_gross = minted_gross


class NetUnwrapAmountZeroError(ResultRejectionError):
    def __init__(self, share_amount: int) -> None:
        super().__init__(f"net unwrap amount is 0 for {share_amount} shares")
        self.share_amount = share_amount


# Collaborator failure


class CollaboratorCallError(RetailCoreError):
    """A call into an external collaborator failed.

    ``reason`` holds the collaborator's own failure text when it provided one.
    """

    default_message = "collaborator call failed"

    def __init__(self, reason: str | None = None) -> None:
        super().__init__(reason or self.default_message)
        self.reason = reason


class PreviewDepositFailedError(CollaboratorCallError):
    default_message = "vault deposit preview failed"


class PreviewRedeemFailedError(CollaboratorCallError):
    default_message = "vault redeem preview failed"


class VaultDepositFailedError(CollaboratorCallError):
    default_message = "vault deposit failed"


class VaultRedeemFailedError(CollaboratorCallError):
    default_message = "vault redeem failed"


class AssetSnapshotMismatchError(CollaboratorCallError):
    def __init__(self, before_len: int, after_len: int) -> None:
        super().__init__(f"vault asset set changed during redeem: {before_len} != {after_len}")
        self.before_len = before_len
        self.after_len = after_len


class PriceOracleError(CollaboratorCallError):
    default_message = "price oracle call failed"


# Governance bounds


class GovernanceBoundError(RetailCoreError):
    """A governance setter was called with an out-of-bounds or redundant value."""


class DepositFeeTooBigError(GovernanceBoundError):
    def __init__(self, bps: int, max_bps: int) -> None:
        super().__init__(f"deposit fee {bps} bps exceeds maximum {max_bps} bps")
        self.bps = bps


class UnwrapFeeTooBigError(GovernanceBoundError):
    def __init__(self, bps: int, max_bps: int) -> None:
        super().__init__(f"unwrap fee {bps} bps exceeds maximum {max_bps} bps")
        self.bps = bps


class InvalidEpochDurationError(GovernanceBoundError):
    def __init__(self, duration: int) -> None:
        super().__init__(f"invalid epoch duration: {duration}s")
        self.duration = duration


class AlreadyInThisStateError(GovernanceBoundError):
    def __init__(self, what: str) -> None:
        super().__init__(f"{what} is already in the requested state")
        self.what = what


class NoFeesToWithdrawError(GovernanceBoundError):
    def __init__(self) -> None:
        super().__init__("no fees to withdraw")


# Authorization


class AuthorizationError(RetailCoreError):
    """Caller lacks a required capability."""


class AccessControlUnauthorizedAccountError(AuthorizationError):
    def __init__(self, account: str, role: str) -> None:
        super().__init__(f"account {account} is missing role {role}")
        self.account = account
        self.role = role


class AccessControlBadConfirmationError(AuthorizationError):
    def __init__(self) -> None:
        super().__init__("roles can only be renounced for self")


# Token ledger


class TokenLedgerError(RetailCoreError):
    """A fungible-token transfer could not be performed."""


class InsufficientBalanceError(TokenLedgerError):
    def __init__(self, token: str, account: str, balance: int, needed: int) -> None:
        super().__init__(f"{account} has {balance} of {token}, needs {needed}")
        self.token = token
        self.account = account
        self.balance = balance
        self.needed = needed


class InsufficientAllowanceError(TokenLedgerError):
    def __init__(self, token: str, owner: str, spender: str, allowance: int, needed: int) -> None:
        super().__init__(f"{spender} may spend {allowance} of {owner}'s {token}, needs {needed}")
        self.token = token
        self.owner = owner
        self.spender = spender
        self.allowance = allowance
        self.needed = needed


class UnknownTokenError(TokenLedgerError):
    def __init__(self, token: str) -> None:
        super().__init__(f"unknown token {token}")
        self.token = token
