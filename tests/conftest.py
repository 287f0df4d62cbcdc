import pytest

from retail_core.constants import MAX_UINT256
from retail_core.core import RetailCore
from retail_core.ledger import InMemoryLedger
from retail_core.sim import InMemoryKing, StaticPriceOracle

E18 = 10**18

KING = "0xKing"
RETAIL = "0xRetailCore"
ORACLE = "0xPriceProvider"
TREASURY = "0xKingTreasury"

ADMIN = "0xAdmin"
USER1 = "0xUser1"
USER2 = "0xUser2"
USER3 = "0xUser3"

ETHFI = "0xEthfi"
EIGEN = "0xEigen"
ALT = "0xWeth"
SWELL = "0xSwell"
USDC = "0xUsdc"
TOKENS = (ETHFI, EIGEN, ALT, SWELL)

LIMITS = {
    ETHFI: 100_000 * E18,
    EIGEN: 150_000 * E18,
    ALT: 200_000 * E18,
    SWELL: 500_000 * E18,
}

DEPOSIT_FEE_BPS = 100
UNWRAP_FEE_BPS = 100
EPOCH_DURATION_S = 3600
START_TIME = 1_700_000_000


class FakeClock:
    """Controllable unix-time source."""

    def __init__(self, now: int) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock(START_TIME)


@pytest.fixture
def ledger():
    led = InMemoryLedger()
    for token in TOKENS:
        led.register_token(token, 18)
    led.register_token(USDC, 6)
    return led


@pytest.fixture
def oracle():
    # Every token is worth exactly 1 ETH so shares mint 1:1 with deposited units.
    return StaticPriceOracle(ORACLE, {token: E18 for token in TOKENS})


@pytest.fixture
def king(ledger, oracle):
    vault = InMemoryKing(KING, ledger, oracle, treasury=TREASURY)
    for token in TOKENS:
        vault.add_token(token)
    return vault


@pytest.fixture
def core(king, ledger, clock):
    retail = RetailCore(
        king,
        ledger,
        ADMIN,
        DEPOSIT_FEE_BPS,
        UNWRAP_FEE_BPS,
        EPOCH_DURATION_S,
        address=RETAIL,
        clock=clock,
    )
    king.set_depositors([RETAIL], [True])
    retail.set_deposit_limits(list(LIMITS), list(LIMITS.values()), caller=ADMIN)
    for user in (USER1, USER2, USER3):
        for token in TOKENS:
            ledger.mint(token, user, 1_000_000 * E18)
            ledger.approve(token, user, RETAIL, MAX_UINT256)
        ledger.approve(KING, user, RETAIL, MAX_UINT256)
    return retail
