"""Token amount to USD conversion through the vault's price provider."""

from retail_core.interfaces import PriceOracle


def token_amount_to_eth(oracle: PriceOracle, token: str, amount: int, decimals: int) -> int:
    """Value of `amount` base units of `token` in ETH (18 decimals)."""
    if amount == 0:
        return 0
    return amount * oracle.get_price_in_eth(token) // 10**decimals


def eth_to_usd(oracle: PriceOracle, eth_amount: int) -> int:
    """Convert an 18-decimal ETH amount to an 18-decimal USD amount."""
    if eth_amount == 0:
        return 0
    price, price_decimals = oracle.get_eth_usd_price()
    return eth_amount * price // 10**price_decimals


def token_amount_to_usd(oracle: PriceOracle, token: str, amount: int, decimals: int) -> int:
    """
    Estimate the USD value (18 decimals) of `amount` base units of `token`.

    Oracle failures propagate; a zero amount never queries the oracle.
    """
    return eth_to_usd(oracle, token_amount_to_eth(oracle, token, amount, decimals))


def unit_price_usd(oracle: PriceOracle, token: str, decimals: int) -> int:
    """USD value (18 decimals) of one whole token."""
    return token_amount_to_usd(oracle, token, 10**decimals, decimals)
