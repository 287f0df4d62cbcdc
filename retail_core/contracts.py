"""Contract interaction functions."""

from typing import TYPE_CHECKING, Any

from retail_core.constants import ERC20_METADATA_MIN_ABI, KING_MIN_ABI, PRICE_PROVIDER_MIN_ABI
from retail_core.models import KingContracts

if TYPE_CHECKING:
    from web3 import Web3  # pragma: no cover


def king_contract(w3: "Web3", address: str) -> Any:
    return w3.eth.contract(address=w3.to_checksum_address(address), abi=KING_MIN_ABI)


def price_provider_contract(w3: "Web3", address: str) -> Any:
    return w3.eth.contract(address=w3.to_checksum_address(address), abi=PRICE_PROVIDER_MIN_ABI)


def erc20_contract(w3: "Web3", address: str) -> Any:
    return w3.eth.contract(address=w3.to_checksum_address(address), abi=ERC20_METADATA_MIN_ABI)


def resolve_king_contracts(w3: "Web3", king_address: str) -> KingContracts:
    """
    Resolve the addresses the gateway talks to from the King vault.

    King is the single entry point: the price provider is whatever King currently points to.
    """
    king = king_contract(w3, king_address)
    price_provider = king.functions.priceProvider().call()
    return KingContracts(king=w3.to_checksum_address(king_address), price_provider=price_provider)
