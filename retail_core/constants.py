"""Constants and configuration for the retail deposit gateway."""

# Mainnet King vault (EtherFi). Use --king to override for forks/testnets.
KING_MAINNET = "0x8F08B70456eb22f6109F57b8fafE862ED28E6040"

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
MAX_UINT256 = 2**256 - 1

TOTAL_BASIS_POINTS = 100_00
MAX_FEE_BPS = 50_00  # 50%

ONE_HOUR = 60 * 60
THIRTY_DAYS = 30 * 24 * ONE_HOUR
MIN_EPOCH_DURATION = ONE_HOUR
MAX_EPOCH_DURATION = THIRTY_DAYS

DEFAULT_ADMIN_ROLE = "DEFAULT_ADMIN_ROLE"
PAUSER_ROLE = "PAUSER_ROLE"

# USD values are expressed with 18 decimals.
USD_DECIMALS = 18

# Minimal ABI for King - only the views the read model needs.
KING_MIN_ABI: list[dict] = [
    {
        "type": "function",
        "name": "allTokens",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "address[]"}],
    },
    {
        "type": "function",
        "name": "isTokenWhitelisted",
        "stateMutability": "view",
        "inputs": [{"name": "token", "type": "address"}],
        "outputs": [{"name": "", "type": "bool"}],
    },
    {
        "type": "function",
        "name": "priceProvider",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "address"}],
    },
    {
        "type": "function",
        "name": "totalAssets",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [
            {"name": "", "type": "address[]"},
            {"name": "", "type": "uint256[]"},
        ],
    },
    {
        "type": "function",
        "name": "balanceOf",
        "stateMutability": "view",
        "inputs": [{"name": "account", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "type": "function",
        "name": "previewDeposit",
        "stateMutability": "view",
        "inputs": [
            {"name": "tokens", "type": "address[]"},
            {"name": "amounts", "type": "uint256[]"},
        ],
        "outputs": [
            {"name": "shares", "type": "uint256"},
            {"name": "fee", "type": "uint256"},
        ],
    },
    {
        "type": "function",
        "name": "previewRedeem",
        "stateMutability": "view",
        "inputs": [{"name": "vaultShares", "type": "uint256"}],
        "outputs": [
            {"name": "tokens", "type": "address[]"},
            {"name": "amounts", "type": "uint256[]"},
            {"name": "fee", "type": "uint256"},
        ],
    },
]

# Minimal ABI for King's PriceProvider.
PRICE_PROVIDER_MIN_ABI: list[dict] = [
    {
        "type": "function",
        "name": "getPriceInEth",
        "stateMutability": "view",
        "inputs": [{"name": "token", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "type": "function",
        "name": "getEthUsdPrice",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [
            {"name": "price", "type": "uint256"},
            {"name": "decimals", "type": "uint8"},
        ],
    },
]

ERC20_METADATA_MIN_ABI: list[dict] = [
    {
        "type": "function",
        "name": "decimals",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint8"}],
    },
    {
        "type": "function",
        "name": "symbol",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "string"}],
    },
]

# Cache configuration
CACHE_DIR_NAME = ".retail_core_cache"
CACHE_VERSION = "1"  # Increment to invalidate all caches
