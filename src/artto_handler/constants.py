"""Shared constants for the Artto handler: supported chains and settlement details."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional


@dataclass(frozen=True)
class ChainDescriptor:
    name: str
    chain_id: int
    rpc_url_template: str
    wrapped_native_token: Optional[str] = None

    def rpc_url(self, credential: str) -> str:
        return f"{self.rpc_url_template}{credential}"


SUPPORTED_CHAINS: List[str] = ["Ethereum", "Base", "Zora", "Shape"]

DEFAULT_RPC_URLS: Dict[str, str] = {
    "Ethereum": "https://eth-mainnet.g.alchemy.com/v2/",
    "Base": "https://base-mainnet.g.alchemy.com/v2/",
    "Zora": "https://zora-mainnet.g.alchemy.com/v2/",
    "Shape": "https://shape-mainnet.g.alchemy.com/v2/",
}

CHAIN_IDS: Dict[str, int] = {
    "Ethereum": 1,
    "Base": 8453,
    "Zora": 7777777,
    "Shape": 360,
}

# WETH on mainnet, the OP stack predeploy everywhere else.
WRAPPED_NATIVE_TOKENS: Dict[str, str] = {
    "Ethereum": "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2",
    "Base": "0x4200000000000000000000000000000000000006",
    "Zora": "0x4200000000000000000000000000000000000006",
    "Shape": "0x4200000000000000000000000000000000000006",
}

CHAINS: Dict[str, ChainDescriptor] = {
    name: ChainDescriptor(
        name=name,
        chain_id=CHAIN_IDS[name],
        rpc_url_template=DEFAULT_RPC_URLS[name],
        wrapped_native_token=WRAPPED_NATIVE_TOKENS.get(name),
    )
    for name in SUPPORTED_CHAINS
}

FUNDING_CHAIN = "Base"

DEFAULT_BILLING_URL = "https://openrouter.ai"
CHARGE_PATH = "/api/v1/credits/coinbase"

MAX_FUNDING_AMOUNT_USD = 2000

# Lowest Uniswap V3 fee tier (0.05%).
DEFAULT_POOL_FEES_TIER = 500
DEFAULT_FUNDING_VALUE_ETH = "0.004"
DEFAULT_FUNDING_VALUE_WEI = 4 * 10**15
DEFAULT_CONFIRMATION_TIMEOUT = 120.0
DEFAULT_RECEIPT_POLL_LATENCY = 1.0

LISTING_TTL_SECONDS = 60 * 60 * 24 * 30

SETTLEMENT_FUNCTION = "swapAndTransferUniswapV3Native"

_INTENT_COMPONENTS = [
    {"internalType": "uint256", "name": "recipientAmount", "type": "uint256"},
    {"internalType": "uint256", "name": "deadline", "type": "uint256"},
    {"internalType": "address payable", "name": "recipient", "type": "address"},
    {"internalType": "address", "name": "recipientCurrency", "type": "address"},
    {"internalType": "address", "name": "refundDestination", "type": "address"},
    {"internalType": "uint256", "name": "feeAmount", "type": "uint256"},
    {"internalType": "bytes16", "name": "id", "type": "bytes16"},
    {"internalType": "address", "name": "operator", "type": "address"},
    {"internalType": "bytes", "name": "signature", "type": "bytes"},
    {"internalType": "bytes", "name": "prefix", "type": "bytes"},
]

SETTLEMENT_ABI = [
    {
        "inputs": [
            {
                "components": _INTENT_COMPONENTS,
                "internalType": "struct TransferIntent",
                "name": "_intent",
                "type": "tuple",
            },
            {"internalType": "uint24", "name": "poolFeesTier", "type": "uint24"},
        ],
        "name": SETTLEMENT_FUNCTION,
        "outputs": [],
        "stateMutability": "payable",
        "type": "function",
    }
]


class UnsupportedChainError(ValueError):
    """Raised when a chain name is not one of the supported chains."""


def resolve_chain(name: str) -> ChainDescriptor:
    try:
        return CHAINS[name]
    except (KeyError, TypeError) as exc:
        raise UnsupportedChainError(f"No configuration for chain {name!r}") from exc
