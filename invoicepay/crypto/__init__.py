"""Blockchain data providers for chain-agnostic payment verification."""

from .bsv_provider import BSVProvider
from .errors import (
    BlockchainError,
    ProviderConfigurationError,
    ProviderDataError,
    ProviderNotImplementedError,
    ProviderTransportError,
    UnsupportedTokenError,
)
from .etherscan_provider import EtherscanProvider
from .interfaces import (
    BalanceResult,
    BlockchainProvider,
    TokenType,
    Transaction,
    TransactionQuery,
)
from .mock_provider import MockProvider

__all__ = [
    "BSVProvider",
    "BalanceResult",
    "BlockchainError",
    "BlockchainProvider",
    "EtherscanProvider",
    "MockProvider",
    "ProviderConfigurationError",
    "ProviderDataError",
    "ProviderNotImplementedError",
    "ProviderTransportError",
    "TokenType",
    "Transaction",
    "TransactionQuery",
    "UnsupportedTokenError",
]
