"""
Protocol-based interface for blockchain data providers.
Enables chain-agnostic, read-only payment verification.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from typing import Protocol


class TokenType(str, Enum):
    """Asset identifier; selects decimal and contract rules."""

    USDC = "USDC"
    BSV = "BSV"


@dataclass(frozen=True)
class Transaction:
    """
    Incoming on-chain transfer as reported by a provider.
    Amount is already converted to human units.
    """

    hash: str  # Provider-specific transaction ID
    from_address: str
    to_address: str  # Case preserved exactly as reported
    amount: Decimal
    token: TokenType
    block_number: int
    timestamp: datetime  # Block inclusion time (UTC)
    confirmed: bool


@dataclass(frozen=True)
class BalanceResult:
    """Point-in-time balance snapshot, recomputed on every verification."""

    address: str
    balance: Decimal
    token: TokenType
    as_of: datetime
    provider: str


@dataclass(frozen=True)
class TransactionQuery:
    """
    Parameters for listing transactions.
    Optional bounds are combined with AND semantics.
    """

    address: str
    token: TokenType
    start_time: datetime | None = None
    end_time: datetime | None = None
    min_amount: Decimal | None = None

    def __post_init__(self) -> None:
        # Naive bounds are taken as UTC so they compare with block timestamps
        for attr in ("start_time", "end_time"):
            value = getattr(self, attr)
            if value is not None and value.tzinfo is None:
                object.__setattr__(self, attr, value.replace(tzinfo=UTC))

    def matches(self, tx: Transaction) -> bool:
        """Client-side filter shared by providers lacking native range queries."""
        if tx.token != self.token:
            return False
        if self.start_time is not None and tx.timestamp < self.start_time:
            return False
        if self.end_time is not None and tx.timestamp > self.end_time:
            return False
        if self.min_amount is not None and tx.amount < self.min_amount:
            return False
        return True


class BlockchainProvider(Protocol):
    """
    Protocol defining the interface for read-only blockchain data providers.

    Implementations:
    - EtherscanProvider: USDC on Ethereum via the Etherscan V2 API
    - BSVProvider: Bitcoin SV (declared, not yet backed by a data source)
    - MockProvider: deterministic offline double for tests
    """

    async def get_balance(self, address: str, token: TokenType) -> BalanceResult:
        """
        Returns the current balance for an address.

        Raises:
            UnsupportedTokenError: token is not in supported_tokens()
            ProviderNotImplementedError: token declared but not backed yet
            ProviderTransportError: request could not be completed
        """
        ...

    async def get_transactions(self, query: TransactionQuery) -> list[Transaction]:
        """Returns incoming transactions for query.address matching the query."""
        ...

    def name(self) -> str:
        """Provider name reported in verification evidence."""
        ...

    def supported_tokens(self) -> list[TokenType]: ...
