"""
Deterministic offline provider for tests and demos.
"""

from collections import defaultdict
from datetime import UTC, datetime, timedelta
from decimal import Decimal

from .errors import MockNetworkError, UnknownScenarioError, UnsupportedTokenError
from .interfaces import BalanceResult, TokenType, Transaction, TransactionQuery

SCENARIOS = (
    "payment_found",
    "payment_not_found",
    "partial_payment",
    "overpayment",
    "pending_payment",
    "network_error",
)


class MockProvider:
    """
    Scriptable provider returning configured balances and transactions.

    Configure directly with set_balance/add_transaction/set_*_error or
    through mock_payment_scenario(). reset() restores a blank provider.
    """

    def __init__(
        self,
        name: str = "mock",
        supported_tokens: list[TokenType] | None = None,
    ):
        self._name = name
        self._supported_tokens = supported_tokens or [TokenType.USDC, TokenType.BSV]
        self.reset()

    def name(self) -> str:
        return self._name

    def supported_tokens(self) -> list[TokenType]:
        return list(self._supported_tokens)

    def set_balance(self, address: str, token: TokenType, balance: Decimal) -> None:
        self._balances[address][token] = Decimal(balance)

    def add_transaction(self, address: str, tx: Transaction) -> None:
        self._transactions[address].append(tx)

    def set_balance_error(self, error: Exception | None) -> None:
        self._balance_error = error

    def set_transaction_error(self, error: Exception | None) -> None:
        self._transaction_error = error

    def reset(self) -> None:
        """Clears balances, transactions, injected errors and the call log."""
        self._balances: dict[str, dict[TokenType, Decimal]] = defaultdict(dict)
        self._transactions: dict[str, list[Transaction]] = defaultdict(list)
        self._balance_error: Exception | None = None
        self._transaction_error: Exception | None = None
        self.call_log: list[tuple[str, str]] = []

    async def get_balance(self, address: str, token: TokenType) -> BalanceResult:
        self.call_log.append(("get_balance", address))
        self._check_token(token)
        if self._balance_error is not None:
            raise self._balance_error

        return BalanceResult(
            address=address,
            balance=self._balances.get(address, {}).get(token, Decimal("0")),
            token=token,
            as_of=datetime.now(UTC),
            provider=self._name,
        )

    async def get_transactions(self, query: TransactionQuery) -> list[Transaction]:
        self.call_log.append(("get_transactions", query.address))
        self._check_token(query.token)
        if self._transaction_error is not None:
            raise self._transaction_error

        return [tx for tx in self._transactions.get(query.address, []) if query.matches(tx)]

    def mock_payment_scenario(
        self, scenario: str, address: str, amount: Decimal, token: TokenType
    ) -> None:
        """
        Configures the provider for a common verification scenario.

        Scenarios:
            payment_found: balance == amount, one confirmed matching transfer
            payment_not_found: zero balance, no transfers
            partial_payment: balance == 50% of amount
            overpayment: balance == 150% of amount
            pending_payment: balance == amount, transfer not yet confirmed
            network_error: balance and transaction calls fail with MockNetworkError

        Raises:
            UnknownScenarioError: scenario is not one of the above
        """
        amount = Decimal(amount)
        now = datetime.now(UTC)

        if scenario == "payment_found":
            self._fund(address, token, amount, "0xmocktxhash123", 12345678, now - timedelta(hours=1))
        elif scenario == "payment_not_found":
            self.set_balance(address, token, Decimal("0"))
        elif scenario == "partial_payment":
            partial = amount * Decimal("0.5")
            self._fund(address, token, partial, "0xmocktxhash456", 12345679, now - timedelta(minutes=30))
        elif scenario == "overpayment":
            overpaid = amount * Decimal("1.5")
            self._fund(address, token, overpaid, "0xmocktxhash789", 12345680, now - timedelta(hours=2))
        elif scenario == "pending_payment":
            self._fund(
                address, token, amount, "0xmocktxhashabc", 12345681, now - timedelta(minutes=1),
                confirmed=False,
            )
        elif scenario == "network_error":
            self.set_balance_error(MockNetworkError())
            self.set_transaction_error(MockNetworkError())
        else:
            raise UnknownScenarioError(f"unknown scenario: {scenario}")

    def _fund(
        self,
        address: str,
        token: TokenType,
        amount: Decimal,
        tx_hash: str,
        block_number: int,
        timestamp: datetime,
        confirmed: bool = True,
    ) -> None:
        self.set_balance(address, token, amount)
        self.add_transaction(
            address,
            Transaction(
                hash=tx_hash,
                from_address="0xsenderaddress",
                to_address=address,
                amount=amount,
                token=token,
                block_number=block_number,
                timestamp=timestamp,
                confirmed=confirmed,
            ),
        )

    def _check_token(self, token: TokenType) -> None:
        if token not in self._supported_tokens:
            raise UnsupportedTokenError(self._name, token)
