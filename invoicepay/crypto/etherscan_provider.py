"""
Etherscan payment data provider.
Reads USDC (ERC-20) balances and incoming transfers via the Etherscan V2 API.
"""

import asyncio
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

import httpx
import structlog

from .errors import (
    InvalidAPIKeyError,
    MissingAPIKeyError,
    ProviderAPIError,
    ProviderConnectionError,
    ProviderDataError,
    ProviderHTTPStatusError,
    ProviderRateLimitError,
    UnsupportedTokenError,
)
from .interfaces import BalanceResult, TokenType, Transaction, TransactionQuery
from .ratelimit import DEFAULT_RATE_PER_SECOND, RequestThrottle, backoff_delay_seconds
from .units import USDC_DECIMALS, to_decimal_units

logger = structlog.get_logger(__name__)

# V2 endpoint serves every chain; the chain is picked by the chainid parameter
ETHERSCAN_V2_URL = "https://api.etherscan.io/v2/api"

DEFAULT_TIMEOUT_SECONDS = 30.0

NO_TRANSACTIONS_MESSAGE = "No transactions found"


@dataclass(frozen=True)
class EtherscanNetwork:
    """
    Chain id and USDC contract for one network.

    The two values always travel together: a chain id paired with another
    network's contract silently returns wrong balances upstream.
    """

    chain_id: int
    usdc_contract: str
    provider_name: str


MAINNET = EtherscanNetwork(
    chain_id=1,
    usdc_contract="0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48",
    provider_name="etherscan",
)
SEPOLIA = EtherscanNetwork(
    chain_id=11155111,
    usdc_contract="0x1c7D4B196Cb0C7B01d743Fbc6116a902379C7238",
    provider_name="etherscan-sepolia",
)


class EtherscanProvider:
    """
    USDC on Ethereum via Etherscan.

    Supports:
    - Token balance lookups (action=tokenbalance)
    - Incoming transfer listing (action=tokentx), filtered client-side
    - Mainnet or Sepolia, selected by a single testnet flag
    """

    def __init__(
        self,
        api_key: str = "",
        testnet: bool = False,
        *,
        client: httpx.AsyncClient | None = None,
        api_url: str = ETHERSCAN_V2_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        rate_per_second: float = DEFAULT_RATE_PER_SECOND,
        max_retries: int = 3,
        retry_base_delay: float = 1.0,
        retry_max_delay: float = 8.0,
    ):
        """
        Initialize Etherscan provider.

        Args:
            api_key: Etherscan API key (optional, the free tier works without one)
            testnet: Use Sepolia instead of mainnet
            client: Pre-built HTTP client (the provider then does not close it)
            api_url: Etherscan-compatible endpoint
            timeout: Per-request HTTP timeout in seconds
            rate_per_second: Outgoing request budget
            max_retries: Retries after an upstream rate-limit response
            retry_base_delay: First backoff delay in seconds
            retry_max_delay: Backoff ceiling in seconds
        """
        self.api_key = api_key
        self.testnet = testnet
        self.network = SEPOLIA if testnet else MAINNET
        self.api_url = api_url
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay
        self.retry_max_delay = retry_max_delay
        self.throttle = RequestThrottle(rate_per_second)

        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

        logger.info(
            "etherscan_provider_initialized",
            provider=self.name(),
            chain_id=self.network.chain_id,
            api_key_configured=bool(api_key),
        )

    def name(self) -> str:
        return self.network.provider_name

    def supported_tokens(self) -> list[TokenType]:
        return [TokenType.USDC]

    async def get_balance(self, address: str, token: TokenType) -> BalanceResult:
        """
        Returns the USDC balance for an Ethereum address.

        Args:
            address: Wallet address to query
            token: Must be TokenType.USDC

        Returns:
            BalanceResult with the balance in whole USDC
        """
        self._check_token(token)

        data = await self._request(
            {
                "action": "tokenbalance",
                "address": address,
                "tag": "latest",
            }
        )
        if data.get("status") != "1":
            self._raise_api_failure(data)

        result = data.get("result")
        if not isinstance(result, (str, int)):
            raise ProviderDataError(f"unexpected balance result: {result!r}")
        balance = to_decimal_units(result, USDC_DECIMALS)

        logger.debug(
            "balance_fetched", provider=self.name(), address=address, balance=str(balance)
        )
        return BalanceResult(
            address=address,
            balance=balance,
            token=TokenType.USDC,
            as_of=datetime.now(UTC),
            provider=self.name(),
        )

    async def get_transactions(self, query: TransactionQuery) -> list[Transaction]:
        """
        Returns incoming USDC transfers for query.address.

        Etherscan has no timestamp-range filter, so the full ascending list
        is requested and the time window and minimum amount are applied
        locally after unit conversion. Transfers sent from the address to
        other parties are dropped.
        """
        self._check_token(query.token)

        data = await self._request(
            {
                "action": "tokentx",
                "address": query.address,
                "startblock": "0",
                "sort": "asc",
            }
        )
        if data.get("status") != "1":
            if data.get("message") == NO_TRANSACTIONS_MESSAGE:
                return []
            self._raise_api_failure(data)

        records = data.get("result")
        if not isinstance(records, list):
            raise ProviderDataError(f"unexpected transaction list: {records!r}")

        transactions = []
        for record in records:
            tx = self._parse_transfer(record)
            if not _same_address(tx.to_address, query.address):
                continue
            if query.matches(tx):
                transactions.append(tx)

        logger.debug(
            "transactions_fetched",
            provider=self.name(),
            address=query.address,
            received=len(records),
            matched=len(transactions),
        )
        return transactions

    async def aclose(self) -> None:
        """Closes the HTTP client if this provider created it."""
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> "EtherscanProvider":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    def _check_token(self, token: TokenType) -> None:
        if token not in self.supported_tokens():
            raise UnsupportedTokenError(self.name(), token)

    async def _request(self, params: dict[str, str]) -> dict[str, Any]:
        """
        Issues one throttled GET and returns the decoded JSON body.

        Rate-limit answers (HTTP 429 or a "rate limit" result) are retried
        with exponential backoff and raised as ProviderRateLimitError once
        retries are exhausted.
        """
        full_params = {
            "chainid": str(self.network.chain_id),
            "module": "account",
            "contractaddress": self.network.usdc_contract,
            **params,
        }
        if self.api_key:
            full_params["apikey"] = self.api_key

        attempt = 0
        while True:
            attempt += 1
            await self.throttle.wait()
            try:
                response = await self.client.get(self.api_url, params=full_params)
            except httpx.TimeoutException as e:
                raise ProviderConnectionError(
                    f"{self.name()} request timed out: {e}"
                ) from e
            except httpx.RequestError as e:
                raise ProviderConnectionError(f"{self.name()} request failed: {e}") from e

            rate_limited = response.status_code == 429
            data: dict[str, Any] = {}
            if not rate_limited:
                if not response.is_success:
                    raise ProviderHTTPStatusError(self.name(), response.status_code)
                try:
                    data = response.json()
                except ValueError as e:
                    raise ProviderDataError(
                        f"{self.name()} returned invalid JSON"
                    ) from e
                if not isinstance(data, dict):
                    raise ProviderDataError(f"{self.name()} returned {type(data).__name__}")
                rate_limited = _is_rate_limited(data)

            if not rate_limited:
                return data

            if attempt > self.max_retries:
                raise ProviderRateLimitError(
                    f"{self.name()} rate limit exceeded after {self.max_retries} retries"
                )
            delay = backoff_delay_seconds(
                attempt, self.retry_base_delay, self.retry_max_delay
            )
            logger.warning(
                "rate_limited", provider=self.name(), attempt=attempt, retry_in=delay
            )
            await asyncio.sleep(delay)

    def _raise_api_failure(self, data: dict[str, Any]) -> None:
        message = str(data.get("message") or "")
        if message in ("", "NOTOK"):
            if not self.api_key:
                raise MissingAPIKeyError(self.name())
            raise InvalidAPIKeyError(self.name())
        raise ProviderAPIError(self.name(), message)

    def _parse_transfer(self, record: Any) -> Transaction:
        if not isinstance(record, dict):
            raise ProviderDataError(f"unexpected transfer record: {record!r}")
        try:
            timestamp = datetime.fromtimestamp(int(record["timeStamp"]), tz=UTC)
            block_number = int(record["blockNumber"])
            tx_hash = record["hash"]
            from_address = record["from"]
            to_address = record["to"]
            value = record["value"]
        except (KeyError, ValueError, TypeError, OverflowError) as e:
            raise ProviderDataError(f"malformed transfer record: {e}") from e

        return Transaction(
            hash=tx_hash,
            from_address=from_address,
            to_address=to_address,
            amount=to_decimal_units(value, USDC_DECIMALS),
            token=TokenType.USDC,
            block_number=block_number,
            timestamp=timestamp,
            # tokentx only lists mined transfers
            confirmed=True,
        )


def _is_rate_limited(data: dict[str, Any]) -> bool:
    if data.get("status") == "1":
        return False
    text = f"{data.get('message', '')} {data.get('result', '')}".lower()
    return "rate limit" in text


def _same_address(a: str, b: str) -> bool:
    # Hex addresses differ only by EIP-55 checksum casing
    return a.lower() == b.lower()
