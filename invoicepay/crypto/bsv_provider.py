"""
Bitcoin SV provider stub.

BSV is declared as a supported token so routing can offer it, but no data
source is wired yet. Every data-returning call raises
ProviderNotImplementedError, which callers can tell apart from
UnsupportedTokenError.
"""

import structlog

from .errors import ProviderNotImplementedError, UnsupportedTokenError
from .interfaces import BalanceResult, TokenType, Transaction, TransactionQuery

logger = structlog.get_logger(__name__)

WHATSONCHAIN_MAINNET_URL = "https://api.whatsonchain.com/v1/bsv/main"
WHATSONCHAIN_TESTNET_URL = "https://api.whatsonchain.com/v1/bsv/test"


class BSVProvider:
    """
    Bitcoin SV via WhatsOnChain (not implemented).

    A real backend has to convert satoshis to invoice currency using the
    exchange rate at transaction time, so amounts are not directly
    comparable with the invoice total without a rate source.
    """

    def __init__(self, testnet: bool = False):
        self.testnet = testnet
        self.api_url = WHATSONCHAIN_TESTNET_URL if testnet else WHATSONCHAIN_MAINNET_URL

    def name(self) -> str:
        return "whatsonchain-testnet" if self.testnet else "whatsonchain"

    def supported_tokens(self) -> list[TokenType]:
        return [TokenType.BSV]

    async def get_balance(self, address: str, token: TokenType) -> BalanceResult:
        self._not_implemented(token)

    async def get_transactions(self, query: TransactionQuery) -> list[Transaction]:
        self._not_implemented(query.token)

    def _not_implemented(self, token: TokenType):
        if token not in self.supported_tokens():
            raise UnsupportedTokenError(self.name(), token)
        logger.warning(
            "provider_not_implemented",
            provider=self.name(),
            token=token.value,
            backend=self.api_url,
        )
        raise ProviderNotImplementedError(self.name(), token, backend=self.api_url)
