"""
Error taxonomy for blockchain data providers.

Configuration errors are surfaced immediately and never retried. Transport
errors are retryable at the caller's discretion. Data errors fail the call
without partial recovery.
"""


class BlockchainError(Exception):
    """Base class for every provider-side failure."""

    retryable: bool = False


class ProviderConfigurationError(BlockchainError):
    """Provider cannot be used as configured (missing or rejected credentials)."""


class MissingAPIKeyError(ProviderConfigurationError):
    """Upstream rejected the call and no API key is configured."""

    def __init__(self, provider: str):
        super().__init__(
            f"{provider}: missing or invalid API key "
            "(set INVOICEPAY_CRYPTO__ETHERSCAN_API_KEY or pass --etherscan-api-key)"
        )
        self.provider = provider


class InvalidAPIKeyError(ProviderConfigurationError):
    """Upstream rejected the call although an API key is configured."""

    def __init__(self, provider: str):
        super().__init__(f"{provider}: invalid API key or rate limit exceeded")
        self.provider = provider


class UnsupportedTokenError(BlockchainError):
    """Token is not in the provider's supported_tokens()."""

    def __init__(self, provider: str, token: object):
        super().__init__(f"{provider} does not support token {token}")
        self.provider = provider
        self.token = token


class ProviderNotImplementedError(BlockchainError):
    """Token is declared supported but the backend is not wired to a data source."""

    def __init__(self, provider: str, token: object, backend: str = ""):
        planned = f" (planned backend: {backend})" if backend else ""
        super().__init__(
            f"{provider} declares {token} support but has no data source yet{planned}; "
            "verify this payment manually"
        )
        self.provider = provider
        self.token = token
        self.backend = backend


class ProviderTransportError(BlockchainError):
    """Request did not complete (HTTP status, connection, timeout)."""

    retryable = True


class ProviderHTTPStatusError(ProviderTransportError):
    def __init__(self, provider: str, status_code: int):
        super().__init__(f"{provider} API returned HTTP {status_code}")
        self.provider = provider
        self.status_code = status_code


class ProviderConnectionError(ProviderTransportError):
    """Connection failure or upstream timeout."""


class ProviderRateLimitError(ProviderTransportError):
    """Upstream rate limit still hit after backoff."""


class ProviderDataError(BlockchainError):
    """Provider answered with a body that cannot be interpreted."""


class ProviderAPIError(BlockchainError):
    """Upstream answered with an API-level failure carrying its own message."""

    def __init__(self, provider: str, message: str):
        super().__init__(f"{provider} API error: {message}")
        self.provider = provider
        self.api_message = message


class UnknownScenarioError(BlockchainError):
    """Mock provider was asked for a scenario it does not know."""


class MockNetworkError(ProviderConnectionError):
    """Fixed transient failure injected by the mock provider."""

    def __init__(self) -> None:
        super().__init__("network error: connection timeout")