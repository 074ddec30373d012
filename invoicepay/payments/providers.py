from invoicepay.config.crypto import CryptoSettings
from invoicepay.crypto.bsv_provider import BSVProvider
from invoicepay.crypto.etherscan_provider import EtherscanProvider
from invoicepay.crypto.interfaces import BlockchainProvider

from .errors import UnsupportedPaymentMethodError
from .models import PaymentMethod
from .resolver import parse_payment_method


def create_provider(
    method: PaymentMethod | str,
    crypto: CryptoSettings,
    *,
    testnet: bool | None = None,
    api_key: str | None = None,
) -> BlockchainProvider:
    """
    Builds the provider that verifies payments made with method.

    Explicit testnet/api_key arguments (CLI flags) take precedence over
    the configured values.
    """
    method = parse_payment_method(method)
    use_testnet = crypto.testnet if testnet is None else testnet

    if method is PaymentMethod.USDC:
        key = api_key or crypto.etherscan_api_key.get_secret_value()
        return EtherscanProvider(
            api_key=key,
            testnet=use_testnet,
            timeout=crypto.request_timeout_seconds,
            rate_per_second=crypto.rate_limit_per_second,
            max_retries=crypto.max_retries,
            retry_base_delay=crypto.retry_base_delay_seconds,
        )
    if method is PaymentMethod.BSV:
        return BSVProvider(testnet=use_testnet)
    raise UnsupportedPaymentMethodError(method.value, "for non-crypto payments")
