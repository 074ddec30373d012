"""
Wallet address resolution for invoice payments.

Precedence: non-empty invoice override, then the business-wide default
for the method, then a method-specific "no address configured" error.
"""

from invoicepay.config.crypto import CryptoSettings
from invoicepay.crypto.interfaces import TokenType

from .errors import NoBSVAddressError, NoUSDCAddressError, UnsupportedPaymentMethodError
from .models import Invoice, PaymentMethod


def parse_payment_method(method: PaymentMethod | str) -> PaymentMethod:
    try:
        return PaymentMethod(method)
    except ValueError:
        raise UnsupportedPaymentMethodError(method) from None


def resolve_payment_address(
    invoice: Invoice, method: PaymentMethod | str, crypto: CryptoSettings
) -> tuple[str, TokenType]:
    """
    Returns the address to verify against and the token it holds.

    Args:
        invoice: Invoice being verified
        method: Payment method (USDC or BSV)
        crypto: Business-wide crypto settings with default addresses

    Raises:
        UnsupportedPaymentMethodError: method is not a crypto method
        NoUSDCAddressError / NoBSVAddressError: no address for the method
    """
    method = parse_payment_method(method)
    if not method.is_crypto:
        raise UnsupportedPaymentMethodError(method.value, "for non-crypto payments")

    override = invoice.address_override(method)
    if override:
        return override, method.token

    if method is PaymentMethod.USDC:
        default, missing = crypto.usdc_address, NoUSDCAddressError
    else:
        default, missing = crypto.bsv_address, NoBSVAddressError

    if default and default.strip():
        return default, method.token
    raise missing(method.value)
