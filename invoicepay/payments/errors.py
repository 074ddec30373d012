"""
Errors raised while preparing or applying a payment verification.

These are configuration problems the operator must fix. Domain outcomes
(not found, partial, pending) are never errors; they are regular
PaymentVerification results.
"""


class PaymentError(Exception):
    """Base class for payment verification failures."""


class PaymentConfigurationError(PaymentError):
    """Verification cannot run with the current configuration."""


class UnsupportedPaymentMethodError(PaymentConfigurationError):
    def __init__(self, method: object, reason: str = ""):
        detail = f" {reason}" if reason else ""
        super().__init__(f"unsupported payment method{detail}: {method}")
        self.method = method


class NoPaymentAddressError(PaymentConfigurationError):
    """Neither the invoice nor the business config names an address."""

    config_key = ""

    def __init__(self, method: object):
        hint = f" (set {self.config_key} or an invoice override)" if self.config_key else ""
        super().__init__(f"no {method} address configured{hint}")
        self.method = method


class NoUSDCAddressError(NoPaymentAddressError):
    config_key = "INVOICEPAY_CRYPTO__USDC_ADDRESS"


class NoBSVAddressError(NoPaymentAddressError):
    config_key = "INVOICEPAY_CRYPTO__BSV_ADDRESS"


class CurrencyMismatchError(PaymentConfigurationError):
    """Observed token amounts cannot be compared with the invoice currency."""

    def __init__(self, token: object, currency: str):
        super().__init__(
            f"cannot compare {token} amounts with invoice totals in {currency} "
            "without an exchange rate"
        )
        self.token = token
        self.currency = currency


class InvalidPaymentRequestError(PaymentError):
    """Verify request is missing fields or carries invalid values."""


class VerificationNotSuccessfulError(PaymentError):
    """Paid-marking was attempted with a non-successful verification."""

    def __init__(self, status: object):
        super().__init__(f"refusing to mark invoice paid for verification status {status}")
        self.status = status
