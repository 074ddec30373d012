"""Invoice payment verification: models, address resolution, engine."""

from .errors import (
    CurrencyMismatchError,
    InvalidPaymentRequestError,
    NoBSVAddressError,
    NoPaymentAddressError,
    NoUSDCAddressError,
    PaymentConfigurationError,
    PaymentError,
    UnsupportedPaymentMethodError,
    VerificationNotSuccessfulError,
)
from .models import (
    Invoice,
    InvoiceStatus,
    PaymentEvidence,
    PaymentMethod,
    PaymentStatus,
    PaymentVerification,
    VerifyPaymentRequest,
)

__all__ = [
    "CurrencyMismatchError",
    "InvalidPaymentRequestError",
    "Invoice",
    "InvoiceStatus",
    "NoBSVAddressError",
    "NoPaymentAddressError",
    "NoUSDCAddressError",
    "PaymentConfigurationError",
    "PaymentError",
    "PaymentEvidence",
    "PaymentMethod",
    "PaymentStatus",
    "PaymentVerification",
    "UnsupportedPaymentMethodError",
    "VerificationNotSuccessfulError",
    "VerifyPaymentRequest",
]
