"""
Invoice and payment verification models.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field, field_validator

from invoicepay.crypto.interfaces import TokenType

from .errors import InvalidPaymentRequestError

ZERO = Decimal("0")


class PaymentMethod(str, Enum):
    USDC = "USDC"
    BSV = "BSV"
    ACH = "ACH"
    WIRE = "Wire"
    OTHER = "Other"

    @classmethod
    def _missing_(cls, value: object) -> "PaymentMethod | None":
        # Accept "usdc", "wire" etc. from CLI flags and config files
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.strip().lower():
                    return member
        return None

    @property
    def is_crypto(self) -> bool:
        return self in (PaymentMethod.USDC, PaymentMethod.BSV)

    @property
    def token(self) -> TokenType | None:
        """Token verified on-chain for this method, None for bank methods."""
        if self is PaymentMethod.USDC:
            return TokenType.USDC
        if self is PaymentMethod.BSV:
            return TokenType.BSV
        return None


class InvoiceStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"
    VOIDED = "voided"


class PaymentStatus(str, Enum):
    """Total, mutually exclusive classification of a verification."""

    VERIFIED = "verified"
    OVERPAID = "overpaid"
    PARTIAL = "partial"
    NOT_FOUND = "not_found"
    PENDING = "pending"


def _as_utc(value: datetime) -> datetime:
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value


@dataclass(frozen=True)
class PaymentVerification:
    """
    Outcome of one verification call.

    Built once per call; applying it to the invoice is a separate step
    (PaymentService.mark_invoice_as_paid).
    """

    invoice_id: str
    status: PaymentStatus
    method: PaymentMethod
    expected_amount: Decimal
    received_amount: Decimal
    currency: str
    wallet_address: str
    verified_at: datetime
    verified_by: str  # Provider name
    transaction_hash: str | None = None
    block_number: int | None = None
    confirmed_at: datetime | None = None
    matching_transactions: int = 0

    @property
    def is_successful(self) -> bool:
        """Only verified and overpaid results may mark an invoice paid."""
        return self.status in (PaymentStatus.VERIFIED, PaymentStatus.OVERPAID)

    @property
    def is_sufficient(self) -> bool:
        return self.received_amount >= self.expected_amount

    @property
    def amount_difference(self) -> Decimal:
        """Positive means overpayment, negative means underpayment."""
        return self.received_amount - self.expected_amount

    @property
    def overpaid_amount(self) -> Decimal:
        return max(self.amount_difference, ZERO)

    @property
    def remaining_amount(self) -> Decimal:
        return max(-self.amount_difference, ZERO)


class PaymentEvidence(BaseModel):
    """Verification evidence persisted on a paid invoice."""

    method: PaymentMethod
    status: PaymentStatus
    expected_amount: Decimal
    received_amount: Decimal
    currency: str
    wallet_address: str
    transaction_hash: str | None = None
    block_number: int | None = None
    confirmed_at: datetime | None = None
    verified_at: datetime
    provider: str

    @classmethod
    def from_verification(cls, verification: PaymentVerification) -> "PaymentEvidence":
        return cls(
            method=verification.method,
            status=verification.status,
            expected_amount=verification.expected_amount,
            received_amount=verification.received_amount,
            currency=verification.currency,
            wallet_address=verification.wallet_address,
            transaction_hash=verification.transaction_hash,
            block_number=verification.block_number,
            confirmed_at=verification.confirmed_at,
            verified_at=verification.verified_at,
            provider=verification.verified_by,
        )


class Invoice(BaseModel):
    """Invoice fields the payment subsystem reads and updates."""

    id: str
    number: str
    total: Decimal = Field(ge=0)
    currency: str = "USD"
    status: InvoiceStatus = InvoiceStatus.SENT
    description: str = ""
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    due_date: datetime

    # Per-invoice receiving addresses; empty strings count as unset
    usdc_address_override: str | None = None
    bsv_address_override: str | None = None

    # Optimistic lock, incremented by storage on every update
    version: int = 1
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    paid_at: datetime | None = None
    payment_evidence: PaymentEvidence | None = None

    @field_validator("created_at", "due_date", "updated_at", "paid_at")
    @classmethod
    def ensure_timezone(cls, v: datetime | None) -> datetime | None:
        return _as_utc(v) if v is not None else None

    @property
    def is_paid(self) -> bool:
        return self.status == InvoiceStatus.PAID

    def address_override(self, method: PaymentMethod) -> str | None:
        """Returns the non-empty override for method, if any."""
        if method is PaymentMethod.USDC:
            value = self.usdc_address_override
        elif method is PaymentMethod.BSV:
            value = self.bsv_address_override
        else:
            return None
        return value if value and value.strip() else None


@dataclass
class VerifyPaymentRequest:
    invoice_id: str
    method: PaymentMethod | str = PaymentMethod.USDC
    dry_run: bool = False  # Classify and report without touching the invoice

    def validate(self) -> PaymentMethod:
        """
        Validates the request and returns the parsed payment method.

        Raises:
            InvalidPaymentRequestError: missing invoice id, missing or unknown method
        """
        if not self.invoice_id or not self.invoice_id.strip():
            raise InvalidPaymentRequestError("invoice id is required")
        if not self.method:
            raise InvalidPaymentRequestError("payment method is required")
        try:
            return PaymentMethod(self.method)
        except ValueError:
            raise InvalidPaymentRequestError(
                f"invalid payment method: {self.method}"
            ) from None
