"""
Payment verification engine and paid-marking transition.
"""

import asyncio
import weakref
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from decimal import Decimal

import structlog

from invoicepay.config import Settings, get_settings
from invoicepay.crypto.errors import UnsupportedTokenError
from invoicepay.crypto.interfaces import BlockchainProvider, TokenType, Transaction, TransactionQuery
from invoicepay.storage.errors import VersionConflictError
from invoicepay.storage.interfaces import InvoiceStorage

from .errors import (
    CurrencyMismatchError,
    InvalidPaymentRequestError,
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
from .resolver import parse_payment_method, resolve_payment_address
from .summary import build_payment_notes

logger = structlog.get_logger(__name__)

# Invoice currencies a token amount can be compared with one-to-one
COMPARABLE_CURRENCIES = {
    TokenType.USDC: {"USD", "USDC"},
    TokenType.BSV: {"BSV"},
}


def classify_payment(
    expected: Decimal, received: Decimal, has_unconfirmed: bool = False
) -> PaymentStatus:
    """
    Classifies a verification from amounts in the same unit.

    An unconfirmed matching transaction takes precedence over the raw
    balance. Otherwise the comparison is exact:
    received == expected -> VERIFIED, received > expected -> OVERPAID,
    0 < received < expected -> PARTIAL, received == 0 -> NOT_FOUND.
    """
    if expected <= 0:
        raise ValueError(f"expected amount must be positive, got {expected}")
    if received < 0:
        raise ValueError(f"received amount cannot be negative, got {received}")

    if has_unconfirmed:
        return PaymentStatus.PENDING
    if received == expected:
        return PaymentStatus.VERIFIED
    if received > expected:
        return PaymentStatus.OVERPAID
    if received > 0:
        return PaymentStatus.PARTIAL
    return PaymentStatus.NOT_FOUND


def covers_invoice(tx: Transaction, expected: Decimal) -> bool:
    """A transfer matches the invoice when it alone carries the full amount."""
    return tx.amount >= expected


def select_evidence(transactions: list[Transaction], expected: Decimal) -> Transaction | None:
    """
    Picks the transaction to report.

    Order of preference:
    1. Latest unconfirmed transfer covering the invoice (drives PENDING)
    2. Latest confirmed transfer covering the invoice
    3. Latest confirmed transfer of any amount (partial payments)

    Unconfirmed transfers below the invoice amount are never reported.
    """
    matching = [tx for tx in transactions if covers_invoice(tx, expected)]
    confirmed = [tx for tx in transactions if tx.confirmed]
    candidates = (
        [tx for tx in matching if not tx.confirmed]
        or [tx for tx in matching if tx.confirmed]
        or confirmed
    )
    if not candidates:
        return None
    return max(candidates, key=lambda tx: (tx.timestamp, tx.block_number))


@dataclass(frozen=True)
class VerificationOutcome:
    verification: PaymentVerification
    marked_paid: bool
    dry_run: bool


class PaymentService:
    """
    Verifies invoice payments on-chain and applies successful results.

    Responsibilities:
    - Resolving the receiving address for an invoice and method
    - Querying a provider for balance and incoming transfers
    - Classifying the outcome (verified, overpaid, partial, not found, pending)
    - Marking invoices paid exactly once
    """

    def __init__(self, storage: InvoiceStorage, settings: Settings | None = None):
        """
        Initialize payment service.

        Args:
            storage: Invoice storage collaborator
            settings: Application settings (defaults to get_settings())
        """
        self.storage = storage
        self.settings = settings or get_settings()
        # Entries vanish once no caller holds or waits on the lock
        self._invoice_locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def _invoice_lock(self, invoice_id: str) -> asyncio.Lock:
        lock = self._invoice_locks.get(invoice_id)
        if lock is None:
            lock = asyncio.Lock()
            self._invoice_locks[invoice_id] = lock
        return lock

    async def verify_payment(
        self,
        invoice: Invoice,
        provider: BlockchainProvider,
        method: PaymentMethod | str = PaymentMethod.USDC,
    ) -> PaymentVerification:
        """
        Verifies payment for an invoice without changing it.

        Process:
        1. Resolve the receiving address (invoice override, then default) and
           check the token is comparable with the invoice currency
        2. Fetch the current balance
        3. Fetch incoming transfers in the invoice payment window
        4. Classify and attach the most relevant transaction as evidence

        Returns:
            PaymentVerification; NOT_FOUND, PARTIAL and PENDING are
            regular results, not errors

        Raises:
            PaymentConfigurationError: address, method or currency problem
            BlockchainError: provider failure (transport errors are retryable)
        """
        method = parse_payment_method(method)
        if invoice.total <= 0:
            raise InvalidPaymentRequestError(
                f"invoice {invoice.number} has no positive total to verify"
            )

        with structlog.contextvars.bound_contextvars(invoice_id=invoice.id):
            address, token = resolve_payment_address(invoice, method, self.settings.crypto)
            if token not in provider.supported_tokens():
                raise UnsupportedTokenError(provider.name(), token)
            if invoice.currency.upper() not in COMPARABLE_CURRENCIES.get(token, set()):
                raise CurrencyMismatchError(token.value, invoice.currency)

            logger.info(
                "verifying_payment",
                provider=provider.name(),
                method=method.value,
                address=address,
                expected_amount=str(invoice.total),
            )

            balance = await provider.get_balance(address, token)
            transactions = await provider.get_transactions(
                TransactionQuery(
                    address=address,
                    token=token,
                    start_time=invoice.created_at,
                    end_time=invoice.due_date
                    + timedelta(days=self.settings.invoice.payment_window_days),
                )
            )

            evidence = select_evidence(transactions, invoice.total)
            status = classify_payment(
                invoice.total,
                balance.balance,
                has_unconfirmed=any(
                    not tx.confirmed and covers_invoice(tx, invoice.total)
                    for tx in transactions
                ),
            )

            verification = PaymentVerification(
                invoice_id=invoice.id,
                status=status,
                method=method,
                expected_amount=invoice.total,
                received_amount=balance.balance,
                currency=token.value,
                wallet_address=address,
                verified_at=datetime.now(UTC),
                verified_by=provider.name(),
                transaction_hash=evidence.hash if evidence else None,
                block_number=evidence.block_number if evidence else None,
                confirmed_at=evidence.timestamp if evidence and evidence.confirmed else None,
                matching_transactions=len(transactions),
            )

            logger.info(
                "payment_verification_completed",
                status=status.value,
                received=str(verification.received_amount),
                expected=str(verification.expected_amount),
                transaction_hash=verification.transaction_hash,
            )
            return verification

    async def mark_invoice_as_paid(
        self, invoice_id: str, verification: PaymentVerification
    ) -> bool:
        """
        Applies a successful verification to the stored invoice.

        Already-paid invoices are left untouched. The per-invoice lock
        serializes callers in this process; the storage version check
        (file-locked for JsonInvoiceStorage) catches writers in other
        processes.

        Returns:
            True if the invoice transitioned to paid, False if it already was

        Raises:
            VerificationNotSuccessfulError: verification is not VERIFIED/OVERPAID
            InvalidPaymentRequestError: verification belongs to another invoice
                or to a different invoice total
            InvoiceNotFoundError: invoice does not exist
        """
        if not verification.is_successful:
            raise VerificationNotSuccessfulError(verification.status.value)
        if verification.invoice_id != invoice_id:
            raise InvalidPaymentRequestError(
                f"verification for invoice {verification.invoice_id} "
                f"cannot be applied to invoice {invoice_id}"
            )

        async with self._invoice_lock(invoice_id):
            invoice = self.storage.get_invoice(invoice_id)
            if invoice.is_paid:
                logger.debug("invoice_already_paid", invoice_id=invoice_id)
                return False
            if verification.expected_amount != invoice.total:
                raise InvalidPaymentRequestError(
                    f"verification expected {verification.expected_amount} but invoice "
                    f"{invoice.number} totals {invoice.total}; verify again"
                )

            description = invoice.description
            if verification.transaction_hash:
                notes = build_payment_notes(verification)
                description = f"{description}\n\nPayment Details:\n{notes}".lstrip()

            paid = invoice.model_copy(
                update={
                    "status": InvoiceStatus.PAID,
                    "description": description,
                    "paid_at": verification.confirmed_at or verification.verified_at,
                    "payment_evidence": PaymentEvidence.from_verification(verification),
                }
            )
            try:
                self.storage.update_invoice(paid)
            except VersionConflictError:
                if self.storage.get_invoice(invoice_id).is_paid:
                    logger.info("invoice_paid_concurrently", invoice_id=invoice_id)
                    return False
                raise

        logger.info(
            "invoice_marked_paid",
            invoice_id=invoice_id,
            method=verification.method.value,
            transaction_hash=verification.transaction_hash,
        )
        return True

    async def verify_and_mark(
        self, request: VerifyPaymentRequest, provider: BlockchainProvider
    ) -> VerificationOutcome:
        """Runs verification and, unless dry_run, the paid-marking transition."""
        method = request.validate()
        invoice = self.storage.get_invoice(request.invoice_id)
        verification = await self.verify_payment(invoice, provider, method)

        marked = False
        if verification.is_successful and not request.dry_run:
            marked = await self.mark_invoice_as_paid(invoice.id, verification)
        elif request.dry_run:
            logger.info("dry_run_skip_mark_paid", invoice_id=invoice.id)

        return VerificationOutcome(
            verification=verification, marked_paid=marked, dry_run=request.dry_run
        )
