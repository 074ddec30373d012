from datetime import UTC, datetime
from decimal import Decimal

import pytest

from invoicepay.payments.models import PaymentMethod, PaymentStatus, PaymentVerification
from invoicepay.payments.summary import (
    build_payment_notes,
    format_amount,
    format_verification_summary,
)

WALLET = "0x742d35Cc6634C0532925a3b844Bc454e4438f44e"
CHECKED = datetime(2024, 3, 1, 12, 0, 0, tzinfo=UTC)


def verification(status, received, **kwargs):
    fields = {
        "invoice_id": "inv-0001",
        "status": status,
        "method": PaymentMethod.USDC,
        "expected_amount": Decimal("100.00"),
        "received_amount": Decimal(received),
        "currency": "USDC",
        "wallet_address": WALLET,
        "verified_at": CHECKED,
        "verified_by": "etherscan",
    }
    fields.update(kwargs)
    return PaymentVerification(**fields)


@pytest.mark.parametrize(
    "amount, expected",
    [
        (Decimal("100"), "100.00"),
        (Decimal("100.5"), "100.50"),
        (Decimal("0"), "0.00"),
        (Decimal("0.000001"), "0.000001"),
        (Decimal("12.345600"), "12.3456"),
    ],
)
def test_format_amount(amount, expected):
    assert format_amount(amount) == expected


def test_verified_summary():
    text = format_verification_summary(
        verification(
            PaymentStatus.VERIFIED,
            "100",
            transaction_hash="0xabc",
            confirmed_at=datetime(2024, 2, 28, 9, 30, tzinfo=UTC),
        )
    )
    assert "Payment VERIFIED" in text
    assert "Amount Received: 100.00 USDC" in text
    assert "Transaction: 0xabc" in text
    assert "Confirmed: 2024-02-28 09:30:00" in text
    assert "Checked: 2024-03-01 12:00:00 via etherscan" in text
    assert "Dry run" not in text


def test_overpaid_summary_shows_surplus():
    text = format_verification_summary(verification(PaymentStatus.OVERPAID, "150"))
    assert "Payment VERIFIED (Overpaid)" in text
    assert "150.00 USDC (50.00 over)" in text


def test_partial_summary_asks_for_remainder():
    text = format_verification_summary(verification(PaymentStatus.PARTIAL, "40"))
    assert "PARTIAL Payment Detected" in text
    assert "Remaining: 60.00 USDC" in text
    assert "Please send an additional 60.00 USDC to:" in text
    assert WALLET in text


def test_not_found_summary_gives_address():
    text = format_verification_summary(verification(PaymentStatus.NOT_FOUND, "0"))
    assert "Payment NOT FOUND" in text
    assert "Send exactly 100.00 USDC to:" in text
    assert WALLET in text


def test_pending_summary():
    text = format_verification_summary(
        verification(PaymentStatus.PENDING, "100", transaction_hash="0xpending")
    )
    assert "Payment PENDING Confirmation" in text
    assert "Transaction: 0xpending" in text
    assert "Confirmed:" not in text


def test_dry_run_note_only_for_successful_results():
    ok = format_verification_summary(verification(PaymentStatus.VERIFIED, "100"), dry_run=True)
    partial = format_verification_summary(verification(PaymentStatus.PARTIAL, "10"), dry_run=True)
    assert "Dry run mode: invoice status not updated" in ok
    assert "Dry run" not in partial


def test_payment_notes():
    notes = build_payment_notes(
        verification(PaymentStatus.OVERPAID, "120", transaction_hash="0xabc", block_number=7)
    )
    assert notes.splitlines() == [
        "Payment Method: USDC",
        "Amount: 120.00 USDC",
        f"Wallet: {WALLET}",
        "Transaction: 0xabc",
        "Verified: 2024-03-01 12:00:00 via etherscan",
        "Note: Overpaid by 20.00 USDC",
    ]
