"""
Operator-facing text derived from a PaymentVerification.
"""

from datetime import datetime
from decimal import Decimal

from .models import PaymentStatus, PaymentVerification

CENT = Decimal("0.01")


def format_amount(amount: Decimal) -> str:
    """Two decimals unless the amount carries finer token precision."""
    if amount == amount.quantize(CENT):
        return f"{amount:.2f}"
    return f"{amount.normalize():f}"


def _ts(value: datetime) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S")


def build_payment_notes(verification: PaymentVerification) -> str:
    """Payment details appended to the invoice description when marked paid."""
    v = verification
    lines = [
        f"Payment Method: {v.method.value}",
        f"Amount: {format_amount(v.received_amount)} {v.currency}",
        f"Wallet: {v.wallet_address}",
    ]
    if v.transaction_hash:
        lines.append(f"Transaction: {v.transaction_hash}")
    if v.confirmed_at:
        lines.append(f"Confirmed: {_ts(v.confirmed_at)}")
    lines.append(f"Verified: {_ts(v.verified_at)} via {v.verified_by}")
    if v.status == PaymentStatus.OVERPAID:
        lines.append(f"Note: Overpaid by {format_amount(v.overpaid_amount)} {v.currency}")
    return "\n".join(lines)


def format_verification_summary(
    verification: PaymentVerification, dry_run: bool = False
) -> str:
    """
    Status-specific human summary.

    Unsuccessful outcomes include the amount still owed and the address
    to pay, so the output can be forwarded to the client as-is.
    """
    v = verification
    cur = v.currency
    lines = ["Verification Results", ""]

    if v.status == PaymentStatus.VERIFIED:
        lines.append("Payment VERIFIED")
        lines.append(f"  Amount Received: {format_amount(v.received_amount)} {cur}")
    elif v.status == PaymentStatus.OVERPAID:
        lines.append("Payment VERIFIED (Overpaid)")
        lines.append(
            f"  Amount Received: {format_amount(v.received_amount)} {cur} "
            f"({format_amount(v.overpaid_amount)} over)"
        )
    elif v.status == PaymentStatus.PARTIAL:
        lines.append("PARTIAL Payment Detected")
        lines.append(f"  Amount Received: {format_amount(v.received_amount)} {cur}")
        lines.append(f"  Amount Required: {format_amount(v.expected_amount)} {cur}")
        lines.append(f"  Remaining: {format_amount(v.remaining_amount)} {cur}")
        lines.append("")
        lines.append(
            f"Please send an additional {format_amount(v.remaining_amount)} {cur} to:"
        )
        lines.append(f"  {v.wallet_address}")
    elif v.status == PaymentStatus.NOT_FOUND:
        lines.append("Payment NOT FOUND")
        lines.append(f"  Expected Amount: {format_amount(v.expected_amount)} {cur}")
        lines.append(f"  Current Balance: {format_amount(v.received_amount)} {cur}")
        lines.append("")
        lines.append(f"Send exactly {format_amount(v.expected_amount)} {cur} to:")
        lines.append(f"  {v.wallet_address}")
    elif v.status == PaymentStatus.PENDING:
        lines.append("Payment PENDING Confirmation")
        lines.append(f"  Amount: {format_amount(v.received_amount)} {cur}")
        lines.append("  Waiting for blockchain confirmation...")

    if v.transaction_hash:
        lines.append(f"  Transaction: {v.transaction_hash}")
    if v.confirmed_at:
        lines.append(f"  Confirmed: {_ts(v.confirmed_at)}")

    lines.append("")
    lines.append(f"Checked: {_ts(v.verified_at)} via {v.verified_by}")

    if dry_run and v.is_successful:
        lines.append("")
        lines.append("Dry run mode: invoice status not updated")
    return "\n".join(lines)
