"""
Command line entry point: invoicepay payment verify <invoice>.
"""

import argparse
import asyncio
import sys

from pydantic import ValidationError

from invoicepay.config import Settings, get_settings
from invoicepay.crypto.errors import (
    BlockchainError,
    ProviderConfigurationError,
    ProviderNotImplementedError,
    ProviderTransportError,
    UnsupportedTokenError,
)
from invoicepay.logging_config import bind_invoice_id, clear_invoice_context, configure_logging
from invoicepay.payments.errors import PaymentConfigurationError, PaymentError
from invoicepay.payments.models import VerifyPaymentRequest
from invoicepay.payments.providers import create_provider
from invoicepay.payments.service import PaymentService
from invoicepay.payments.summary import format_amount, format_verification_summary
from invoicepay.storage import InvoiceNotFoundError, JsonInvoiceStorage, StorageError, find_invoice

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG = 2
EXIT_RETRYABLE = 3


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="invoicepay", description="Invoice payment tools")
    commands = parser.add_subparsers(dest="command", required=True)

    payment = commands.add_parser(
        "payment", help="Payment verification and management commands"
    )
    payment_commands = payment.add_subparsers(dest="payment_command", required=True)

    verify = payment_commands.add_parser(
        "verify",
        help="Verify cryptocurrency payment for an invoice",
        description=(
            "Check the blockchain for payment to the invoice's address and mark "
            "the invoice paid when the full amount has arrived."
        ),
    )
    verify.add_argument("invoice", help="Invoice id or invoice number")
    verify.add_argument("--method", default="USDC", help="Payment method (USDC, BSV)")
    verify.add_argument(
        "--testnet",
        action="store_true",
        default=None,
        help="Query testnet instead of mainnet",
    )
    verify.add_argument(
        "--dry-run",
        action="store_true",
        help="Report the verification without updating the invoice",
    )
    verify.add_argument(
        "--etherscan-api-key",
        "--api-key",
        dest="api_key",
        default=None,
        help="Etherscan API key (overrides INVOICEPAY_CRYPTO__ETHERSCAN_API_KEY)",
    )
    verify.add_argument("--data-dir", default=None, help="Invoice data directory")
    return parser


async def run_verify(args: argparse.Namespace, settings: Settings) -> int:
    storage = JsonInvoiceStorage(args.data_dir or settings.storage.data_dir)
    service = PaymentService(storage, settings)

    invoice = find_invoice(storage, args.invoice)
    bind_invoice_id(invoice.id)
    try:
        provider = create_provider(
            args.method, settings.crypto, testnet=args.testnet, api_key=args.api_key
        )
        print(f"Verifying payment for invoice {invoice.number}")
        print(f"  Invoice Total: {format_amount(invoice.total)} {invoice.currency}")
        print(f"  Status: {invoice.status.value}")
        print(f"  Provider: {provider.name()}")
        print()

        try:
            outcome = await service.verify_and_mark(
                VerifyPaymentRequest(
                    invoice_id=invoice.id, method=args.method, dry_run=args.dry_run
                ),
                provider,
            )
        finally:
            aclose = getattr(provider, "aclose", None)
            if aclose is not None:
                await aclose()
    finally:
        clear_invoice_context()

    print(format_verification_summary(outcome.verification, dry_run=outcome.dry_run))
    if outcome.marked_paid:
        print()
        print(f"Invoice {invoice.number} has been marked as PAID")
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings()
    except ValidationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG
    configure_logging(settings.logs.level, settings.logs.json_output)

    try:
        return asyncio.run(run_verify(args, settings))
    except InvoiceNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE
    except (PaymentConfigurationError, ProviderConfigurationError, UnsupportedTokenError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG
    except ProviderNotImplementedError as e:
        print(f"Not available: {e}", file=sys.stderr)
        return EXIT_FAILURE
    except ProviderTransportError as e:
        print(f"Provider unavailable, try again later: {e}", file=sys.stderr)
        return EXIT_RETRYABLE
    except (BlockchainError, PaymentError, StorageError) as e:
        print(f"Payment verification failed: {e}", file=sys.stderr)
        return EXIT_FAILURE
