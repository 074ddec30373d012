import pytest

from invoicepay.config.crypto import CryptoSettings
from invoicepay.crypto.interfaces import TokenType
from invoicepay.payments.errors import (
    NoBSVAddressError,
    NoPaymentAddressError,
    NoUSDCAddressError,
    UnsupportedPaymentMethodError,
)
from invoicepay.payments.models import PaymentMethod
from invoicepay.payments.resolver import resolve_payment_address

DEFAULT_USDC = "0xDefault000000000000000000000000000000000"
OVERRIDE = "0xOverride0000000000000000000000000000000"


@pytest.fixture
def crypto():
    return CryptoSettings(usdc_address=DEFAULT_USDC, bsv_address="1DefaultBsv")


def test_override_wins_over_default(invoice_factory, crypto):
    invoice = invoice_factory(usdc_address_override=OVERRIDE)
    assert resolve_payment_address(invoice, PaymentMethod.USDC, crypto) == (
        OVERRIDE,
        TokenType.USDC,
    )


@pytest.mark.parametrize("override", [None, "", "   "])
def test_empty_override_falls_through(invoice_factory, crypto, override):
    invoice = invoice_factory(usdc_address_override=override)
    assert resolve_payment_address(invoice, "USDC", crypto) == (DEFAULT_USDC, TokenType.USDC)


def test_override_case_is_preserved(invoice_factory):
    invoice = invoice_factory(usdc_address_override="0xAbC")
    address, _ = resolve_payment_address(invoice, PaymentMethod.USDC, CryptoSettings())
    assert address == "0xAbC"


def test_bsv_uses_its_own_override(invoice_factory, crypto):
    invoice = invoice_factory(usdc_address_override=OVERRIDE, bsv_address_override="1Custom")
    assert resolve_payment_address(invoice, PaymentMethod.BSV, crypto) == (
        "1Custom",
        TokenType.BSV,
    )


def test_missing_usdc_address(invoice_factory):
    with pytest.raises(NoUSDCAddressError, match="INVOICEPAY_CRYPTO__USDC_ADDRESS"):
        resolve_payment_address(invoice_factory(), PaymentMethod.USDC, CryptoSettings())


def test_missing_bsv_address(invoice_factory):
    with pytest.raises(NoBSVAddressError) as exc_info:
        resolve_payment_address(
            invoice_factory(), PaymentMethod.BSV, CryptoSettings(usdc_address=DEFAULT_USDC)
        )
    assert isinstance(exc_info.value, NoPaymentAddressError)


@pytest.mark.parametrize("method", [PaymentMethod.ACH, PaymentMethod.WIRE, PaymentMethod.OTHER])
def test_non_crypto_methods_are_unsupported(invoice_factory, crypto, method):
    with pytest.raises(UnsupportedPaymentMethodError, match="non-crypto"):
        resolve_payment_address(invoice_factory(), method, crypto)


def test_unknown_method_is_unsupported(invoice_factory, crypto):
    with pytest.raises(UnsupportedPaymentMethodError):
        resolve_payment_address(invoice_factory(), "Dogecoin", crypto)


def test_method_names_are_case_insensitive(invoice_factory, crypto):
    assert resolve_payment_address(invoice_factory(), "usdc", crypto)[1] == TokenType.USDC
    with pytest.raises(UnsupportedPaymentMethodError, match="non-crypto"):
        resolve_payment_address(invoice_factory(), "wire", crypto)
