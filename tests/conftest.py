"""Pytest configuration and shared fixtures."""

from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest

from invoicepay.config import Settings, get_settings
from invoicepay.config.crypto import CryptoSettings
from invoicepay.crypto.mock_provider import MockProvider
from invoicepay.payments.models import Invoice, InvoiceStatus
from invoicepay.payments.service import PaymentService
from invoicepay.storage import InMemoryInvoiceStorage

USDC_ADDRESS = "0x742d35Cc6634C0532925a3b844Bc454e4438f44e"
BSV_ADDRESS = "1BvBMSEYstWetqTFn5Au4m4GFg7xJaNVN2"
OVERRIDE_ADDRESS = "0xAbCdEf0123456789aBcDeF0123456789AbCdEf01"


@pytest.fixture(autouse=True)
def clear_settings_cache(monkeypatch):
    """Keep host environment and .env files out of the tests."""
    monkeypatch.delenv("INVOICEPAY_CRYPTO__ETHERSCAN_API_KEY", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        crypto=CryptoSettings(
            usdc_enabled=True,
            usdc_address=USDC_ADDRESS,
            bsv_address=BSV_ADDRESS,
        ),
    )


def make_invoice(**overrides) -> Invoice:
    now = datetime.now(UTC)
    fields = {
        "id": "inv-0001",
        "number": "INV-001",
        "total": Decimal("100.00"),
        "currency": "USD",
        "status": InvoiceStatus.SENT,
        "description": "Website redesign",
        "created_at": now - timedelta(days=10),
        "due_date": now + timedelta(days=20),
    }
    fields.update(overrides)
    return Invoice(**fields)


@pytest.fixture
def invoice():
    return make_invoice()


@pytest.fixture
def storage(invoice):
    return InMemoryInvoiceStorage([invoice])


@pytest.fixture
def mock_provider():
    provider = MockProvider()
    yield provider
    provider.reset()


@pytest.fixture
def service(storage, settings):
    return PaymentService(storage, settings)


@pytest.fixture
def invoice_factory():
    return make_invoice
