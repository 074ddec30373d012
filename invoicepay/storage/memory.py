import threading
from datetime import UTC, datetime

from invoicepay.payments.models import Invoice

from .errors import InvoiceNotFoundError, VersionConflictError


class InMemoryInvoiceStorage:
    """Process-local storage with the same version semantics as JsonInvoiceStorage."""

    def __init__(self, invoices: list[Invoice] | None = None):
        self._lock = threading.Lock()
        self._invoices: dict[str, Invoice] = {}
        self.update_count = 0
        for invoice in invoices or []:
            self.save_invoice(invoice)

    def get_invoice(self, invoice_id: str) -> Invoice:
        with self._lock:
            try:
                return self._invoices[invoice_id].model_copy(deep=True)
            except KeyError:
                raise InvoiceNotFoundError(invoice_id) from None

    def save_invoice(self, invoice: Invoice) -> None:
        with self._lock:
            self._invoices[invoice.id] = invoice.model_copy(deep=True)

    def update_invoice(self, invoice: Invoice) -> Invoice:
        with self._lock:
            existing = self._invoices.get(invoice.id)
            if existing is None:
                raise InvoiceNotFoundError(invoice.id)
            if existing.version != invoice.version:
                raise VersionConflictError(invoice.id, invoice.version, existing.version)
            stored = invoice.model_copy(
                update={"version": invoice.version + 1, "updated_at": datetime.now(UTC)},
                deep=True,
            )
            self._invoices[invoice.id] = stored
            self.update_count += 1
            return stored.model_copy(deep=True)

    def list_invoices(self) -> list[Invoice]:
        with self._lock:
            return [inv.model_copy(deep=True) for inv in self._invoices.values()]

    def delete_invoice(self, invoice_id: str) -> None:
        with self._lock:
            if self._invoices.pop(invoice_id, None) is None:
                raise InvoiceNotFoundError(invoice_id)
