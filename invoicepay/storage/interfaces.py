from typing import Protocol

from invoicepay.payments.models import Invoice

from .errors import InvoiceNotFoundError


class InvoiceStorage(Protocol):
    """Invoice persistence used by the payment service."""

    def get_invoice(self, invoice_id: str) -> Invoice:
        """Raises InvoiceNotFoundError for unknown ids."""
        ...

    def save_invoice(self, invoice: Invoice) -> None: ...

    def update_invoice(self, invoice: Invoice) -> Invoice:
        """
        Persists invoice if its version still matches the stored one.

        Returns:
            The stored invoice with version incremented

        Raises:
            InvoiceNotFoundError: invoice does not exist
            VersionConflictError: stored version differs from invoice.version
        """
        ...

    def list_invoices(self) -> list[Invoice]: ...

    def delete_invoice(self, invoice_id: str) -> None: ...


def find_invoice(storage: InvoiceStorage, identifier: str) -> Invoice:
    """Looks an invoice up by id, falling back to its invoice number."""
    try:
        return storage.get_invoice(identifier)
    except InvoiceNotFoundError:
        pass
    for invoice in storage.list_invoices():
        if invoice.number == identifier:
            return invoice
    raise InvoiceNotFoundError(identifier)
