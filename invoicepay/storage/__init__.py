"""Invoice storage collaborators used by payment verification."""

from .errors import InvoiceNotFoundError, StorageError, VersionConflictError
from .interfaces import InvoiceStorage, find_invoice
from .json_storage import JsonInvoiceStorage
from .memory import InMemoryInvoiceStorage

__all__ = [
    "InMemoryInvoiceStorage",
    "InvoiceNotFoundError",
    "InvoiceStorage",
    "JsonInvoiceStorage",
    "StorageError",
    "VersionConflictError",
    "find_invoice",
]
