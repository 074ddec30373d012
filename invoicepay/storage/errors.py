class StorageError(Exception):
    """Base class for invoice storage failures."""


class InvoiceNotFoundError(StorageError):
    def __init__(self, identifier: str):
        super().__init__(f"invoice not found: {identifier}")
        self.identifier = identifier


class VersionConflictError(StorageError):
    """Invoice changed since it was read (optimistic lock failure)."""

    def __init__(self, invoice_id: str, expected: int, actual: int):
        super().__init__(
            f"invoice {invoice_id} was modified concurrently "
            f"(expected version {expected}, found {actual})"
        )
        self.invoice_id = invoice_id
        self.expected = expected
        self.actual = actual
