"""
Flat JSON-file invoice storage: one <invoice-id>.json per invoice.
"""

import fcntl
import os
import re
import tempfile
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path

import structlog
from pydantic import ValidationError

from invoicepay.payments.models import Invoice

from .errors import InvoiceNotFoundError, StorageError, VersionConflictError

logger = structlog.get_logger(__name__)

_SAFE_ID = re.compile(r"^[A-Za-z0-9._-]+$")


class JsonInvoiceStorage:
    """
    One <invoice-id>.json file per invoice under data_dir/invoices.

    update_invoice holds an exclusive flock on a per-invoice lock file
    across the version check and the replace, so concurrent processes
    sharing the directory see VersionConflictError instead of both
    writing.
    """

    def __init__(self, data_dir: Path | str):
        self.invoice_dir = Path(data_dir) / "invoices"
        self.invoice_dir.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def get_invoice(self, invoice_id: str) -> Invoice:
        with self._lock:
            return self._read(invoice_id)

    def save_invoice(self, invoice: Invoice) -> None:
        with self._lock:
            self._write(invoice)
        logger.debug("invoice_saved", invoice_id=invoice.id)

    def update_invoice(self, invoice: Invoice) -> Invoice:
        with self._lock, self._file_lock(invoice.id):
            existing = self._read(invoice.id)
            if existing.version != invoice.version:
                raise VersionConflictError(invoice.id, invoice.version, existing.version)
            stored = invoice.model_copy(
                update={"version": invoice.version + 1, "updated_at": datetime.now(UTC)}
            )
            self._write(stored)
        logger.info("invoice_updated", invoice_id=stored.id, version=stored.version)
        return stored

    def list_invoices(self) -> list[Invoice]:
        with self._lock:
            return [self._read(path.stem) for path in sorted(self.invoice_dir.glob("*.json"))]

    def delete_invoice(self, invoice_id: str) -> None:
        with self._lock:
            path = self._path(invoice_id)
            try:
                path.unlink()
            except FileNotFoundError:
                raise InvoiceNotFoundError(invoice_id) from None
        logger.info("invoice_deleted", invoice_id=invoice_id)

    def _path(self, invoice_id: str) -> Path:
        if not _SAFE_ID.match(invoice_id):
            raise InvoiceNotFoundError(invoice_id)
        return self.invoice_dir / f"{invoice_id}.json"

    @contextmanager
    def _file_lock(self, invoice_id: str) -> Iterator[None]:
        lock_path = self._path(invoice_id).with_suffix(".lock")
        with open(lock_path, "a") as fh:
            fcntl.flock(fh, fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(fh, fcntl.LOCK_UN)

    def _read(self, invoice_id: str) -> Invoice:
        path = self._path(invoice_id)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise InvoiceNotFoundError(invoice_id) from None
        try:
            return Invoice.model_validate_json(raw)
        except ValidationError as e:
            raise StorageError(f"corrupt invoice file {path}: {e}") from e

    def _write(self, invoice: Invoice) -> None:
        path = self._path(invoice.id)
        # Write-then-rename so readers never see a half-written file
        fd, tmp_name = tempfile.mkstemp(dir=self.invoice_dir, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(invoice.model_dump_json(indent=2))
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
