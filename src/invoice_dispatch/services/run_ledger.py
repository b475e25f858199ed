from loguru import logger

from .storage import LedgerBase, InMemoryLedger


def invoice_key(file_id: str, vendor: str, invoice: str) -> str:
    return f"{file_id}::{vendor}::{invoice}"


class RunLedger:
    """
    Tracks which source files, and which invoices inside them, are finished.

    A file is marked once its whole invoice walk has been attempted. An
    invoice is marked once its receipt and items are both posted, so a file
    that is reprocessed after a crash does not post those items again.
    """

    def __init__(self, files: LedgerBase, invoices: LedgerBase | None = None):
        self.files = files
        self.invoices = invoices if invoices is not None else InMemoryLedger()

    def is_processed(self, file_name: str) -> bool:
        return self.files.contains(file_name)

    def mark_processed(self, file_name: str) -> None:
        self.files.add(file_name)
        logger.info("Marked file as processed", file=file_name)

    def is_invoice_done(self, file_id: str, vendor: str, invoice: str) -> bool:
        return self.invoices.contains(invoice_key(file_id, vendor, invoice))

    def mark_invoice_done(self, file_id: str, vendor: str, invoice: str) -> None:
        self.invoices.add(invoice_key(file_id, vendor, invoice))
