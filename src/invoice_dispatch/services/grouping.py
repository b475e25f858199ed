from typing import Iterable

from loguru import logger

from ..core.config import ColumnKeys
from ..models.invoice import Row, VendorGroups, UNKNOWN_VENDOR, UNKNOWN_INVOICE


class RowGrouper:
    """
    Partitions a file's rows by vendor, then by invoice number.

    Rows without a vendor go under "Unknown"; rows without an invoice number
    go under "UnknownInvoiceNumber". When ``org_unit`` is set, rows for any
    other store are left out before grouping.
    """

    def __init__(self, columns: ColumnKeys, org_unit: str | None = None):
        self.columns = columns
        self.org_unit = org_unit

    def accepts(self, row: Row) -> bool:
        if self.org_unit is None:
            return True
        return row.get(self.columns.store_id, "") == self.org_unit

    def group(self, rows: Iterable[Row]) -> VendorGroups:
        groups: VendorGroups = {}
        skipped = 0

        for row in rows:
            if not self.accepts(row):
                skipped += 1
                continue

            vendor = row.get(self.columns.vendor_name) or UNKNOWN_VENDOR
            invoice = row.get(self.columns.invoice_number) or UNKNOWN_INVOICE
            groups.setdefault(vendor, {}).setdefault(invoice, []).append(row)

        logger.info(
            "Grouped rows",
            vendors=len(groups),
            invoices=sum(len(invoices) for invoices in groups.values()),
            skipped_other_org_units=skipped,
        )
        for vendor, invoices in groups.items():
            for invoice, invoice_rows in invoices.items():
                logger.debug("Invoice group", vendor=vendor, invoice=invoice, rows=len(invoice_rows))

        return groups
