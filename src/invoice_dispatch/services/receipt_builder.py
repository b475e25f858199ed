import re
from datetime import date
from typing import Callable, Literal, Sequence

from ..core.config import ColumnKeys
from ..models.invoice import Receipt, Row, UNKNOWN_VENDOR, UNKNOWN_INVOICE

NumberScheme = Literal["invoice", "file_vendor"]

_DISALLOWED = re.compile(r"[^a-zA-Z0-9äöüÄÖÜß.;]")
_DISALLOWED_KEEP_PARENS = re.compile(r"[^a-zA-Z0-9äöüÄÖÜß.;()]")


def sanitize(text: str) -> str:
    """Replace every character outside letters, digits, umlauts, ß, '.' and ';' with '.'"""
    return _DISALLOWED.sub(".", text)


def sanitize_keep_parens(text: str) -> str:
    """
    Like sanitize, but keeps parentheses.

    Only applied when the text contains a parenthesis; anything else is
    returned as is.
    """
    if "(" in text or ")" in text:
        return _DISALLOWED_KEEP_PARENS.sub(".", text)
    return text


def strip_leading_zeros(text: str) -> str:
    return text.lstrip("0")


def receipt_number(scheme: NumberScheme, file_id: str, vendor: str, invoice: str) -> str:
    """
    Deterministic receipt number used to join receipt and items.

    "invoice":      Invoice-<invoice number>, the invoice number as exported
    "file_vendor":  sanitized file name + vendor name, then "-" and the
                    invoice number so every invoice of a vendor gets its own receipt
    """
    if scheme == "invoice":
        return f"Invoice-{invoice}"
    if scheme == "file_vendor":
        return f"{sanitize(file_id + vendor)}-{invoice}"
    raise ValueError(f"Unknown receipt number scheme: {scheme}")


def format_comment_date(day: date) -> str:
    return f"{day.month}/{day.day}/{day.year}"


class ReceiptBuilder:
    """Builds the receipt header of an invoice group from its first row"""

    def __init__(
        self,
        columns: ColumnKeys,
        scheme: NumberScheme = "invoice",
        today: Callable[[], date] = date.today,
    ):
        self.columns = columns
        self.scheme = scheme
        self.today = today

    def build(self, rows: Sequence[Row], file_id: str) -> Receipt:
        if not rows:
            raise ValueError("Cannot build a receipt for an empty invoice group")

        # Header fields come from the first row only
        first = rows[0]
        vendor = first.get(self.columns.vendor_name) or UNKNOWN_VENDOR
        invoice = first.get(self.columns.invoice_number) or UNKNOWN_INVOICE
        invoice_date = first.get(self.columns.invoice_date) or "$UnknownInvoiceDate"
        store = first.get(self.columns.store_id, "")

        return Receipt(
            number=receipt_number(self.scheme, file_id, vendor, invoice),
            supplier_name=sanitize_keep_parens(vendor),
            description=f"DATE:{invoice_date} INVOICES#{invoice}",
            organizational_unit=strip_leading_zeros(store),
            comment=f"processed by api on {format_comment_date(self.today())}",
            invoice_number=invoice,
        )
