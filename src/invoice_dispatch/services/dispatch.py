"""
Dispatch of invoice groups to the inventory API.

Each invoice group walks through

    GROUPED -> SUPPLIER_ENSURED -> RECEIPT_CREATED -> ITEMS_POSTED -> DONE

and drops to FAILED from any step. A failure only ends that invoice; the
coordinator moves on to the next group. Calls are strictly sequential and
every receipt/items call is preceded by a fixed pause to respect the
upstream rate limit.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Sequence

from loguru import logger

from ..core.errors import InventoryAPIError, SupplierCacheError
from ..models.invoice import Row, VendorGroups
from .inventory_api import InventoryAPI
from .line_items import LineItemBuilder
from .receipt_builder import ReceiptBuilder
from .run_ledger import RunLedger
from .suppliers import SupplierRegistrar


class DispatchState(str, Enum):
    GROUPED = "grouped"
    SUPPLIER_ENSURED = "supplier_ensured"
    RECEIPT_CREATED = "receipt_created"
    ITEMS_POSTED = "items_posted"
    DONE = "done"
    FAILED = "failed"


@dataclass
class InvoiceOutcome:
    """Where one invoice group ended up"""
    file_id: str
    vendor: str
    invoice: str
    state: DispatchState = DispatchState.GROUPED
    failed_at: DispatchState | None = None
    receipt_number: str | None = None
    receipt_id: str | None = None
    items_posted: int = 0
    skipped: bool = False
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.state == DispatchState.DONE

    @property
    def supplier_failed(self) -> bool:
        """Failed before the supplier was confirmed; the file must be retried"""
        return self.state == DispatchState.FAILED and self.failed_at == DispatchState.GROUPED

    def fail(self, error: str) -> "InvoiceOutcome":
        self.failed_at = self.state
        self.state = DispatchState.FAILED
        self.error = error
        return self


class DispatchCoordinator:
    """Runs the per-invoice state machine for every group of a file"""

    def __init__(
        self,
        api: InventoryAPI,
        registrar: SupplierRegistrar,
        receipt_builder: ReceiptBuilder,
        item_builder: LineItemBuilder,
        run_ledger: RunLedger,
        request_delay: float = 0.5,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.api = api
        self.registrar = registrar
        self.receipt_builder = receipt_builder
        self.item_builder = item_builder
        self.run_ledger = run_ledger
        self.request_delay = request_delay
        self._sleep = sleep

    async def _throttle(self) -> None:
        if self.request_delay > 0:
            await self._sleep(self.request_delay)

    async def dispatch_file(self, file_id: str, groups: VendorGroups) -> list[InvoiceOutcome]:
        """Dispatch every invoice group of one file, in file order"""
        processed_invoices: set[str] = set()
        outcomes = []
        for vendor, invoices in groups.items():
            for invoice, rows in invoices.items():
                outcome = await self.dispatch(file_id, vendor, invoice, rows, processed_invoices)
                outcomes.append(outcome)
        return outcomes

    async def dispatch(
        self,
        file_id: str,
        vendor: str,
        invoice: str,
        rows: Sequence[Row],
        processed_invoices: set[str] | None = None,
    ) -> InvoiceOutcome:
        """
        Send one invoice group upstream.

        Args:
            file_id: Local name of the source file
            vendor: Vendor group key
            invoice: Invoice group key
            rows: Rows of the group, in file order
            processed_invoices: Invoice numbers already handled in this file's run

        Returns:
            InvoiceOutcome describing the final state
        """
        if processed_invoices is None:
            processed_invoices = set()
        outcome = InvoiceOutcome(file_id=file_id, vendor=vendor, invoice=invoice)
        log = logger.bind(file=file_id, vendor=vendor, invoice=invoice)

        # Same invoice number under another vendor counts as handled
        if invoice in processed_invoices:
            log.info("Skipping already processed invoice")
            outcome.skipped = True
            outcome.state = DispatchState.DONE
            return outcome

        if self.run_ledger.is_invoice_done(file_id, vendor, invoice):
            log.info("Invoice already dispatched in an earlier run, skipping")
            processed_invoices.add(invoice)
            outcome.skipped = True
            outcome.state = DispatchState.DONE
            return outcome

        receipt = self.receipt_builder.build(rows, file_id)
        items = self.item_builder.build(rows, receipt.supplier_name)
        outcome.receipt_number = receipt.number
        log.info("Processing invoice group", rows=len(rows), items=len(items), receipt=receipt.number)

        # GROUPED -> SUPPLIER_ENSURED
        try:
            supplier_ok = await self.registrar.ensure(receipt.supplier_name)
        except SupplierCacheError as e:
            log.error("Supplier cache unavailable: {error}", error=str(e))
            return outcome.fail(str(e))
        if not supplier_ok:
            return outcome.fail(f"Supplier could not be created: {receipt.supplier_name}")
        outcome.state = DispatchState.SUPPLIER_ENSURED

        # SUPPLIER_ENSURED -> RECEIPT_CREATED
        await self._throttle()
        try:
            receipt_id = await self.api.create_receipt(receipt)
        except InventoryAPIError as e:
            log.error("Failed to create receipt {receipt}: {error}", receipt=receipt.number, error=str(e))
            return outcome.fail(str(e))
        outcome.receipt_id = receipt_id
        outcome.state = DispatchState.RECEIPT_CREATED
        processed_invoices.add(invoice)
        log.info("Receipt created", receipt=receipt.number, receipt_id=receipt_id)

        # RECEIPT_CREATED -> ITEMS_POSTED; items arrive deduplicated from the builder
        if not items:
            log.info("No items to send for receipt, skipping", receipt=receipt.number)
        else:
            await self._throttle()
            try:
                await self.api.post_items(receipt_id, items)
            except InventoryAPIError as e:
                log.error(
                    "Failed to post items for receipt {receipt}: {error}",
                    receipt=receipt.number,
                    error=str(e),
                    payload=e.payload,
                )
                return outcome.fail(str(e))
            outcome.items_posted = len(items)
            outcome.state = DispatchState.ITEMS_POSTED
            log.info("Items posted", receipt=receipt.number, items=len(items))

        outcome.state = DispatchState.DONE
        self.run_ledger.mark_invoice_done(file_id, vendor, invoice)
        return outcome
