import math
from datetime import datetime, UTC
from typing import Callable, Iterable, Sequence

from loguru import logger

from ..core.config import ColumnKeys
from ..models.invoice import LineItem, Row
from .quantity_cost import QuantityCostEngine, parse_float, parse_int

FALLBACK_PRODUCT_CODE = "NO_PRODUCT_CODE"
FALLBACK_PRODUCT_NAME = "Product_Not_Included_In_SHEET"
FALLBACK_SUPPLIER_CODE = "1001"


def _utc_timestamp() -> str:
    return datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


def dedupe_by_product_code(items: Iterable[LineItem]) -> tuple[list[LineItem], int]:
    """
    Keep the first item for each product code.

    Returns:
        (unique items in original order, number of dropped duplicates)
    """
    seen: set[str] = set()
    unique: list[LineItem] = []
    dropped = 0
    for item in items:
        if item.product_code in seen:
            dropped += 1
            continue
        seen.add(item.product_code)
        unique.append(item)
    return unique, dropped


class LineItemBuilder:
    """Turns the rows of one invoice group into receipt line items"""

    def __init__(
        self,
        columns: ColumnKeys,
        engine: QuantityCostEngine | None = None,
        now: Callable[[], str] = _utc_timestamp,
    ):
        self.columns = columns
        self.engine = engine or QuantityCostEngine()
        self.now = now

    def _cell(self, row: Row, key: str | None) -> str:
        if not key:
            return ""
        return row.get(key) or ""

    def resolve_product_code(self, row: Row) -> str:
        """Pack UPC without leading zeros, then case UPC, then the secondary product number"""
        pack_upc = self._cell(row, self.columns.product_number).lstrip("0")
        if pack_upc:
            return pack_upc
        case_upc = self._cell(row, self.columns.case_upc)
        if case_upc:
            return case_upc
        secondary = self._cell(row, self.columns.product_number2)
        if secondary:
            return secondary
        return FALLBACK_PRODUCT_CODE

    def resolve_order_code(self, row: Row) -> str:
        for key in (
            self.columns.case_upc,
            self.columns.product_number,
            self.columns.product_number2,
            self.columns.supplier_item_number,
        ):
            value = self._cell(row, key)
            if value:
                return value
        return ""

    def container_size(self, row: Row) -> int:
        units = parse_int(self._cell(row, self.columns.units_per_pack))
        if units is not None and units > 0:
            return units
        packs = parse_int(self._cell(row, self.columns.packs_per_case))
        if packs is not None and packs > 0:
            return packs
        return 1

    def supplier_price(self, row: Row) -> float:
        c = self.columns
        raw_cost = self._cell(row, c.unit_cost)
        if parse_float(raw_cost) is None:
            logger.warning(
                "Invalid or missing unit cost, using 1",
                product=self._cell(row, c.product_description),
                unit_cost=raw_cost,
                packs_per_case=self._cell(row, c.packs_per_case),
                units_per_pack=self._cell(row, c.units_per_pack),
            )
            return 1.0

        value = self.engine.unit_cost(
            raw_cost,
            self._cell(row, c.packs_per_case),
            self._cell(row, c.units_per_pack),
            self._cell(row, c.unit_of_measure),
            self._cell(row, c.discount_adjustment_total),
            self._cell(row, c.quantity),
            self._cell(row, c.gl_code),
        )
        if not math.isfinite(value) or value == 0:
            return 1.0
        return value

    def build_item(self, row: Row, supplier_name: str, shelf_life: str) -> LineItem:
        c = self.columns
        amount = self.engine.canonical_units(
            self._cell(row, c.quantity),
            self._cell(row, c.packs_per_case),
            self._cell(row, c.units_per_pack),
            self._cell(row, c.unit_of_measure),
            self._cell(row, c.gl_code),
        )

        return LineItem(
            name=self._cell(row, c.product_description) or FALLBACK_PRODUCT_NAME,
            unit_type=self._cell(row, c.unit_of_measure),
            ordered_amount=amount,
            delivered_amount=amount,
            product_code=self.resolve_product_code(row),
            supplier_price=self.supplier_price(row),
            container_size=self.container_size(row),
            buyer=self._cell(row, c.retailer_name) or "Unknown",
            supplier_code=self._cell(row, c.case_upc) or FALLBACK_SUPPLIER_CODE,
            order_code=self.resolve_order_code(row),
            commodity_group=self._cell(row, c.gl_code) or "API",
            supplier_name=supplier_name or "UNASSIGNED",
            shelf_life=shelf_life,
        )

    def build(self, rows: Sequence[Row], supplier_name: str = "") -> list[LineItem]:
        """
        Build one line item per row, keeping the first row for each product code.

        Duplicates are dropped and reported; they never fail the invoice.
        """
        shelf_life = self.now()
        items = [self.build_item(row, supplier_name, shelf_life) for row in rows]
        unique, dropped = dedupe_by_product_code(items)

        if dropped:
            logger.warning(
                "Duplicate product codes in invoice group, sending unique items only",
                supplier=supplier_name,
                rows=len(items),
                unique=len(unique),
                dropped=dropped,
            )
        return unique
