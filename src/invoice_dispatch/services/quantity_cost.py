"""
Quantity and unit cost normalization for vendor invoice lines.

Vendor exports describe the same delivery in different unit-of-measure
conventions: some count eaches or bottles, some count cases that hold a
number of packs, some count packs that hold a number of units. The
inventory API wants one canonical unit count per line and a cost for one
of those units.

Rules are evaluated in order and the first match wins:

1. quantity <= 0                                   -> 0
2. unit of measure EA or BO                        -> quantity
3. CA with one pack per case, or CA with a known
   case size in units per pack                     -> quantity * units per pack
4. four packs per case with GL code BEER           -> quantity * units per pack
5. no units per pack but at least one pack         -> quantity * packs per case
6. anything else                                   -> quantity * packs per case

A second, older rule set was used on the cost path by earlier exports and is
kept selectable as ``"legacy"``; see ``legacy_units``.
"""

import math
import re
from typing import Literal

from loguru import logger

Ruleset = Literal["standard", "legacy"]

EACH_UNITS = frozenset({"EA", "BO"})
CASE_UNIT_SIZES = frozenset({4, 6, 9, 12, 15, 16, 18, 24, 48})
PACK_DIVISOR_SIZES = frozenset({12, 15, 16})

_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_int(value) -> int | None:
    """
    Parse the leading integer of a CSV cell.

    "12" -> 12, "12.0" -> 12, " 6 pk" -> 6, "" or "n/a" -> None.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    match = _INT_PREFIX.match(str(value))
    return int(match.group(1)) if match else None


def parse_float(value) -> float | None:
    """Parse the leading decimal of a CSV cell, ignoring "$" and thousands separators"""
    if value is None:
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            number = float(value)
        except OverflowError:
            return None
    else:
        text = str(value).replace("$", "").replace(",", "")
        match = _FLOAT_PREFIX.match(text)
        if not match:
            return None
        number = float(match.group(1))
    # "1e999" overflows to inf; treat it like any other unreadable cell
    return number if math.isfinite(number) else None


def normalize_uom(unit_of_measure) -> str:
    return str(unit_of_measure or "").strip().upper()


def normalize_packs(packs_per_case: int | None, units_per_pack: int | None) -> tuple[int, int]:
    """
    Fill in missing pack fields from each other.

    A missing or non-positive value takes the other's value; when both are
    missing both become 1.
    """
    if units_per_pack is None or units_per_pack <= 0:
        if packs_per_case is None or packs_per_case <= 0:
            units_per_pack = 1
        else:
            units_per_pack = packs_per_case

    if packs_per_case is None or packs_per_case <= 0:
        packs_per_case = units_per_pack

    return packs_per_case, units_per_pack


def standard_units(quantity: int, packs_per_case: int, units_per_pack: int, uom: str, gl_code: str) -> int:
    if quantity <= 0:
        return 0
    if uom in EACH_UNITS:
        return quantity
    if (packs_per_case == 1 and uom == "CA") or (uom == "CA" and units_per_pack in CASE_UNIT_SIZES):
        return quantity * units_per_pack
    if packs_per_case == 4 and gl_code == "BEER":
        return quantity * units_per_pack
    if units_per_pack == 0 and packs_per_case >= 1:
        return quantity * packs_per_case
    return quantity * packs_per_case


def legacy_units(quantity: int, packs_per_case: int, units_per_pack: int, uom: str, gl_code: str) -> int:
    """
    Rule set from the older cost calculation.

    Differs from the standard set in rule 3: it keys on packs per case
    (1, 2, or 6 with a known case size) instead of the CA unit, and also
    accepts 20 units per pack when the line is counted in cases.
    """
    if quantity <= 0:
        return 0
    if uom in EACH_UNITS:
        return quantity
    if (
        packs_per_case in (1, 2)
        or (packs_per_case == 6 and (units_per_pack in CASE_UNIT_SIZES or (units_per_pack == 20 and uom == "CA")))
    ):
        return quantity * units_per_pack
    if packs_per_case == 4 and gl_code == "BEER":
        return quantity * units_per_pack
    return quantity * packs_per_case


_RULESETS = {
    "standard": standard_units,
    "legacy": legacy_units,
}


def canonical_units(
    quantity,
    packs_per_case,
    units_per_pack,
    unit_of_measure,
    gl_code=None,
    ruleset: Ruleset = "standard",
) -> int:
    """
    Convert an invoice line's pack/case fields into a count of sellable units.

    Args:
        quantity: Ordered quantity as it appears on the invoice
        packs_per_case: Packs in one case
        units_per_pack: Units in one pack
        unit_of_measure: Invoice unit code (EA, BO, CA, ...)
        gl_code: GL/category code of the line
        ruleset: "standard" or "legacy"

    Returns:
        Canonical unit count, 0 for empty or negative lines
    """
    qty = parse_int(quantity)
    if qty is None or qty <= 0:
        return 0

    packs, units = normalize_packs(parse_int(packs_per_case), parse_int(units_per_pack))
    uom = normalize_uom(unit_of_measure)
    gl = str(gl_code or "").strip()

    return _RULESETS[ruleset](qty, packs, units, uom, gl)


def discount_per_unit(discount_adjustment_total: float, units: int) -> float:
    """Spread a line's discount over its canonical units; NaN when there are none"""
    if units == 0:
        return math.nan
    return discount_adjustment_total / units


def unit_cost(
    unit_cost_value,
    packs_per_case,
    units_per_pack,
    unit_of_measure,
    discount_adjustment_total,
    quantity,
    gl_code=None,
    ruleset: Ruleset = "standard",
) -> float:
    """
    Derive the supplier price of one canonical unit.

    Each/bottle lines divide the discounted line total by quantity. Other
    lines divide the case cost by packs per case (for 12/15/16-pack cases)
    or by units per pack, then add the discount spread per canonical unit.

    Returns:
        Unit cost, 0.0 for empty or negative lines. The result is NaN only
        when the discount cannot be spread; callers decide the fallback.
    """
    qty = parse_int(quantity)
    if qty is None or qty <= 0:
        return 0.0

    cost = parse_float(unit_cost_value) or 1.0
    packs, units = normalize_packs(parse_int(packs_per_case), parse_int(units_per_pack))
    uom = normalize_uom(unit_of_measure)
    gl = str(gl_code or "").strip()
    discount = parse_float(discount_adjustment_total)
    if discount is None:
        discount = 0.0

    total_units = _RULESETS[ruleset](qty, packs, units, uom, gl)
    per_unit_discount = discount_per_unit(discount, total_units)

    if uom in EACH_UNITS:
        return ((qty * cost) + discount) / qty
    if packs in PACK_DIVISOR_SIZES:
        return (cost / packs) + per_unit_discount
    return (cost / units) + per_unit_discount


class QuantityCostEngine:
    """
    Applies the unit rules for one run.

    Amounts always use the standard rule set. The cost path uses whichever
    rule set is configured, so older exports can keep their historic
    prices while amounts stay consistent.
    """

    def __init__(self, ruleset: Ruleset = "standard"):
        if ruleset not in _RULESETS:
            raise ValueError(f"Unknown unit ruleset: {ruleset}")
        self.ruleset = ruleset

    def canonical_units(self, quantity, packs_per_case, units_per_pack, unit_of_measure, gl_code=None) -> int:
        return canonical_units(quantity, packs_per_case, units_per_pack, unit_of_measure, gl_code)

    def unit_cost(
        self,
        unit_cost_value,
        packs_per_case,
        units_per_pack,
        unit_of_measure,
        discount_adjustment_total,
        quantity,
        gl_code=None,
    ) -> float:
        value = unit_cost(
            unit_cost_value,
            packs_per_case,
            units_per_pack,
            unit_of_measure,
            discount_adjustment_total,
            quantity,
            gl_code,
            ruleset=self.ruleset,
        )
        if math.isnan(value):
            logger.debug(
                "Unit cost undefined for line",
                unit_cost=unit_cost_value,
                quantity=quantity,
                unit_of_measure=unit_of_measure,
            )
        return value
