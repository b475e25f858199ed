"""
Unit tests for the quantity/cost rules.

Covers rule order, pack field normalization, the legacy rule set and the
unit cost formulas.
"""

import math

import pytest

from invoice_dispatch.services.quantity_cost import (
    QuantityCostEngine,
    canonical_units,
    discount_per_unit,
    normalize_packs,
    parse_float,
    parse_int,
    unit_cost,
)


class TestParsing:

    def test_parse_int_takes_leading_integer(self):
        assert parse_int("12") == 12
        assert parse_int("12.0") == 12
        assert parse_int(" 6 pk") == 6
        assert parse_int("-3") == -3

    def test_parse_int_missing(self):
        assert parse_int("") is None
        assert parse_int("n/a") is None
        assert parse_int(None) is None

    def test_parse_float_strips_currency(self):
        assert parse_float("$1,234.50") == 1234.50
        assert parse_float("-6.00") == -6.0
        assert parse_float("abc") is None

    def test_non_finite_values_are_missing(self):
        assert parse_float("1e999") is None
        assert parse_float("-1e400") is None
        assert parse_float(float("inf")) is None
        assert parse_float(float("nan")) is None
        assert parse_float(10 ** 400) is None
        assert parse_int(float("inf")) is None
        assert parse_int(float("nan")) is None

    def test_normalize_packs(self):
        assert normalize_packs(None, None) == (1, 1)
        assert normalize_packs(0, 0) == (1, 1)
        assert normalize_packs(6, None) == (6, 6)
        assert normalize_packs(None, 12) == (12, 12)
        assert normalize_packs(4, 6) == (4, 6)


class TestCanonicalUnits:

    @pytest.mark.parametrize("quantity", ["0", "-3", 0, -1])
    def test_non_positive_quantity_is_zero(self, quantity):
        assert canonical_units(quantity, 1, 12, "CA", "SODA") == 0

    def test_non_numeric_quantity_is_zero(self):
        assert canonical_units("abc", 1, 12, "CA") == 0

    @pytest.mark.parametrize("uom", ["EA", "BO", "ea", " bo "])
    def test_each_and_bottle_ignore_pack_fields(self, uom):
        assert canonical_units(7, 24, 12, uom, "BEER") == 7

    def test_single_pack_case(self):
        assert canonical_units(10, 1, 12, "CA", "SODA") == 120

    def test_known_case_size(self):
        assert canonical_units(3, 4, 6, "CA", "BEER") == 18

    def test_case_with_unknown_size_uses_packs(self):
        assert canonical_units(2, 3, 10, "CA") == 6

    def test_beer_with_four_packs(self):
        assert canonical_units(2, 4, 6, "PK", "BEER") == 12

    def test_default_fallback(self):
        assert canonical_units(5, 3, 0, "XX") == 15

    def test_default_multiplies_packs(self):
        assert canonical_units(2, 6, 10, "PK", "WINE") == 12

    def test_missing_pack_fields_default_to_one(self):
        assert canonical_units(4, "", "", "CA") == 4

    def test_missing_packs_per_case_borrows_units(self):
        assert canonical_units(2, "", 12, "PK") == 24

    def test_legacy_ruleset_keys_on_packs(self):
        assert canonical_units(2, 2, 10, "PK", ruleset="legacy") == 20
        assert canonical_units(2, 2, 10, "PK") == 4

    def test_legacy_ruleset_accepts_twenty_unit_cases(self):
        assert canonical_units(1, 6, 20, "CA", ruleset="legacy") == 20
        assert canonical_units(1, 6, 20, "CA") == 6


class TestUnitCost:

    def test_non_positive_quantity(self):
        assert unit_cost("18.00", 1, 12, "CA", "-2", "0") == 0.0

    def test_each_spreads_discount_over_quantity(self):
        assert unit_cost("2.50", 1, 1, "EA", "-1.00", 4) == pytest.approx(2.25)

    def test_twelve_pack_case_divides_by_packs(self):
        assert unit_cost("24.00", 12, 1, "CS", "0", 1) == pytest.approx(2.0)

    def test_case_divides_by_units_and_adds_discount(self):
        # 2 cases x 12 units, discount -6 spread over 24 units
        assert unit_cost("18.00", 1, 12, "CA", "-6.00", 2) == pytest.approx(1.25)

    def test_non_numeric_cost_defaults_to_one(self):
        assert unit_cost("n/a", 1, 4, "CA", "", 1) == pytest.approx(0.25)

    def test_missing_discount_is_zero(self):
        assert unit_cost("12.00", 1, 6, "CA", None, 1) == pytest.approx(2.0)

    def test_overflowing_discount_is_zero(self):
        assert unit_cost("12.00", 1, 6, "CA", "1e400", 1) == pytest.approx(2.0)

    def test_discount_per_unit_without_units_is_nan(self):
        assert math.isnan(discount_per_unit(5.0, 0))
        assert discount_per_unit(6.0, 3) == 2.0


class TestQuantityCostEngine:

    def test_unknown_ruleset_rejected(self):
        with pytest.raises(ValueError):
            QuantityCostEngine("bogus")

    def test_amounts_always_use_standard_rules(self):
        engine = QuantityCostEngine("legacy")
        assert engine.canonical_units(2, 2, 10, "PK") == 4

    def test_legacy_cost_path(self):
        legacy = QuantityCostEngine("legacy")
        standard = QuantityCostEngine("standard")

        assert legacy.unit_cost("10", 2, 5, "PK", "-2", 1) == pytest.approx(1.6)
        assert standard.unit_cost("10", 2, 5, "PK", "-2", 1) == pytest.approx(1.0)
