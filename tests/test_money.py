"""Tests for minor-unit conversion and formatting."""

import pytest

from autosplit.exceptions import InvalidAmountError
from autosplit.money import format_amount, to_minor_units


class TestToMinorUnits:
    def test_whole_rupees(self):
        assert to_minor_units("250") == 25000

    def test_paise(self):
        assert to_minor_units("12.34") == 1234

    def test_rounds_half_up(self):
        assert to_minor_units("0.005") == 1
        assert to_minor_units("250.505") == 25051

    def test_grouping_commas(self):
        assert to_minor_units("1,234.5") == 123450

    @pytest.mark.parametrize("bad", ["abc", "", "NaN", "inf"])
    def test_invalid(self, bad):
        with pytest.raises(InvalidAmountError):
            to_minor_units(bad)

    def test_too_large(self):
        """Amounts beyond decimal precision are rejected, not crashed on."""
        with pytest.raises(InvalidAmountError, match="out of range"):
            to_minor_units("1e30")


class TestFormatAmount:
    def test_grouping(self):
        assert format_amount(123456) == "₹1,234.56"

    def test_small_and_negative(self):
        assert format_amount(5) == "₹0.05"
        assert format_amount(-5) == "-₹0.05"

    def test_custom_symbol(self):
        assert format_amount(1000, symbol="$") == "$10.00"
