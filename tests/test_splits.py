"""Tests for building split lines from a transaction total."""

from decimal import Decimal

import pytest

from autosplit.exceptions import InvalidAmountError, SplitValidationError
from autosplit.models import SplitMode
from autosplit.settle.splits import (
    build_custom_splits,
    build_equal_splits,
    build_percentage_splits,
    build_splits,
)


def as_pairs(splits) -> list[tuple[str, int]]:
    return [(s.user_id, s.amount) for s in splits]


class TestEqualSplits:
    """Equal splits among a list of members."""

    def test_remainder_to_first_members(self):
        splits = build_equal_splits(100, ["a", "b", "c"])

        assert as_pairs(splits) == [("a", 34), ("b", 33), ("c", 33)]

    def test_single_member_takes_everything(self):
        assert as_pairs(build_equal_splits(999, ["a"])) == [("a", 999)]

    def test_no_members(self):
        with pytest.raises(SplitValidationError, match="At least one member"):
            build_equal_splits(100, [])

    def test_duplicate_members(self):
        with pytest.raises(SplitValidationError, match="only appear once"):
            build_equal_splits(100, ["a", "a"])

    def test_negative_total(self):
        with pytest.raises(InvalidAmountError):
            build_equal_splits(-1, ["a"])


class TestPercentageSplits:
    """Percentage splits with exact paise reconstruction."""

    def test_clean_percentages(self):
        splits = build_percentage_splits(
            1000, {"a": Decimal("50"), "b": Decimal("25"), "c": Decimal("25")}
        )

        assert as_pairs(splits) == [("a", 500), ("b", 250), ("c", 250)]

    def test_leftover_goes_to_largest_fraction(self):
        """33.33/33.33/33.34 of 100 paise: the 0.34 fraction wins the spare paisa."""
        splits = build_percentage_splits(
            100,
            {"a": Decimal("33.33"), "b": Decimal("33.33"), "c": Decimal("33.34")},
        )

        assert as_pairs(splits) == [("a", 33), ("b", 33), ("c", 34)]
        assert sum(s.amount for s in splits) == 100

    def test_tied_fractions_favour_earlier_members(self):
        splits = build_percentage_splits(
            1, {"a": Decimal("50"), "b": Decimal("50")}
        )

        assert as_pairs(splits) == [("a", 1), ("b", 0)]

    def test_must_sum_to_hundred(self):
        with pytest.raises(SplitValidationError, match="must sum to 100"):
            build_percentage_splits(1000, {"a": Decimal("60"), "b": Decimal("30")})

    def test_negative_percentage(self):
        with pytest.raises(SplitValidationError, match="negative"):
            build_percentage_splits(1000, {"a": Decimal("120"), "b": Decimal("-20")})

    def test_no_members(self):
        with pytest.raises(SplitValidationError):
            build_percentage_splits(1000, {})


class TestCustomSplits:
    """Custom per-member amounts."""

    def test_amounts_used_as_given(self):
        splits = build_custom_splits(1200, {"a": 700, "b": 500})

        assert as_pairs(splits) == [("a", 700), ("b", 500)]

    def test_mismatch_rejected(self):
        with pytest.raises(
            SplitValidationError,
            match=r"Split amounts \(900\) must equal the transaction total \(1000\)",
        ):
            build_custom_splits(1000, {"a": 400, "b": 500})

    def test_negative_amount_rejected(self):
        with pytest.raises(InvalidAmountError):
            build_custom_splits(100, {"a": 200, "b": -100})

    def test_zero_share_allowed(self):
        splits = build_custom_splits(100, {"a": 100, "b": 0})

        assert as_pairs(splits) == [("a", 100), ("b", 0)]


class TestDispatch:
    """build_splits picks the right builder."""

    def test_equal(self):
        splits = build_splits(SplitMode.EQUAL, 300, member_ids=["a", "b", "c"])

        assert [s.amount for s in splits] == [100, 100, 100]

    def test_percentage(self):
        splits = build_splits(
            SplitMode.PERCENTAGE, 300, percentages={"a": Decimal("100")}
        )

        assert as_pairs(splits) == [("a", 300)]

    def test_custom(self):
        splits = build_splits(SplitMode.CUSTOM, 300, amounts={"a": 100, "b": 200})

        assert as_pairs(splits) == [("a", 100), ("b", 200)]

    def test_missing_inputs(self):
        with pytest.raises(SplitValidationError):
            build_splits(SplitMode.CUSTOM, 300)
