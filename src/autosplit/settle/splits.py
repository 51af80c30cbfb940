"""Build per-member split lines for a transaction total."""

from collections.abc import Mapping, Sequence
from decimal import ROUND_FLOOR, Decimal

from ..exceptions import InvalidAmountError, SplitValidationError
from ..models import SplitMode, StoredSplit
from .engine import split_equally


def _check_total(total: int) -> None:
    if total < 0:
        raise InvalidAmountError(f"Transaction total is negative: {total}")


def build_equal_splits(total: int, member_ids: Sequence[str]) -> list[StoredSplit]:
    """Split a total equally; earlier members absorb the leftover paise."""
    _check_total(total)
    if not member_ids:
        raise SplitValidationError("At least one member must be included in the split")
    if len(set(member_ids)) != len(member_ids):
        raise SplitValidationError("A member can only appear once in a split")

    shares = split_equally(total, len(member_ids))
    return [
        StoredSplit(user_id=user_id, amount=share)
        for user_id, share in zip(member_ids, shares)
    ]


def build_percentage_splits(
    total: int, percentages: Mapping[str, Decimal]
) -> list[StoredSplit]:
    """
    Split a total by percentage.

    Each member first gets the floor of their exact share. The paise lost to
    flooring are handed out one at a time to the members with the largest
    fractional parts (earlier members win ties), so the result sums to the
    total exactly.

    Args:
        total: Transaction total in minor units
        percentages: Ordered mapping of user ID to percent (0-100)

    Returns:
        Split lines in the order of ``percentages``

    Raises:
        SplitValidationError: If percentages are empty, negative, or don't
            sum to exactly 100
    """
    _check_total(total)
    if not percentages:
        raise SplitValidationError("At least one member must be included in the split")

    pcts = {user_id: Decimal(str(pct)) for user_id, pct in percentages.items()}
    if any(pct < 0 for pct in pcts.values()):
        raise SplitValidationError("Percentages cannot be negative")

    pct_total = sum(pcts.values(), Decimal("0"))
    if pct_total != Decimal("100"):
        raise SplitValidationError(f"Percentages must sum to 100, got {pct_total}")

    floors: list[int] = []
    fractions: list[Decimal] = []
    for pct in pcts.values():
        exact = Decimal(total) * pct / Decimal("100")
        floored = exact.to_integral_value(rounding=ROUND_FLOOR)
        floors.append(int(floored))
        fractions.append(exact - floored)

    leftover = total - sum(floors)
    by_fraction = sorted(range(len(floors)), key=lambda i: fractions[i], reverse=True)
    for i in by_fraction[:leftover]:
        floors[i] += 1

    return [
        StoredSplit(user_id=user_id, amount=amount)
        for user_id, amount in zip(pcts, floors)
    ]


def build_custom_splits(total: int, amounts: Mapping[str, int]) -> list[StoredSplit]:
    """Use caller-given amounts, which must add up to the total."""
    _check_total(total)
    if not amounts:
        raise SplitValidationError("At least one member must be included in the split")

    for user_id, amount in amounts.items():
        if amount < 0:
            raise InvalidAmountError(f"Split amount for {user_id} is negative: {amount}")

    split_total = sum(amounts.values())
    if split_total != total:
        raise SplitValidationError(
            f"Split amounts ({split_total}) must equal the transaction total ({total})"
        )

    return [
        StoredSplit(user_id=user_id, amount=amount) for user_id, amount in amounts.items()
    ]


def build_splits(
    mode: SplitMode,
    total: int,
    member_ids: Sequence[str] | None = None,
    percentages: Mapping[str, Decimal] | None = None,
    amounts: Mapping[str, int] | None = None,
) -> list[StoredSplit]:
    """Dispatch to the split builder for ``mode``."""
    if mode == SplitMode.EQUAL:
        return build_equal_splits(total, member_ids or [])
    if mode == SplitMode.PERCENTAGE:
        return build_percentage_splits(total, percentages or {})
    if mode == SplitMode.CUSTOM:
        return build_custom_splits(total, amounts or {})
    raise SplitValidationError(f"Unknown split mode: {mode}")
