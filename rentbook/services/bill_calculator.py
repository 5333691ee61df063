"""Bill breakdown calculations.

Pure functions only: no session, no I/O. Used by the bills service when a bill is
created and by the API for live calculators and read-only bill views.

Charge sections are either a fixed amount or a metered usage record:

    >>> calculate_utility_charge(100, 150, 12)
    Decimal('600')
    >>> amount_of(MeteredCharge(Decimal(200), Decimal(150), Decimal(12)))
    Decimal('0')
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, NamedTuple, Union

ZERO = Decimal("0")

# Share of carried-over dues charged as late penalty when none is recorded
DEFAULT_PENALTY_RATE = Decimal("0.10")


def as_decimal(value: Any, fallback: Decimal = ZERO) -> Decimal:
    """Convert a JSON/user number to Decimal.

    Floats go through str() so 0.1 stays 0.1. Booleans, None, non-numeric
    strings and non-finite values yield the fallback.
    """
    if isinstance(value, bool) or value is None:
        return fallback
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, (int, float, str)):
        try:
            number = Decimal(str(value).strip())
        except InvalidOperation:
            return fallback
    else:
        return fallback
    if not number.is_finite():
        return fallback
    return number


def _non_negative(value: Any, fallback: Decimal = ZERO) -> Decimal:
    number = as_decimal(value, fallback)
    return number if number >= 0 else max(fallback, ZERO)


def calculate_utility_charge(previous_reading: Any, current_reading: Any, rate_per_unit: Any) -> Decimal:
    """Charge for metered usage: max(0, current - previous) * rate.

    A decreasing reading (meter rollover, typo) clamps to zero usage instead of
    producing a negative charge. Rejecting such input is the validation layer's job.
    """
    usage = max(as_decimal(current_reading) - as_decimal(previous_reading), ZERO)
    return max(usage * as_decimal(rate_per_unit), ZERO)


@dataclass(frozen=True)
class FixedCharge:
    """Charge section stored as a plain amount."""

    amount: Decimal = ZERO


@dataclass(frozen=True)
class MeteredCharge:
    """Charge section derived from two meter readings and a unit rate."""

    previous_reading: Decimal = ZERO
    current_reading: Decimal = ZERO
    rate: Decimal = ZERO

    @property
    def usage(self) -> Decimal:
        return max(self.current_reading - self.previous_reading, ZERO)

    @property
    def amount(self) -> Decimal:
        return calculate_utility_charge(self.previous_reading, self.current_reading, self.rate)


ChargeLine = Union[FixedCharge, MeteredCharge]


def amount_of(line: ChargeLine) -> Decimal:
    """Amount contributed by a charge section, whichever form it takes.

    Use this instead of inspecting the section type at call sites.
    """
    return line.amount


class AdHocCharge(NamedTuple):
    """Named one-off charge (cleaning, repairs, parking...)."""

    name: str
    amount: Decimal


# Aliases accepted when reading usage records written by older clients
_PREVIOUS_KEYS = ("previous_reading", "previousUnit", "previous")
_CURRENT_KEYS = ("current_reading", "currentUnit", "current")


def _first(record: dict[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if key in record:
            return record[key]
    return None


def parse_charge_line(value: Any) -> ChargeLine:
    """Normalize a stored breakdown section into a ChargeLine.

    A bare number is a FixedCharge. A mapping carrying readings or a rate is a
    MeteredCharge whose amount is derived; a mapping with only an amount is fixed.
    Anything else reads as a zero FixedCharge.
    """
    if isinstance(value, dict):
        previous = _first(value, _PREVIOUS_KEYS)
        current = _first(value, _CURRENT_KEYS)
        rate = value.get("rate")
        if previous is None and current is None and rate is None:
            return FixedCharge(_non_negative(value.get("amount")))
        return MeteredCharge(
            previous_reading=_non_negative(previous),
            current_reading=_non_negative(current),
            rate=_non_negative(rate),
        )
    return FixedCharge(_non_negative(value))


def dump_charge_line(line: ChargeLine) -> dict[str, str]:
    """JSON form of a ChargeLine (money as decimal strings)."""
    if isinstance(line, MeteredCharge):
        return {
            "previous_reading": str(line.previous_reading),
            "current_reading": str(line.current_reading),
            "rate": str(line.rate),
            "amount": str(line.amount),
        }
    return {"amount": str(line.amount)}


@dataclass(frozen=True)
class Breakdown:
    """Itemized composition of a bill."""

    base_rent: Decimal = ZERO
    electricity: ChargeLine = field(default_factory=FixedCharge)
    water: ChargeLine = field(default_factory=FixedCharge)
    internet: Decimal = ZERO
    due: Decimal = ZERO
    penalty: Decimal = ZERO
    others: tuple[AdHocCharge, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "base_rent": str(self.base_rent),
            "due": str(self.due),
            "penalty": str(self.penalty),
            "electricity": dump_charge_line(self.electricity),
            "water": dump_charge_line(self.water),
            "internet": str(self.internet),
            "others": {charge.name: str(charge.amount) for charge in self.others},
        }

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any] | None,
        base_rent: Decimal = ZERO,
        penalty_rate: Decimal = ZERO,
    ) -> "Breakdown":
        """Read a stored breakdown, including layouts written by older clients.

        Args:
            data: Breakdown JSON (None reads as empty)
            base_rent: Rent to use when the breakdown carries none
            penalty_rate: Share of due charged as penalty when no penalty is stored
        """
        data = data if isinstance(data, dict) else {}
        due = _non_negative(data.get("due"))
        return cls(
            base_rent=_non_negative(_first(data, ("base_rent", "rentPerMonth", "baseRent")), base_rent),
            electricity=parse_charge_line(data.get("electricity")),
            water=parse_charge_line(data.get("water")),
            internet=_non_negative(_first(data, ("wifi", "internet"))),
            due=due,
            penalty=_non_negative(data.get("penalty"), due * penalty_rate),
            others=tuple(_collect_other_charges(data)),
        )


def compute_bill_total(breakdown: Breakdown) -> Decimal:
    """Sum of every breakdown line. No rounding; formatting is the caller's concern."""
    return (
        breakdown.base_rent
        + breakdown.due
        + breakdown.penalty
        + amount_of(breakdown.electricity)
        + amount_of(breakdown.water)
        + breakdown.internet
        + sum((charge.amount for charge in breakdown.others), ZERO)
    )


class UsageDetail(NamedTuple):
    """Display form of a utility section."""

    amount: Decimal
    previous_reading: Decimal
    current_reading: Decimal
    rate: Decimal
    usage: Decimal


class BillSectionSummary(NamedTuple):
    """Read-only, normalized view of a bill's breakdown."""

    rent_per_month: Decimal
    due: Decimal
    penalty: Decimal
    electricity: UsageDetail
    water: UsageDetail
    wifi: Decimal
    others: list[AdHocCharge]
    others_total: Decimal
    computed_total: Decimal
    total: Decimal


def usage_detail(line: ChargeLine) -> UsageDetail:
    if isinstance(line, MeteredCharge):
        return UsageDetail(
            amount=line.amount,
            previous_reading=line.previous_reading,
            current_reading=line.current_reading,
            rate=line.rate,
            usage=line.usage,
        )
    return UsageDetail(amount=line.amount, previous_reading=ZERO, current_reading=ZERO, rate=ZERO, usage=ZERO)


_KNOWN_BREAKDOWN_KEYS = frozenset(
    {
        "base_rent",
        "rentPerMonth",
        "baseRent",
        "due",
        "penalty",
        "billingInterval",
        "billing_interval",
        "electricity",
        "water",
        "wifi",
        "internet",
        "others",
        "totalPaid",
        "remainingAmount",
    }
)


def _collect_other_charges(breakdown: dict[str, Any]) -> list[AdHocCharge]:
    """Ad-hoc charges merged by trimmed name; a later entry replaces an earlier one."""
    merged: dict[str, Decimal] = {}

    explicit = breakdown.get("others")
    if isinstance(explicit, dict):
        for name, amount in explicit.items():
            if isinstance(name, str) and name.strip():
                merged[name.strip()] = _non_negative(amount)

    # Older bills stored extra charges as top-level numeric keys
    for name, amount in breakdown.items():
        if name in _KNOWN_BREAKDOWN_KEYS or isinstance(amount, bool):
            continue
        if isinstance(amount, (int, float)) and name.strip():
            merged[name.strip()] = _non_negative(amount)

    return [AdHocCharge(name, amount) for name, amount in merged.items()]


def get_bill_section_summary(bill: Any, penalty_rate: Decimal = DEFAULT_PENALTY_RATE) -> BillSectionSummary:
    """Normalize a bill's breakdown for display.

    Tolerates sections stored as plain numbers or as usage records and legacy key
    names. Falls back to bill.base_rent when the breakdown carries no rent, and to
    due * penalty_rate when it carries no penalty.
    """
    breakdown = Breakdown.from_dict(
        bill.breakdown,
        base_rent=_non_negative(bill.base_rent),
        penalty_rate=penalty_rate,
    )
    others = list(breakdown.others)
    computed_total = compute_bill_total(breakdown)

    return BillSectionSummary(
        rent_per_month=breakdown.base_rent,
        due=breakdown.due,
        penalty=breakdown.penalty,
        electricity=usage_detail(breakdown.electricity),
        water=usage_detail(breakdown.water),
        wifi=breakdown.internet,
        others=others,
        others_total=sum((charge.amount for charge in others), ZERO),
        computed_total=computed_total,
        total=_non_negative(bill.total, computed_total),
    )


__all__ = [
    "AdHocCharge",
    "BillSectionSummary",
    "Breakdown",
    "ChargeLine",
    "DEFAULT_PENALTY_RATE",
    "FixedCharge",
    "MeteredCharge",
    "UsageDetail",
    "ZERO",
    "amount_of",
    "as_decimal",
    "calculate_utility_charge",
    "compute_bill_total",
    "get_bill_section_summary",
    "parse_charge_line",
]
