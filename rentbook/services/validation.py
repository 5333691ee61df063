"""Input validation shared by bill creation and payment claims.

Every check raises ValidationError with a message that names the offending field;
the messages are shown to users as-is. Nothing here touches the database.
"""

import math
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from rentbook.errors import ValidationError

PDF_MIME_TYPE = "application/pdf"

# Money columns are Numeric(14, 4)
MONEY_QUANTUM = Decimal("0.0001")
MONEY_LIMIT = Decimal("10000000000")


@dataclass
class MeterReadingInput:
    """Raw meter readings for one utility as entered by the owner."""

    previous_reading: Any = 0
    current_reading: Any = 0
    rate: Any = 0


@dataclass
class AdHocChargeInput:
    """One "other charge" row of the bill form."""

    name: str
    amount: Any


@dataclass
class BillInput:
    """Bill creation form."""

    property_id: Any
    property_name: str
    tenant_name: str
    billing_period: str
    base_rent: Any
    tenant_email: Optional[str] = None
    due: Any = 0
    penalty: Any = None
    """None derives the penalty from due and the configured penalty rate."""
    electricity: Optional[MeterReadingInput] = None
    water: Optional[MeterReadingInput] = None
    internet: Any = 0
    other_charges: list[AdHocChargeInput] = field(default_factory=list)


@dataclass(frozen=True)
class EvidenceRef:
    """Uploaded payment evidence descriptor."""

    url: str
    mime_type: Optional[str] = None
    name: Optional[str] = None


def _to_number(value: Any) -> Optional[Decimal]:
    """Strict numeric conversion: None for anything that is not a finite number."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if not isinstance(value, (int, float, str, Decimal)):
        return None
    try:
        number = Decimal(str(value).strip()) if not isinstance(value, Decimal) else value
    except InvalidOperation:
        return None
    return number if number.is_finite() else None


def fits_money_scale(number: Decimal) -> bool:
    """True when number is stored exactly by a Numeric(14, 4) column."""
    if abs(number) >= MONEY_LIMIT:
        return False
    return number == number.quantize(MONEY_QUANTUM)


def require_money(number: Decimal, label: str) -> Decimal:
    """Return number unchanged when a money column stores it exactly, else fail naming label."""
    if abs(number) >= MONEY_LIMIT:
        raise ValidationError(f"{label} is too large.")
    if not fits_money_scale(number):
        raise ValidationError(f"{label} must have at most 4 decimal places.")
    return number


def require_non_negative(value: Any, label: str) -> Decimal:
    """Return value as Decimal, or fail with "<label> must be a non-negative number."."""
    number = _to_number(value)
    if number is None or number < 0:
        raise ValidationError(f"{label} must be a non-negative number.")
    return require_money(number, label)


def require_text(value: Any, message: str) -> str:
    """Return the stripped text, or fail with message when blank."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(message)
    return value.strip()


def require_id(value: Any, message: str) -> int:
    """Return value as a positive int id, or fail with message."""
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError(message)
    return value


def validate_meter_readings(readings: MeterReadingInput, label: str) -> tuple[Decimal, Decimal, Decimal]:
    """Validate one utility's readings.

    Returns:
        (previous, current, rate) as Decimals

    Raises:
        ValidationError: negative/non-numeric values or current < previous
    """
    previous = require_non_negative(readings.previous_reading, f"{label} previous unit")
    current = require_non_negative(readings.current_reading, f"{label} current unit")
    rate = require_non_negative(readings.rate, f"{label} rate")
    if current < previous:
        raise ValidationError(
            f"{label} current unit must be greater than or equal to previous unit."
        )
    require_money((current - previous) * rate, f"{label} charge")
    return previous, current, rate


def validate_bill_input(bill_input: BillInput) -> None:
    """Validate a bill creation form, stopping at the first problem."""
    require_id(bill_input.property_id, "Valid property is required.")
    require_text(bill_input.property_name, "Property name is required.")
    require_text(bill_input.tenant_name, "Tenant name is required.")
    require_text(bill_input.billing_period, "Billing period is required.")

    require_non_negative(bill_input.base_rent, "Base rent")
    require_non_negative(bill_input.due, "Due")
    if bill_input.penalty is not None:
        require_non_negative(bill_input.penalty, "Penalty")
    require_non_negative(bill_input.internet, "Internet")

    if bill_input.electricity is not None:
        validate_meter_readings(bill_input.electricity, "Electricity")
    if bill_input.water is not None:
        validate_meter_readings(bill_input.water, "Water")

    seen: set[str] = set()
    for row, charge in enumerate(bill_input.other_charges, start=1):
        name = require_text(charge.name, f"Other charge label is required at row {row}.")
        if name in seen:
            raise ValidationError(f"Other charge '{name}' is listed more than once.")
        seen.add(name)
        require_non_negative(charge.amount, f"Other charge amount for {name}")


def parse_paid_amount(value: Any) -> Decimal:
    """Validate a claimed payment amount.

    The amount must be a finite number, strictly positive and exactly storable
    at four decimal places, so the persisted claim never rounds to zero.
    """
    number = _to_number(value)
    if number is None:
        raise ValidationError("Paid amount must be a number.")
    if number <= 0:
        raise ValidationError("Paid amount must be greater than 0.")
    return require_money(number, "Paid amount")


def is_supported_evidence_type(mime_type: Optional[str]) -> bool:
    """PDF or any image type."""
    return mime_type == PDF_MIME_TYPE or (mime_type or "").startswith("image/")


def validate_evidence(evidence: Optional[EvidenceRef]) -> None:
    """Validate an evidence descriptor; None means no evidence was attached."""
    if evidence is None:
        return
    require_text(evidence.url, "Evidence URL is required.")
    if evidence.mime_type and not is_supported_evidence_type(evidence.mime_type):
        raise ValidationError("Only PDF and image files are supported.")


__all__ = [
    "AdHocChargeInput",
    "BillInput",
    "EvidenceRef",
    "MeterReadingInput",
    "fits_money_scale",
    "is_supported_evidence_type",
    "parse_paid_amount",
    "require_id",
    "require_money",
    "require_non_negative",
    "require_text",
    "validate_bill_input",
    "validate_evidence",
    "validate_meter_readings",
]
