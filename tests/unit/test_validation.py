"""Unit tests for validation.py."""

from decimal import Decimal

import pytest

from rentbook.errors import ValidationError
from rentbook.services.validation import (
    AdHocChargeInput,
    BillInput,
    EvidenceRef,
    MeterReadingInput,
    fits_money_scale,
    is_supported_evidence_type,
    parse_paid_amount,
    require_non_negative,
    validate_bill_input,
    validate_evidence,
    validate_meter_readings,
)


def make_input(**overrides) -> BillInput:
    """A valid bill form, with selected fields replaced."""
    values = dict(
        property_id=1,
        property_name="Lakeside Flat 2B",
        tenant_name="Sam Tenant",
        billing_period="January 2026",
        base_rent=1000,
        electricity=MeterReadingInput(100, 150, 12),
        water=MeterReadingInput(50, 60, 5),
        internet=60,
    )
    values.update(overrides)
    return BillInput(**values)


class TestValidateBillInput:
    """Tests for validate_bill_input."""

    def test_valid_input_passes(self):
        validate_bill_input(make_input())

    def test_electricity_reading_decrease_rejected(self):
        """A current reading below the previous one is rejected before any calculation."""
        with pytest.raises(
            ValidationError,
            match="Electricity current unit must be greater than or equal to previous unit",
        ):
            validate_bill_input(make_input(electricity=MeterReadingInput(200, 150, 12)))

    def test_water_reading_decrease_rejected(self):
        with pytest.raises(
            ValidationError,
            match="Water current unit must be greater than or equal to previous unit",
        ):
            validate_bill_input(make_input(water=MeterReadingInput(61, 60, 5)))

    def test_equal_readings_allowed(self):
        validate_bill_input(make_input(water=MeterReadingInput(60, 60, 5)))

    @pytest.mark.parametrize(
        "field, message",
        [
            ("tenant_name", "Tenant name is required."),
            ("property_name", "Property name is required."),
            ("billing_period", "Billing period is required."),
        ],
    )
    def test_blank_text_rejected(self, field, message):
        with pytest.raises(ValidationError) as exc_info:
            validate_bill_input(make_input(**{field: "   "}))
        assert exc_info.value.message == message

    @pytest.mark.parametrize("property_id", [0, -3, None, "1", True])
    def test_invalid_property_reference(self, property_id):
        with pytest.raises(ValidationError, match="Valid property is required"):
            validate_bill_input(make_input(property_id=property_id))

    @pytest.mark.parametrize(
        "overrides, label",
        [
            ({"base_rent": -1}, "Base rent"),
            ({"internet": -0.01}, "Internet"),
            ({"due": "abc"}, "Due"),
            ({"penalty": -5}, "Penalty"),
            ({"electricity": MeterReadingInput(100, 150, -12)}, "Electricity rate"),
            ({"water": MeterReadingInput(-1, 60, 5)}, "Water previous unit"),
            ({"base_rent": float("nan")}, "Base rent"),
        ],
    )
    def test_negative_or_non_numeric_amount_names_field(self, overrides, label):
        with pytest.raises(ValidationError) as exc_info:
            validate_bill_input(make_input(**overrides))
        assert exc_info.value.message == f"{label} must be a non-negative number."

    def test_other_charge_requires_label(self):
        charges = [AdHocChargeInput("Cleaning", 30), AdHocChargeInput("  ", 10)]
        with pytest.raises(ValidationError, match="Other charge label is required at row 2"):
            validate_bill_input(make_input(other_charges=charges))

    def test_other_charge_requires_non_negative_amount(self):
        charges = [AdHocChargeInput("Repairs", -10)]
        with pytest.raises(
            ValidationError, match="Other charge amount for Repairs must be a non-negative number"
        ):
            validate_bill_input(make_input(other_charges=charges))

    def test_duplicate_other_charge_labels_rejected(self):
        """Labels are compared after trimming, so " Cleaning" clashes with "Cleaning"."""
        charges = [AdHocChargeInput("Cleaning", 100), AdHocChargeInput(" Cleaning", 50)]
        with pytest.raises(ValidationError) as exc_info:
            validate_bill_input(make_input(other_charges=charges))
        assert exc_info.value.message == "Other charge 'Cleaning' is listed more than once."

    def test_amount_finer_than_four_places_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_bill_input(make_input(electricity=MeterReadingInput(100, 150, "0.00001")))
        assert exc_info.value.message == "Electricity rate must have at most 4 decimal places."

    def test_utility_charge_finer_than_four_places_rejected(self):
        """0.5 units at 0.0001 per unit is 0.00005, which a money column cannot hold."""
        with pytest.raises(ValidationError) as exc_info:
            validate_bill_input(make_input(water=MeterReadingInput(0, "0.5", "0.0001")))
        assert exc_info.value.message == "Water charge must have at most 4 decimal places."

    def test_amount_too_large_rejected(self):
        with pytest.raises(ValidationError, match="Base rent is too large"):
            validate_bill_input(make_input(base_rent="10000000000"))

    def test_missing_utilities_allowed(self):
        validate_bill_input(make_input(electricity=None, water=None))

    def test_validation_error_is_http_400(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_bill_input(make_input(tenant_name=""))
        assert exc_info.value.http_status == 400
        assert exc_info.value.code == "validation_error"


class TestMeterReadings:
    """Tests for validate_meter_readings."""

    def test_returns_decimals(self):
        assert validate_meter_readings(MeterReadingInput("10.5", 12, 3), "Water") == (
            Decimal("10.5"),
            Decimal("12"),
            Decimal("3"),
        )


class TestParsePaidAmount:
    """Tests for parse_paid_amount."""

    @pytest.mark.parametrize("value", [0, -1, "-0.01", Decimal("0")])
    def test_non_positive_rejected(self, value):
        with pytest.raises(ValidationError, match="Paid amount must be greater than 0"):
            parse_paid_amount(value)

    @pytest.mark.parametrize("value", [None, "ten", float("inf"), float("nan"), True, [100]])
    def test_non_numeric_rejected(self, value):
        with pytest.raises(ValidationError, match="Paid amount must be a number"):
            parse_paid_amount(value)

    def test_valid_amount(self):
        assert parse_paid_amount(710) == Decimal("710")
        assert parse_paid_amount("99.90") == Decimal("99.90")
        assert parse_paid_amount(0.1) == Decimal("0.1")

    @pytest.mark.parametrize("value", ["0.00001", Decimal("12.34567")])
    def test_amount_finer_than_four_places_rejected(self, value):
        with pytest.raises(ValidationError) as exc_info:
            parse_paid_amount(value)
        assert exc_info.value.message == "Paid amount must have at most 4 decimal places."

    def test_amount_too_large_rejected(self):
        with pytest.raises(ValidationError, match="Paid amount is too large"):
            parse_paid_amount(Decimal("1e10"))


class TestEvidence:
    """Tests for evidence validation."""

    @pytest.mark.parametrize("mime_type", ["application/pdf", "image/png", "image/jpeg"])
    def test_supported_types(self, mime_type):
        assert is_supported_evidence_type(mime_type)
        validate_evidence(EvidenceRef(url="https://files.example/receipt", mime_type=mime_type))

    @pytest.mark.parametrize("mime_type", ["text/plain", "application/zip", "video/mp4"])
    def test_unsupported_type_rejected(self, mime_type):
        with pytest.raises(ValidationError, match="Only PDF and image files are supported"):
            validate_evidence(EvidenceRef(url="https://files.example/receipt", mime_type=mime_type))

    def test_missing_mime_type_allowed(self):
        validate_evidence(EvidenceRef(url="https://files.example/receipt"))

    def test_blank_url_rejected(self):
        with pytest.raises(ValidationError, match="Evidence URL is required"):
            validate_evidence(EvidenceRef(url=" ", mime_type="image/png"))

    def test_no_evidence(self):
        validate_evidence(None)


def test_require_non_negative_accepts_decimal_strings():
    assert require_non_negative(" 12.50 ", "Rate") == Decimal("12.50")


def test_fits_money_scale():
    assert fits_money_scale(Decimal("1710.1234"))
    assert fits_money_scale(Decimal("9999999999.9999"))
    assert not fits_money_scale(Decimal("0.00001"))
    assert not fits_money_scale(Decimal("10000000000"))
