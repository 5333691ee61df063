"""Request and response schemas for the bills API."""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from rentbook.config import get_settings
from rentbook.models.bill import Bill, BillStatus
from rentbook.services.bill_calculator import (
    AdHocCharge,
    BillSectionSummary,
    UsageDetail,
    get_bill_section_summary,
)
from rentbook.services.payment_summary import PaymentHistoryEntry, get_bill_payment_summary
from rentbook.services.property_service import PropertyInput
from rentbook.services.validation import (
    AdHocChargeInput,
    BillInput,
    EvidenceRef,
    MeterReadingInput,
)


# Request schemas
#
# Numbers are accepted loosely here; range checks live in the validation service so
# every error carries the same human-readable message regardless of entry point.


class MeterReadingPayload(BaseModel):
    """Meter readings for one utility."""

    previous_reading: Any = 0
    current_reading: Any = 0
    rate: Any = 0


class AdHocChargePayload(BaseModel):
    """One named ad-hoc charge."""

    name: str = ""
    amount: Any = 0


class CreateBillRequest(BaseModel):
    """Request body for POST /api/bills."""

    property_id: Any
    property_name: str = ""
    tenant_name: str = ""
    tenant_email: str | None = None
    billing_period: str = ""
    base_rent: Any = 0
    due: Any = 0
    penalty: Any = None
    electricity: MeterReadingPayload | None = None
    water: MeterReadingPayload | None = None
    internet: Any = 0
    other_charges: list[AdHocChargePayload] = Field(default_factory=list)

    def to_input(self) -> BillInput:
        return BillInput(
            property_id=self.property_id,
            property_name=self.property_name,
            tenant_name=self.tenant_name,
            tenant_email=self.tenant_email,
            billing_period=self.billing_period,
            base_rent=self.base_rent,
            due=self.due,
            penalty=self.penalty,
            electricity=MeterReadingInput(**self.electricity.model_dump()) if self.electricity else None,
            water=MeterReadingInput(**self.water.model_dump()) if self.water else None,
            internet=self.internet,
            other_charges=[AdHocChargeInput(name=c.name, amount=c.amount) for c in self.other_charges],
        )


class UtilityChargeRequest(BaseModel):
    """Request body for the live utility calculator."""

    previous_reading: Decimal = Decimal("0")
    current_reading: Decimal = Decimal("0")
    rate: Decimal = Decimal("0")


class EvidencePayload(BaseModel):
    """Uploaded evidence descriptor."""

    url: str
    mime_type: str | None = None
    name: str | None = None

    def to_ref(self) -> EvidenceRef:
        return EvidenceRef(url=self.url, mime_type=self.mime_type, name=self.name)


class SubmitClaimRequest(BaseModel):
    """Request body for POST /api/bills/{bill_id}/claims."""

    amount_paid: Any
    remarks: str | None = None
    evidence: EvidencePayload | None = None


class VerifyClaimRequest(BaseModel):
    """Request body for POST /api/bills/{bill_id}/claims/{claim_id}/verify."""

    approve: bool = True


class BillStatusRequest(BaseModel):
    """Request body for POST /api/bills/{bill_id}/status."""

    status: BillStatus


# Response schemas


class UtilityChargeResponse(BaseModel):
    """Computed utility charge."""

    amount: float


class UsageDetailResponse(BaseModel):
    """Utility section with its readings."""

    amount: float
    previous_reading: float
    current_reading: float
    rate: float
    usage: float

    @classmethod
    def from_detail(cls, detail: UsageDetail) -> "UsageDetailResponse":
        return cls(**{name: float(value) for name, value in detail._asdict().items()})


class ChargeResponse(BaseModel):
    """Named ad-hoc charge."""

    name: str
    amount: float

    @classmethod
    def from_charge(cls, charge: AdHocCharge) -> "ChargeResponse":
        return cls(name=charge.name, amount=float(charge.amount))


class SectionSummaryResponse(BaseModel):
    """Normalized bill breakdown for display."""

    rent_per_month: float
    due: float
    penalty: float
    electricity: UsageDetailResponse
    water: UsageDetailResponse
    wifi: float
    others: list[ChargeResponse]
    others_total: float
    computed_total: float
    total: float

    @classmethod
    def from_summary(cls, summary: BillSectionSummary) -> "SectionSummaryResponse":
        return cls(
            rent_per_month=float(summary.rent_per_month),
            due=float(summary.due),
            penalty=float(summary.penalty),
            electricity=UsageDetailResponse.from_detail(summary.electricity),
            water=UsageDetailResponse.from_detail(summary.water),
            wifi=float(summary.wifi),
            others=[ChargeResponse.from_charge(charge) for charge in summary.others],
            others_total=float(summary.others_total),
            computed_total=float(summary.computed_total),
            total=float(summary.total),
        )


class EvidenceResponse(BaseModel):
    """Evidence attached to a claim."""

    url: str
    mime_type: str | None = None
    name: str | None = None


class ClaimResponse(BaseModel):
    """Payment claim as shown in the pending list."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    amount: float
    payer: str
    remarks: str
    claimed_at: datetime
    status: str
    verified_by: str | None = None
    verified_at: datetime | None = None
    evidence: EvidenceResponse | None = None

    @classmethod
    def from_claim(cls, claim) -> "ClaimResponse":
        return cls(
            id=claim.id,
            amount=float(claim.amount),
            payer=claim.payer.value,
            remarks=claim.remarks or "",
            claimed_at=claim.claimed_at,
            status=claim.status.value,
            verified_by=claim.verified_by.value if claim.verified_by else None,
            verified_at=claim.verified_at,
            evidence=(
                EvidenceResponse(url=claim.proof_url, mime_type=claim.proof_mime_type, name=claim.proof_name)
                if claim.proof_url
                else None
            ),
        )


class PaymentHistoryEntryResponse(BaseModel):
    """Verified payment with the balance left after it."""

    claim_id: int
    amount: float
    payer: str
    paid_at: datetime | None = None
    remarks: str
    remaining_amount: float
    evidence: EvidenceResponse | None = None

    @classmethod
    def from_entry(cls, entry: PaymentHistoryEntry) -> "PaymentHistoryEntryResponse":
        return cls(
            claim_id=entry.claim_id,
            amount=float(entry.amount),
            payer=entry.payer.value,
            paid_at=entry.paid_at,
            remarks=entry.remarks,
            remaining_amount=float(entry.remaining_amount),
            evidence=(
                EvidenceResponse(
                    url=entry.evidence.url,
                    mime_type=entry.evidence.mime_type,
                    name=entry.evidence.name,
                )
                if entry.evidence
                else None
            ),
        )


class PaymentSummaryResponse(BaseModel):
    """Derived payment state of a bill."""

    total_paid: float
    remaining_amount: float
    is_settled: bool
    pending_claims: list[ClaimResponse]
    history: list[PaymentHistoryEntryResponse]


class BillResponse(BaseModel):
    """Bill with its breakdown sections and payment summary."""

    id: int
    property_id: int
    property_name: str
    tenant_name: str
    tenant_email: str | None = None
    billing_period: str
    base_rent: float
    total: float
    status: str
    created_at: datetime
    paid_at: datetime | None = None
    payment_method: str | None = None
    proof_url: str | None = None
    sections: SectionSummaryResponse
    payment: PaymentSummaryResponse

    @classmethod
    def from_bill(cls, bill: Bill) -> "BillResponse":
        summary = get_bill_payment_summary(bill)
        return cls(
            id=bill.id,
            property_id=bill.property_id,
            property_name=bill.property_name,
            tenant_name=bill.tenant_name,
            tenant_email=bill.tenant_email,
            billing_period=bill.billing_period,
            base_rent=float(bill.base_rent),
            total=float(bill.total),
            status=bill.status.value,
            created_at=bill.created_at,
            paid_at=bill.paid_at,
            payment_method=bill.payment_method,
            proof_url=bill.proof_url,
            sections=SectionSummaryResponse.from_summary(
                get_bill_section_summary(bill, get_settings().default_penalty_rate)
            ),
            payment=PaymentSummaryResponse(
                total_paid=float(summary.total_paid),
                remaining_amount=float(summary.remaining_amount),
                is_settled=summary.is_settled,
                pending_claims=[ClaimResponse.from_claim(claim) for claim in summary.pending_claims],
                history=[PaymentHistoryEntryResponse.from_entry(entry) for entry in summary.history],
            ),
        )


class BillsResponse(BaseModel):
    """Response for bills list."""

    bills: list[BillResponse]


class CreatePropertyRequest(BaseModel):
    """Request body for POST /api/properties."""

    property_name: str = ""
    owner_name: str | None = None
    property_code: str | None = None

    def to_input(self) -> PropertyInput:
        return PropertyInput(
            property_name=self.property_name,
            owner_name=self.owner_name,
            property_code=self.property_code,
        )


class PropertyResponse(BaseModel):
    """Property as listed to owners and tenants."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    property_name: str
    owner_name: str | None = None
    property_code: str | None = None
    is_active: bool
    created_at: datetime


class PropertiesResponse(BaseModel):
    """Response for properties list."""

    properties: list[PropertyResponse]
