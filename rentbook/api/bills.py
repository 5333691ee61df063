"""Bills API endpoints: bill creation, views, payment claims and status changes."""

import logging
import time

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from rentbook.api.auth import Actor, get_actor, require_owner
from rentbook.api.schemas import (
    BillResponse,
    BillsResponse,
    BillStatusRequest,
    CreateBillRequest,
    SubmitClaimRequest,
    UtilityChargeRequest,
    UtilityChargeResponse,
    VerifyClaimRequest,
)
from rentbook.errors import AppError, raise_app_error
from rentbook.models.bill import BillStatus
from rentbook.services.bill_calculator import calculate_utility_charge
from rentbook.services.bills_service import BillsService
from rentbook.services.db import get_async_session
from rentbook.services.payment_claim_service import PaymentClaimService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/bills", tags=["bills"])


def _log_debug(endpoint: str, start_time: float, actor: Actor | None = None, **kwargs) -> None:
    """Log API request with timing and actor context at DEBUG level."""
    duration_ms = int((time.time() - start_time) * 1000)
    extra = " ".join(f"{k}={v}" for k, v in kwargs.items())
    logger.debug(
        "bills.%s: role=%s actor_id=%s %sduration_ms=%d",
        endpoint,
        actor.role.value if actor else "-",
        actor.actor_id if actor else "-",
        f"{extra} " if extra else "",
        duration_ms,
    )


@router.post("/calculator/utility", response_model=UtilityChargeResponse)
async def utility_charge(payload: UtilityChargeRequest) -> UtilityChargeResponse:
    """Compute max(0, current - previous) * rate for the bill form's live preview."""
    amount = calculate_utility_charge(payload.previous_reading, payload.current_reading, payload.rate)
    return UtilityChargeResponse(amount=float(amount))


@router.post("", response_model=BillResponse, status_code=status.HTTP_201_CREATED)
async def create_bill(
    payload: CreateBillRequest,
    actor: Actor = Depends(get_actor),  # noqa: B008
    db: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> BillResponse:
    """Create a bill (owner only).

    Raises:
        400: Validation error (message names the field)
        403: Caller is not the owner
        404: Property not found
    """
    start_time = time.time()
    try:
        require_owner(actor)
        bill = await BillsService(db).create_bill(payload.to_input(), actor_id=actor.actor_id)
        _log_debug("create", start_time, actor, bill_id=bill.id)
        return BillResponse.from_bill(bill)
    except AppError as e:
        raise_app_error(e)
    except Exception as e:
        logger.error(f"Error in POST /api/bills: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Server error") from e


@router.get("", response_model=BillsResponse)
async def list_bills(
    property_id: int | None = None,
    bill_status: BillStatus | None = Query(None, alias="status"),  # noqa: B008
    billing_period: str | None = None,
    db: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> BillsResponse:
    """List bills, newest first, optionally filtered by property, status and period."""
    start_time = time.time()
    try:
        bills = await BillsService(db).list_bills(
            property_id=property_id,
            status=bill_status,
            billing_period=billing_period,
        )
        _log_debug("list", start_time, count=len(bills))
        return BillsResponse(bills=[BillResponse.from_bill(bill) for bill in bills])
    except AppError as e:
        raise_app_error(e)
    except Exception as e:
        logger.error(f"Error in GET /api/bills: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Server error") from e


@router.get("/{bill_id}", response_model=BillResponse)
async def get_bill(
    bill_id: int,
    db: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> BillResponse:
    """Get one bill with its breakdown sections and payment summary."""
    try:
        bill = await BillsService(db).get_bill(bill_id)
        return BillResponse.from_bill(bill)
    except AppError as e:
        raise_app_error(e)
    except Exception as e:
        logger.error(f"Error in GET /api/bills/{bill_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Server error") from e


@router.post("/{bill_id}/claims", response_model=BillResponse, status_code=status.HTTP_201_CREATED)
async def submit_claim(
    bill_id: int,
    payload: SubmitClaimRequest,
    actor: Actor = Depends(get_actor),  # noqa: B008
    db: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> BillResponse:
    """Submit a payment claim; the caller's role is the payer.

    Raises:
        400: Bad amount or unsupported evidence type
        404: Bill not found
        409: Bill is cancelled
    """
    start_time = time.time()
    try:
        bill = await PaymentClaimService(db).submit_bill_payment_claim(
            bill_id=bill_id,
            amount_paid=payload.amount_paid,
            remarks=payload.remarks,
            payer=actor.role,
            evidence=payload.evidence.to_ref() if payload.evidence else None,
            actor_id=actor.actor_id,
        )
        _log_debug("submit_claim", start_time, actor, bill_id=bill_id)
        return BillResponse.from_bill(bill)
    except AppError as e:
        raise_app_error(e)
    except Exception as e:
        logger.error(f"Error in POST /api/bills/{bill_id}/claims: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Server error") from e


@router.post("/{bill_id}/claims/{claim_id}/verify", response_model=BillResponse)
async def verify_claim(
    bill_id: int,
    claim_id: int,
    payload: VerifyClaimRequest | None = None,
    actor: Actor = Depends(get_actor),  # noqa: B008
    db: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> BillResponse:
    """Verify a pending claim; the caller must be the payer's counter-party.

    Raises:
        400: approve=false (rejection is not supported)
        403: Caller is the same side as the payer
        404: Bill or claim not found
        409: Claim already processed
    """
    start_time = time.time()
    approve = payload.approve if payload else True
    try:
        bill = await PaymentClaimService(db).verify_bill_payment_claim(
            bill_id=bill_id,
            claim_id=claim_id,
            verifier=actor.role,
            approve=approve,
            actor_id=actor.actor_id,
        )
        _log_debug("verify_claim", start_time, actor, bill_id=bill_id, claim_id=claim_id)
        return BillResponse.from_bill(bill)
    except AppError as e:
        raise_app_error(e)
    except Exception as e:
        logger.error(f"Error in POST /api/bills/{bill_id}/claims/{claim_id}/verify: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Server error") from e


@router.post("/{bill_id}/status", response_model=BillResponse)
async def change_status(
    bill_id: int,
    payload: BillStatusRequest,
    actor: Actor = Depends(get_actor),  # noqa: B008
    db: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> BillResponse:
    """Change bill status (owner only): paid, overdue or cancelled.

    Raises:
        403: Caller is not the owner
        404: Bill not found
        409: Transition not allowed, or bill not yet settled when marking paid
    """
    start_time = time.time()
    try:
        require_owner(actor)
        bill = await BillsService(db).transition_bill_status(
            bill_id, payload.status, actor_id=actor.actor_id
        )
        _log_debug("status", start_time, actor, bill_id=bill_id, status=payload.status.value)
        return BillResponse.from_bill(bill)
    except AppError as e:
        raise_app_error(e)
    except Exception as e:
        logger.error(f"Error in POST /api/bills/{bill_id}/status: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Server error") from e
