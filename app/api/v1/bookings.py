from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query

from app.api.v1.schemas import (
    DisplayPageSchema,
    PaymentChangeRequestSchema,
    StatusChangeRequestSchema,
    TransitionResultSchema,
)
from app.wiring.dependencies import get_bookings_page_use_case, get_lifecycle_use_case
from app.application.exceptions import (
    BookingNotFoundError,
    CollaboratorError,
    IllegalRemovalError,
    IllegalTransitionError,
)
from app.application.ports.booking_store import BookingFilter
from app.application.use_cases.booking_lifecycle import BookingLifecycleUseCase
from app.application.use_cases.bookings_page import BookingsPageUseCase
from app.domain.entities.transition import RemovalMode

router = APIRouter()


@router.get("/bookings", response_model=DisplayPageSchema)
def list_bookings(
    page: int = Query(1, ge=1),
    page_size: int | None = Query(None, ge=1, le=100),
    customer_id: str | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    include_archived: bool = False,
    uc: BookingsPageUseCase = Depends(get_bookings_page_use_case),
):
    booking_filter = BookingFilter(
        customer_id=customer_id,
        date_from=date_from,
        date_to=date_to,
        include_archived=include_archived,
    )
    try:
        result = uc.execute(booking_filter, page=page, page_size=page_size)
    except CollaboratorError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return DisplayPageSchema.from_page(result)


@router.post("/bookings/{booking_id}/status", response_model=TransitionResultSchema)
def change_status(
    booking_id: str,
    req: StatusChangeRequestSchema,
    uc: BookingLifecycleUseCase = Depends(get_lifecycle_use_case),
):
    try:
        result = uc.change_status(booking_id, req.status, req.scope)
    except BookingNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except IllegalTransitionError as e:
        raise HTTPException(status_code=409, detail=_illegal_detail(e))
    except CollaboratorError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return TransitionResultSchema.from_result(result)


@router.post("/bookings/{booking_id}/payment", response_model=TransitionResultSchema)
def change_payment(
    booking_id: str,
    req: PaymentChangeRequestSchema,
    uc: BookingLifecycleUseCase = Depends(get_lifecycle_use_case),
):
    try:
        result = uc.apply_payment_event(
            booking_id,
            req.event,
            req.scope,
            method=req.method,
            amount=req.amount,
            slip_url=req.slip_url,
            reason=req.reason,
        )
    except BookingNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except IllegalTransitionError as e:
        raise HTTPException(status_code=409, detail=_illegal_detail(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except CollaboratorError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return TransitionResultSchema.from_result(result)


@router.post("/bookings/{booking_id}/archive", response_model=TransitionResultSchema)
def archive_booking(
    booking_id: str,
    uc: BookingLifecycleUseCase = Depends(get_lifecycle_use_case),
):
    return _remove(uc, booking_id, RemovalMode.ARCHIVE, privileged=False)


@router.delete("/bookings/{booking_id}", response_model=TransitionResultSchema)
def delete_booking(
    booking_id: str,
    privileged: bool = Query(False),
    uc: BookingLifecycleUseCase = Depends(get_lifecycle_use_case),
):
    return _remove(uc, booking_id, RemovalMode.DELETE, privileged=privileged)


def _remove(uc: BookingLifecycleUseCase, booking_id: str, mode: RemovalMode, privileged: bool):
    try:
        result = uc.remove(booking_id, mode, privileged=privileged)
    except BookingNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except IllegalRemovalError as e:
        raise HTTPException(status_code=403 if mode == RemovalMode.DELETE else 409, detail=str(e))
    except CollaboratorError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return TransitionResultSchema.from_result(result)


def _illegal_detail(e: IllegalTransitionError) -> dict:
    return {
        "message": str(e),
        "kind": e.kind,
        "current": e.current,
        "requested": e.requested,
        "allowed": list(e.allowed),
    }
