from fastapi import APIRouter, Depends, HTTPException

from app.api.v1.schemas import (
    PriceQuerySchema, PriceResolutionSchema,
    ScheduleRequestSchema, ScheduleResponseSchema,
)
from app.wiring.dependencies import get_business_today, get_resolve_price_use_case
from app.application.exceptions import CollaboratorError
from app.application.use_cases.resolve_price import ResolvePriceUseCase
from app.application.utils.recurring_schedule import (
    generate_auto_schedule_dates,
    validate_recurring_dates,
)
from app.domain.entities.booking import RecurringPattern
from app.domain.entities.pricing import PriceQuery

router = APIRouter()


@router.post("/pricing/resolve", response_model=PriceResolutionSchema)
def resolve_price(
    req: PriceQuerySchema,
    uc: ResolvePriceUseCase = Depends(get_resolve_price_use_case),
):
    try:
        result = uc.execute(PriceQuery(package_id=req.package_id, area=req.area, frequency=req.frequency))
    except CollaboratorError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return PriceResolutionSchema.from_result(result)


@router.post("/recurring/schedule", response_model=ScheduleResponseSchema)
def plan_schedule(req: ScheduleRequestSchema):
    if req.dates is not None:
        dates = list(req.dates)
    elif req.pattern == RecurringPattern.CUSTOM:
        raise HTTPException(status_code=400, detail="Custom pattern requires explicit dates")
    else:
        dates = generate_auto_schedule_dates(req.start_date, req.frequency, req.pattern)

    errors = validate_recurring_dates(dates, req.frequency, get_business_today()())
    return ScheduleResponseSchema(dates=dates, errors=errors)
