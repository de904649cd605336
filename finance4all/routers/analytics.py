from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from typing import Optional
from datetime import date

from finance4all.auth import get_current_user
from finance4all.db.core import get_db, UserDB
from finance4all.errors import InputValidationError
from finance4all.models import analytics as analytics_models
from finance4all.services import calculations
from finance4all.services.date_ranges import get_current_month_range, resolve_named_range

router = APIRouter(
    prefix="/analytics",
    tags=["analytics"],
)


@router.get("/net-worth", response_model=analytics_models.NetWorthResult)
def read_net_worth(
    db: Session = Depends(get_db),
    current_user: UserDB = Depends(get_current_user)
):
    """
    Current net worth across the user's active accounts.
    """
    return calculations.calculate_net_worth(db, current_user.id)


@router.get("/cash-flow", response_model=analytics_models.CashFlowResult)
def read_cash_flow(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    range: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: UserDB = Depends(get_current_user)
):
    """
    Income and expenses between two dates (inclusive).

    Pass either ``start_date`` and ``end_date`` or a named ``range``
    (``current_month``, ``year_to_date``, ``last_N_months``). With neither,
    the current month is used.
    """
    if range is not None:
        if start_date or end_date:
            raise InputValidationError([{"field": "range", "message": "Use either range or start_date/end_date"}])
        try:
            start_date, end_date = resolve_named_range(range)
        except ValueError as e:
            raise InputValidationError([{"field": "range", "message": str(e)}])
    elif start_date is None and end_date is None:
        start_date, end_date = get_current_month_range()
    elif start_date is None or end_date is None:
        missing = "start_date" if start_date is None else "end_date"
        raise InputValidationError([{"field": missing, "message": "Both start_date and end_date are required"}])

    if start_date > end_date:
        raise InputValidationError([{"field": "start_date", "message": "Start date must be before end date"}])

    return calculations.calculate_cash_flow(db, current_user.id, start_date, end_date)


@router.post("/projection", response_model=analytics_models.ProjectionResult)
def run_projection(
    assumptions: analytics_models.ProjectionRequest,
    request: Request,
    db: Session = Depends(get_db),
    current_user: UserDB = Depends(get_current_user)
):
    """
    Project net worth forward with ad-hoc assumptions, one entry per year from today.
    """
    return calculations.calculate_projection(
        db, current_user, assumptions, default_age=request.app.state.settings.DEFAULT_BASE_AGE
    )
