from datetime import date, datetime, time, timezone

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..container import Container
from ..deps import get_container
from ..schemas import FinancialSummaryOut

router = APIRouter(prefix="/users/{user_id}", tags=["reports"])


def _day_start(value: date) -> datetime:
    return datetime.combine(value, time.min, tzinfo=timezone.utc)


def _day_end(value: date) -> datetime:
    return datetime.combine(value, time.max, tzinfo=timezone.utc)


@router.get("/summary", response_model=FinancialSummaryOut)
def get_financial_summary(
    user_id: int,
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    container: Container = Depends(get_container),
) -> FinancialSummaryOut:
    if start_date and end_date and start_date > end_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="start_date must be on or before end_date.",
        )

    summary = container.financial_summary.execute(
        user_id,
        start_date=_day_start(start_date) if start_date else None,
        end_date=_day_end(end_date) if end_date else None,
    )
    return FinancialSummaryOut.model_validate(summary.to_dict())
