from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from pos_ledger.database import get_db
from pos_ledger.schemas.report import ReportPeriod, SalesSummary
from pos_ledger.services.report_service import ReportService

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get(
    "/summary",
    response_model=SalesSummary,
    summary="Sales summary",
    description="""
    Revenue, profit, best sellers, category and daily sales for today, this
    week (starting Sunday) or this month, in the configured report timezone.
    """
)
def sales_summary(
    period: ReportPeriod = Query(ReportPeriod.TODAY, description="Report window"),
    db: Session = Depends(get_db)
):
    service = ReportService(db)
    return service.summary(period)
