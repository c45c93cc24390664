from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from pos_ledger.database import get_db
from pos_ledger.models.stock_log import StockDirection
from pos_ledger.services.stock_service import StockLedgerService
from pos_ledger.services.exceptions import LedgerError
from pos_ledger.api.errors import http_error
from pos_ledger.schemas.stock import (
    StockMovementCreate,
    StockLogResponse,
    StockLogListResponse
)
from pos_ledger.tasks.stock_tasks import dispatch_low_stock_check

router = APIRouter(prefix="/stock", tags=["Stock"])


@router.post(
    "/movements",
    response_model=StockLogResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record a stock movement",
    description="""
    Add (IN) or remove (OUT) stock for a product and append it to the ledger.

    OUT movements use a guarded decrement: if the product has fewer units
    than requested the movement is rejected with 409 and stock is unchanged.
    """
)
def record_movement(
    movement: StockMovementCreate,
    db: Session = Depends(get_db)
):
    """
    Record a manual stock adjustment.

    - **product_id**: product to adjust
    - **quantity**: positive number of units
    - **type**: IN or OUT
    - **source**: reason, e.g. supplier delivery or damaged goods
    """
    service = StockLedgerService(db)
    try:
        entry = service.record_movement(
            movement.product_id,
            movement.quantity,
            movement.type,
            movement.source
        )
    except LedgerError as e:
        raise http_error(e)

    if entry.type == StockDirection.OUT:
        dispatch_low_stock_check([entry.product_id])

    return entry


@router.get(
    "/movements",
    response_model=StockLogListResponse,
    summary="List stock movements",
    description="Get the stock ledger, newest first, optionally per product or direction."
)
def list_movements(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(10, ge=1, le=100, description="Items per page"),
    product_id: Optional[int] = Query(None, description="Filter by product"),
    type: Optional[StockDirection] = Query(None, description="Filter by direction"),
    db: Session = Depends(get_db)
):
    """Get paginated stock history."""
    service = StockLedgerService(db)
    entries, total, total_pages = service.get_movements(page, page_size, product_id, type)

    return StockLogListResponse(
        items=[StockLogResponse.model_validate(e) for e in entries],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages
    )
