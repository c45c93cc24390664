from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import Optional

from pos_ledger.models.stock_log import StockDirection
from pos_ledger.schemas.product import MAX_INT


class StockMovementCreate(BaseModel):
    """Schema for recording a manual stock movement."""
    model_config = ConfigDict(str_strip_whitespace=True)

    product_id: int = Field(..., description="ID of the product to adjust")
    quantity: int = Field(..., ge=1, le=MAX_INT, description="Units moved (must be positive)")
    type: StockDirection = Field(..., description="IN adds stock, OUT removes it")
    source: str = Field(..., min_length=1, max_length=255, description="Reason for the movement")


class StockLogResponse(BaseModel):
    """Schema for a stock ledger entry."""
    id: int
    product_id: int
    product_name: Optional[str] = None
    type: StockDirection
    quantity: int
    source: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class StockLogListResponse(BaseModel):
    """Schema for paginated stock ledger response."""
    items: list[StockLogResponse]
    total: int
    page: int
    page_size: int
    total_pages: int
