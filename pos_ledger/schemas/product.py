from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import Optional

# Upper bound of the 32-bit INTEGER columns prices, stock and quantities live in
MAX_INT = 2_147_483_647
# Sale totals are BIGINT
MAX_BIGINT = 9_223_372_036_854_775_807


class ProductBase(BaseModel):
    """Base schema for Product with common attributes."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255, description="Product name")
    category: str = Field(..., min_length=1, max_length=255, description="Product category")
    sku: str = Field(..., min_length=1, max_length=100, description="Stock-keeping unit code")
    cost_price: int = Field(..., ge=0, le=MAX_INT, description="Cost price in the smallest currency unit")
    sell_price: int = Field(..., ge=0, le=MAX_INT, description="Sell price in the smallest currency unit")
    stock: int = Field(default=0, ge=0, le=MAX_INT, description="Units on hand (must be non-negative)")
    min_stock: int = Field(default=0, ge=0, le=MAX_INT, description="Low-stock reporting threshold")


class ProductCreate(ProductBase):
    """Schema for creating a new product."""
    pass


class ProductUpdate(BaseModel):
    """Schema for updating an existing product. All fields are optional."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(None, min_length=1, max_length=255, description="Product name")
    category: Optional[str] = Field(None, min_length=1, max_length=255, description="Product category")
    sku: Optional[str] = Field(None, min_length=1, max_length=100, description="Stock-keeping unit code")
    cost_price: Optional[int] = Field(None, ge=0, le=MAX_INT, description="Cost price")
    sell_price: Optional[int] = Field(None, ge=0, le=MAX_INT, description="Sell price")
    stock: Optional[int] = Field(None, ge=0, le=MAX_INT, description="Units on hand")
    min_stock: Optional[int] = Field(None, ge=0, le=MAX_INT, description="Low-stock reporting threshold")


class ProductResponse(ProductBase):
    """Schema for product response including all fields."""
    id: int
    is_low_stock: bool
    stock_status: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProductListResponse(BaseModel):
    """Schema for paginated product list response."""
    items: list[ProductResponse]
    total: int
    page: int
    page_size: int
    total_pages: int
