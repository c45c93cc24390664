from pydantic import BaseModel
from datetime import date, datetime
from enum import Enum


class ReportPeriod(str, Enum):
    """Calendar window a report covers."""
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"


class ProductSales(BaseModel):
    product_id: int
    product_name: str
    quantity: int
    revenue: int


class CategorySales(BaseModel):
    category: str
    revenue: int


class DailySales(BaseModel):
    date: date
    total: int


class RecentTransaction(BaseModel):
    id: int
    total: int
    created_at: datetime


class SalesSummary(BaseModel):
    """Aggregates over the transactions in one report window."""
    period: ReportPeriod
    start: datetime
    end: datetime
    total_revenue: int
    total_profit: int
    total_transactions: int
    average_transaction: int
    best_sellers: list[ProductSales]
    category_sales: list[CategorySales]
    daily_sales: list[DailySales]
    recent_transactions: list[RecentTransaction]
