"""
Sales reporting over already-loaded transactions and products.

The aggregation functions are pure: they take objects exposing the
transaction, item and product attributes and never touch the database.
ReportService only loads the rows and hands them over.
"""
from datetime import datetime, timedelta, timezone, tzinfo
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session, selectinload

from pos_ledger.config import get_settings
from pos_ledger.models.product import Product
from pos_ledger.models.transaction import Transaction
from pos_ledger.schemas.report import (
    CategorySales,
    DailySales,
    ProductSales,
    RecentTransaction,
    ReportPeriod,
    SalesSummary,
)

settings = get_settings()

BEST_SELLER_LIMIT = 5
RECENT_LIMIT = 10


def _as_aware(value: datetime) -> datetime:
    # Naive timestamps come back from SQLite and are UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def resolve_window(period: ReportPeriod, now: datetime, tz: tzinfo) -> tuple[datetime, datetime]:
    """
    Local calendar bounds of the day, week or month containing `now`.

    Weeks start on Sunday. Both bounds are inclusive.
    """
    local_now = _as_aware(now).astimezone(tz)
    day_start = local_now.replace(hour=0, minute=0, second=0, microsecond=0)
    period = ReportPeriod(period)

    if period == ReportPeriod.TODAY:
        start = day_start
        next_start = start + timedelta(days=1)
    elif period == ReportPeriod.WEEK:
        start = day_start - timedelta(days=(day_start.weekday() + 1) % 7)
        next_start = start + timedelta(days=7)
    else:
        start = day_start.replace(day=1)
        if start.month == 12:
            next_start = start.replace(year=start.year + 1, month=1)
        else:
            next_start = start.replace(month=start.month + 1)

    return start, next_start - timedelta(microseconds=1)


def filter_transactions(transactions: Iterable, start: datetime, end: datetime) -> list:
    return [t for t in transactions if start <= _as_aware(t.created_at) <= end]


def total_profit(transactions: Iterable, products_by_id: dict) -> int:
    """Margin against each product's current cost; deleted products are skipped."""
    profit = 0
    for transaction in transactions:
        for item in transaction.items:
            product = products_by_id.get(item.product_id)
            if product is not None:
                profit += (item.unit_price - product.cost_price) * item.quantity
    return profit


def best_sellers(transactions: Iterable, limit: int = BEST_SELLER_LIMIT) -> list[ProductSales]:
    sales: dict[int, ProductSales] = {}
    for transaction in transactions:
        for item in transaction.items:
            entry = sales.get(item.product_id)
            if entry is None:
                sales[item.product_id] = ProductSales(
                    product_id=item.product_id,
                    product_name=item.product_name,
                    quantity=item.quantity,
                    revenue=item.total_price,
                )
            else:
                entry.quantity += item.quantity
                entry.revenue += item.total_price

    ranked = sorted(sales.values(), key=lambda s: s.quantity, reverse=True)
    return ranked[:limit]


def category_sales(transactions: Iterable, products_by_id: dict) -> list[CategorySales]:
    """Item revenue grouped by the product's current category."""
    totals: dict[str, int] = {}
    for transaction in transactions:
        for item in transaction.items:
            product = products_by_id.get(item.product_id)
            if product is not None:
                totals[product.category] = totals.get(product.category, 0) + item.total_price
    return [CategorySales(category=c, revenue=r) for c, r in totals.items()]


def daily_sales(transactions: Iterable, tz: tzinfo) -> list[DailySales]:
    totals = {}
    for transaction in transactions:
        day = _as_aware(transaction.created_at).astimezone(tz).date()
        totals[day] = totals.get(day, 0) + transaction.total
    return [DailySales(date=d, total=totals[d]) for d in sorted(totals)]


def build_summary(
    transactions: Iterable,
    products: Iterable,
    period: ReportPeriod = ReportPeriod.TODAY,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None
) -> SalesSummary:
    """
    Aggregate revenue, profit and rankings for one report window.

    Args:
        transactions: Transactions with their items
        products: Current products, used for cost price and category
        period: today, week or month
        now: Reference time, defaults to the current time
        tz: Timezone for calendar boundaries, defaults to REPORT_TIMEZONE

    Returns:
        SalesSummary for the window
    """
    tz = tz or ZoneInfo(settings.REPORT_TIMEZONE)
    now = now or datetime.now(timezone.utc)
    period = ReportPeriod(period)

    start, end = resolve_window(period, now, tz)
    selected = filter_transactions(transactions, start, end)
    products_by_id = {p.id: p for p in products}

    revenue = sum(t.total for t in selected)
    count = len(selected)
    average = 0
    if count:
        average = int((Decimal(revenue) / count).quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    recent = sorted(
        selected, key=lambda t: (_as_aware(t.created_at), t.id), reverse=True
    )[:RECENT_LIMIT]

    return SalesSummary(
        period=period,
        start=start,
        end=end,
        total_revenue=revenue,
        total_profit=total_profit(selected, products_by_id),
        total_transactions=count,
        average_transaction=average,
        best_sellers=best_sellers(selected),
        category_sales=category_sales(selected, products_by_id),
        daily_sales=daily_sales(selected, tz),
        recent_transactions=[
            RecentTransaction(id=t.id, total=t.total, created_at=_as_aware(t.created_at))
            for t in recent
        ],
    )


class ReportService:
    """Loads transactions and products and summarises them."""

    def __init__(self, db: Session):
        self.db = db

    def summary(self, period: ReportPeriod, now: Optional[datetime] = None) -> SalesSummary:
        tz = ZoneInfo(settings.REPORT_TIMEZONE)
        now = now or datetime.now(timezone.utc)
        start, end = resolve_window(period, now, tz)

        # Bounds go to the database in UTC, the zone timestamps are stored in
        transactions = (
            self.db.query(Transaction)
            .options(selectinload(Transaction.items))
            .filter(
                Transaction.created_at.between(
                    start.astimezone(timezone.utc), end.astimezone(timezone.utc)
                )
            )
            .order_by(Transaction.id.desc())
            .all()
        )
        products = self.db.query(Product).all()
        return build_summary(transactions, products, period, now=now, tz=tz)
