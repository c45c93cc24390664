from sqlalchemy.orm import Session
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from typing import List, Optional, Tuple
import math
import logging

from pos_ledger.models.product import Product
from pos_ledger.models.stock_log import StockLog, StockDirection
from pos_ledger.schemas.product import MAX_INT
from pos_ledger.services.exceptions import (
    LedgerError,
    ValidationError,
    NotFoundError,
    ConcurrencyConflict,
    StorageError,
)
from pos_ledger.utils.cache import cache_service

logger = logging.getLogger(__name__)


class StockLedgerService:
    """
    Service class for stock movements.

    STOCK CONSISTENCY STRATEGY:
    ===========================
    A movement touches two rows: the product's stock and a new stock_logs
    entry. Both are written in the same database transaction.

    Debits never read-then-write. The stock is changed with a single guarded
    statement:

        UPDATE products SET stock = stock - :q WHERE id = :id AND stock >= :q

    When two cashiers race for the last units, the database serialises the
    two UPDATEs on the row lock; the second one re-evaluates the WHERE clause
    against the new stock and matches no row. That case is reported as
    ConcurrencyConflict so the caller can retry with fresh stock, instead of
    clamping stock to zero.
    """

    def __init__(self, db: Session):
        self.db = db

    def record_movement(
        self,
        product_id: int,
        quantity: int,
        direction: StockDirection,
        source: str
    ) -> StockLog:
        """
        Record a stock movement and commit it.

        Args:
            product_id: Product to adjust
            quantity: Units moved, must be positive
            direction: IN or OUT
            source: Cause of the movement

        Returns:
            The persisted stock log entry

        Raises:
            ValidationError: If quantity or source is invalid
            NotFoundError: If product doesn't exist
            ConcurrencyConflict: If an OUT movement exceeds current stock
            StorageError: If the database write fails
        """
        try:
            entry = self.apply_movement(product_id, quantity, direction, source)
            self.db.commit()
        except LedgerError:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error recording movement for product #{product_id}: {e}")
            raise StorageError("Could not record stock movement") from e

        self.db.refresh(entry)
        cache_service.delete("product", str(product_id))

        logger.info(
            f"Stock {entry.type.value} {quantity} for product #{product_id} ({source})"
        )
        return entry

    def apply_movement(
        self,
        product_id: int,
        quantity: int,
        direction: StockDirection,
        source: str
    ) -> StockLog:
        """
        Apply a movement inside the caller's transaction without committing.

        Used by record_movement and by checkout, which commits the sale and
        all its debits together.
        """
        if quantity is None or quantity <= 0:
            raise ValidationError("Quantity must be a positive integer")
        if not source or not source.strip():
            raise ValidationError("Movement source is required")
        try:
            direction = StockDirection(direction)
        except ValueError:
            raise ValidationError(f"Unknown direction {direction!r}, expected IN or OUT")

        stmt = update(Product).where(Product.id == product_id)
        if direction == StockDirection.IN:
            stmt = stmt.where(Product.stock <= MAX_INT - quantity).values(stock=Product.stock + quantity)
        else:
            stmt = stmt.where(Product.stock >= quantity).values(stock=Product.stock - quantity)

        result = self.db.execute(stmt.execution_options(synchronize_session=False))

        if result.rowcount == 0:
            available = self.db.query(Product.stock).filter(Product.id == product_id).scalar()
            if available is None:
                raise NotFoundError("Product", product_id)
            if direction == StockDirection.IN:
                raise ValidationError(
                    f"Adding {quantity} units would overflow stock of product #{product_id}"
                )
            logger.warning(
                f"Stock conflict on product #{product_id}: requested {quantity}, available {available}"
            )
            raise ConcurrencyConflict(product_id, quantity, available)

        # Name snapshot comes from the row we just updated
        product = self.db.get(Product, product_id, populate_existing=True)

        entry = StockLog(
            product_id=product_id,
            product_name=product.name,
            type=direction,
            quantity=quantity,
            source=source.strip(),
        )
        self.db.add(entry)
        self.db.flush()

        return entry

    def get_movements(
        self,
        page: int = 1,
        page_size: int = 10,
        product_id: Optional[int] = None,
        direction: Optional[StockDirection] = None
    ) -> Tuple[List[StockLog], int, int]:
        """
        Get paginated stock history, newest first.

        Returns:
            Tuple of (log entries, total count, total pages)
        """
        query = self.db.query(StockLog)

        if product_id is not None:
            query = query.filter(StockLog.product_id == product_id)
        if direction:
            query = query.filter(StockLog.type == direction)

        total = query.count()
        total_pages = math.ceil(total / page_size) if total > 0 else 1

        offset = (page - 1) * page_size
        entries = query.order_by(StockLog.id.desc()).offset(offset).limit(page_size).all()

        return entries, total, total_pages
