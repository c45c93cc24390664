from sqlalchemy import Column, Integer, String, DateTime, Enum, Index, CheckConstraint
from sqlalchemy.sql import func
import enum

from pos_ledger.database import Base


class StockDirection(str, enum.Enum):
    """Direction of a stock movement."""
    IN = "IN"
    OUT = "OUT"


class StockLog(Base):
    """
    Append-only record of a single stock movement.

    product_id is a plain reference: deleting a product leaves its history
    in place. product_name is the name at the time of the movement.
    """
    __tablename__ = "stock_logs"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, nullable=False, index=True)
    product_name = Column(String(255), nullable=True)
    type = Column(Enum(StockDirection, name="stock_direction"), nullable=False)
    quantity = Column(Integer, nullable=False)
    source = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        CheckConstraint('quantity > 0', name='check_stock_log_quantity_positive'),
        Index('ix_stock_logs_product_created', 'product_id', 'created_at'),
    )

    def __repr__(self):
        return f"<StockLog(id={self.id}, product_id={self.product_id}, {self.type.value} {self.quantity})>"
