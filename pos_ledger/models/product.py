from sqlalchemy import Column, Integer, String, DateTime, CheckConstraint
from sqlalchemy.sql import func

from pos_ledger.database import Base


class Product(Base):
    """
    Product model representing items in the catalog.

    Attributes:
        id: Unique identifier for the product
        name: Product name
        category: Free-text category
        sku: Stock-keeping unit code (searchable, not unique)
        cost_price: Purchase price in the smallest currency unit
        sell_price: Selling price in the smallest currency unit
        stock: Units on hand (must be non-negative)
        min_stock: Reporting threshold for low stock, not a hard floor
        created_at: Timestamp when product was created
        updated_at: Timestamp when product was last updated
    """
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    category = Column(String(255), nullable=False, index=True)
    sku = Column(String(100), nullable=False, index=True)
    cost_price = Column(Integer, nullable=False, default=0)
    sell_price = Column(Integer, nullable=False, default=0)
    stock = Column(Integer, nullable=False, default=0)
    min_stock = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Database-level constraints to ensure data integrity
    __table_args__ = (
        CheckConstraint('cost_price >= 0', name='check_cost_price_non_negative'),
        CheckConstraint('sell_price >= 0', name='check_sell_price_non_negative'),
        CheckConstraint('stock >= 0', name='check_stock_non_negative'),
        CheckConstraint('min_stock >= 0', name='check_min_stock_non_negative'),
    )

    @property
    def is_low_stock(self) -> bool:
        """Check if stock is at or below the min_stock threshold."""
        return self.stock <= self.min_stock

    @property
    def stock_status(self) -> str:
        if self.stock == 0:
            return "out_of_stock"
        if self.is_low_stock:
            return "low_stock"
        return "in_stock"

    def __repr__(self):
        return f"<Product(id={self.id}, sku='{self.sku}', stock={self.stock})>"
