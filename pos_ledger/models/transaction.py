from sqlalchemy import Column, Integer, BigInteger, String, Text, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum

from pos_ledger.database import Base


class PaymentMethod(str, enum.Enum):
    """Enum for payment method."""
    CASH = "cash"
    NON_CASH = "non-cash"


class Transaction(Base):
    """
    Transaction model representing a completed sale.

    Attributes:
        id: Unique identifier for the transaction
        total: Sum of item totals minus the discount, smallest currency unit
        payment_method: Cash or non-cash
        cashier_id: Identity of the acting cashier
        cashier_name: Cashier name at the time of sale
        note: Optional free text, carries the discount summary
        created_at: Timestamp when the sale was recorded
    """
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    total = Column(BigInteger, nullable=False)
    payment_method = Column(
        Enum(PaymentMethod, name="payment_method", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=PaymentMethod.CASH,
    )
    cashier_id = Column(String(64), nullable=False, index=True)
    cashier_name = Column(String(255), nullable=True)
    note = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    items = relationship(
        "TransactionItem",
        back_populates="transaction",
        cascade="all, delete-orphan",
        order_by="TransactionItem.id",
    )

    def __repr__(self):
        return f"<Transaction(id={self.id}, total={self.total}, items={len(self.items)})>"


class TransactionItem(Base):
    """A sold line. product_name and unit_price are snapshots taken at sale time."""
    __tablename__ = "transaction_items"

    id = Column(Integer, primary_key=True, index=True)
    transaction_id = Column(
        Integer,
        ForeignKey("transactions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    product_id = Column(Integer, nullable=False, index=True)
    product_name = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Integer, nullable=False)
    total_price = Column(BigInteger, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    transaction = relationship("Transaction", back_populates="items")

    def __repr__(self):
        return f"<TransactionItem(id={self.id}, product_id={self.product_id}, quantity={self.quantity})>"
