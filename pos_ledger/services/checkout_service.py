from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import Optional, List, Tuple
import math
import logging

from pos_ledger.config import get_settings
from pos_ledger.models.product import Product
from pos_ledger.models.stock_log import StockDirection
from pos_ledger.models.transaction import Transaction, TransactionItem
from pos_ledger.schemas.product import MAX_BIGINT
from pos_ledger.schemas.transaction import (
    CheckoutRequest,
    CheckoutSession,
    QuoteLineResponse,
    QuoteResponse,
    discount_for,
    discount_note,
)
from pos_ledger.services.exceptions import (
    LedgerError,
    ValidationError,
    NotFoundError,
    StorageError,
)
from pos_ledger.services.product_service import ProductService
from pos_ledger.services.stock_service import StockLedgerService
from pos_ledger.utils.cache import cache_service

logger = logging.getLogger(__name__)
settings = get_settings()


class CheckoutService:
    """
    Service class for the checkout workflow and the transaction log.

    A submitted cart becomes one unit of work: the transaction header, its
    items and one guarded stock debit per item are flushed into the same
    database transaction and committed once. If any product is missing or
    any debit fails its stock guard, everything is rolled back and nothing
    from the sale is visible.
    """

    def __init__(self, db: Session):
        self.db = db
        self.products = ProductService(db)
        self.ledger = StockLedgerService(db)

    def build_session(self, request: CheckoutRequest) -> CheckoutSession:
        """
        Accumulate a cart from a checkout request.

        Each line is checked against the product's current stock, the same
        check the cashier gets when adding items to the cart.
        """
        session = CheckoutSession(
            cashier=request.cashier,
            payment_method=request.payment_method,
            discount_percent=request.discount_percent,
            note=request.note,
        )
        for line in request.items:
            product = self.products.get(line.product_id)
            session = session.add_item(product, line.quantity)
        return session

    def quote(self, session: CheckoutSession) -> QuoteResponse:
        """Compute cart totals without writing anything."""
        return QuoteResponse(
            items=[
                QuoteLineResponse(
                    product_id=line.product_id,
                    product_name=line.product_name,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    total=line.total,
                )
                for line in session.items
            ],
            subtotal=session.subtotal,
            discount_percent=session.discount_percent,
            discount_amount=session.discount_amount,
            total=session.total,
        )

    def submit(self, session: CheckoutSession) -> Transaction:
        """
        Record a sale atomically.

        Algorithm:
        1. Load every product in the cart (current name and sell price)
        2. Compute subtotal, discount and total
        3. Add the transaction header and one item per line
        4. Debit stock for every line through the stock ledger
        5. Commit once

        Args:
            session: Cart to submit

        Returns:
            The committed transaction with its items

        Raises:
            ValidationError: If the cart is empty
            NotFoundError: If a product no longer exists
            ConcurrencyConflict: If stock ran out since the cart was built
            StorageError: If the database write fails
        """
        if session.is_empty:
            raise ValidationError("Cart is empty")

        try:
            lines = []
            for line in session.items:
                product = self.db.query(Product).filter(Product.id == line.product_id).first()
                if not product:
                    raise NotFoundError("Product", line.product_id)
                lines.append((product, line.quantity))

            subtotal = sum(product.sell_price * quantity for product, quantity in lines)
            if subtotal > MAX_BIGINT:
                raise ValidationError("Transaction total is too large")
            discount_amount = discount_for(subtotal, session.discount_percent)

            transaction = Transaction(
                total=subtotal - discount_amount,
                payment_method=session.payment_method,
                cashier_id=session.cashier.id,
                cashier_name=session.cashier.name,
                note=discount_note(session.discount_percent, session.note),
            )
            for product, quantity in lines:
                transaction.items.append(
                    TransactionItem(
                        product_id=product.id,
                        product_name=product.name,
                        quantity=quantity,
                        unit_price=product.sell_price,
                        total_price=product.sell_price * quantity,
                    )
                )

            self.db.add(transaction)
            self.db.flush()

            for product, quantity in lines:
                self.ledger.apply_movement(
                    product.id, quantity, StockDirection.OUT, settings.SALE_SOURCE
                )

            self.db.commit()

        except LedgerError as e:
            self.db.rollback()
            logger.warning(f"Checkout by cashier {session.cashier.id} rejected: {e}")
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error during checkout: {e}")
            raise StorageError("Could not record transaction") from e

        self.db.refresh(transaction)

        for product_id in {line.product_id for line in session.items}:
            cache_service.delete("product", str(product_id))

        logger.info(
            f"Transaction #{transaction.id} recorded: {len(transaction.items)} items, "
            f"total {transaction.total}"
        )
        return transaction

    def get(self, transaction_id: int) -> Transaction:
        """Get a transaction by ID or raise NotFoundError."""
        transaction = (
            self.db.query(Transaction).filter(Transaction.id == transaction_id).first()
        )
        if not transaction:
            raise NotFoundError("Transaction", transaction_id)
        return transaction

    def get_all(
        self,
        page: int = 1,
        page_size: int = 10,
        cashier_id: Optional[str] = None
    ) -> Tuple[List[Transaction], int, int]:
        """
        Get paginated list of transactions, newest first.

        Returns:
            Tuple of (transactions list, total count, total pages)
        """
        query = self.db.query(Transaction)

        if cashier_id:
            query = query.filter(Transaction.cashier_id == cashier_id)

        total = query.count()
        total_pages = math.ceil(total / page_size) if total > 0 else 1

        offset = (page - 1) * page_size
        transactions = (
            query.order_by(Transaction.id.desc()).offset(offset).limit(page_size).all()
        )

        return transactions, total, total_pages
