from decimal import Decimal, ROUND_HALF_UP
from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import Optional

from pos_ledger.models.transaction import PaymentMethod
from pos_ledger.schemas.product import MAX_INT
from pos_ledger.services.exceptions import ValidationError


def discount_for(subtotal: int, discount_percent: Decimal) -> int:
    """Discount in the smallest currency unit, rounded half up."""
    amount = Decimal(subtotal) * Decimal(discount_percent) / Decimal(100)
    return int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def discount_note(discount_percent: Decimal, note: Optional[str] = None) -> Optional[str]:
    """Fold the discount summary into the free-text note."""
    if not discount_percent:
        return note or None
    summary = f"Diskon: {Decimal(discount_percent).normalize():f}%"
    return f"{summary} | {note}" if note else summary


class Cashier(BaseModel):
    """Acting cashier as supplied by the identity provider."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Cashier identity")
    name: str = Field(..., min_length=1, description="Cashier display name")
    role: str = Field(default="staff", description="Cashier role (admin or staff)")


class CartLine(BaseModel):
    """One product in the cart, priced at the time it was added."""
    model_config = ConfigDict(frozen=True)

    product_id: int
    product_name: str
    unit_price: int = Field(..., ge=0)
    quantity: int = Field(..., ge=1)

    @property
    def total(self) -> int:
        return self.unit_price * self.quantity


class CheckoutSession(BaseModel):
    """
    Immutable cart for a single checkout.

    Every mutating operation returns a new session. Quantities are checked
    against the stock of the product passed in, i.e. the stock the cashier
    saw when adding it; submission re-checks against the database.
    """
    model_config = ConfigDict(frozen=True)

    cashier: Cashier
    items: tuple[CartLine, ...] = ()
    payment_method: PaymentMethod = PaymentMethod.CASH
    discount_percent: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    note: Optional[str] = None

    def line_for(self, product_id: int) -> Optional[CartLine]:
        for line in self.items:
            if line.product_id == product_id:
                return line
        return None

    def add_item(self, product, quantity: int = 1) -> "CheckoutSession":
        """Add units of a product, merging with an existing line."""
        if quantity < 1:
            raise ValidationError("Quantity must be at least 1")

        existing = self.line_for(product.id)
        current = existing.quantity if existing else 0
        return self.update_quantity(product, current + quantity)

    def update_quantity(self, product, quantity: int) -> "CheckoutSession":
        """Set a line's quantity; zero or less removes the line."""
        if quantity <= 0:
            return self.remove_item(product.id)

        if quantity > product.stock:
            raise ValidationError(
                f"Insufficient stock for '{product.name}'. "
                f"Available: {product.stock}, Requested: {quantity}"
            )

        line = CartLine(
            product_id=product.id,
            product_name=product.name,
            unit_price=product.sell_price,
            quantity=quantity,
        )
        if self.line_for(product.id) is None:
            items = self.items + (line,)
        else:
            items = tuple(line if item.product_id == product.id else item for item in self.items)
        return self.model_copy(update={"items": items})

    def remove_item(self, product_id: int) -> "CheckoutSession":
        items = tuple(item for item in self.items if item.product_id != product_id)
        return self.model_copy(update={"items": items})

    def with_discount(self, discount_percent) -> "CheckoutSession":
        discount_percent = Decimal(str(discount_percent))
        if not Decimal(0) <= discount_percent <= Decimal(100):
            raise ValidationError("Discount must be between 0 and 100 percent")
        return self.model_copy(update={"discount_percent": discount_percent})

    def cleared(self) -> "CheckoutSession":
        """Empty cart for the same cashier, as after a completed sale."""
        return self.model_copy(update={"items": (), "discount_percent": Decimal("0"), "note": None})

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def subtotal(self) -> int:
        return sum(line.total for line in self.items)

    @property
    def discount_amount(self) -> int:
        return discount_for(self.subtotal, self.discount_percent)

    @property
    def total(self) -> int:
        return self.subtotal - self.discount_amount


class CheckoutLineRequest(BaseModel):
    product_id: int = Field(..., description="ID of the product to sell")
    quantity: int = Field(default=1, ge=1, le=MAX_INT, description="Units to sell")


class CheckoutRequest(BaseModel):
    """Schema for submitting (or quoting) a cart."""
    items: list[CheckoutLineRequest] = Field(default_factory=list)
    payment_method: PaymentMethod = Field(default=PaymentMethod.CASH)
    discount_percent: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    note: Optional[str] = Field(None, max_length=1000)
    cashier: Cashier


class QuoteLineResponse(BaseModel):
    product_id: int
    product_name: str
    quantity: int
    unit_price: int
    total: int


class QuoteResponse(BaseModel):
    """Totals of a cart without recording a sale."""
    items: list[QuoteLineResponse]
    subtotal: int
    discount_percent: Decimal
    discount_amount: int
    total: int


class TransactionItemResponse(BaseModel):
    id: int
    product_id: int
    product_name: str
    quantity: int
    unit_price: int
    total_price: int

    model_config = ConfigDict(from_attributes=True)


class TransactionResponse(BaseModel):
    """Schema for a recorded sale including its items."""
    id: int
    total: int
    payment_method: PaymentMethod
    cashier_id: str
    cashier_name: Optional[str] = None
    note: Optional[str] = None
    created_at: datetime
    items: list[TransactionItemResponse]

    model_config = ConfigDict(from_attributes=True)


class TransactionListResponse(BaseModel):
    """Schema for paginated transaction list response."""
    items: list[TransactionResponse]
    total: int
    page: int
    page_size: int
    total_pages: int
