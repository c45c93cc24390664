from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from pos_ledger.database import get_db
from pos_ledger.services.checkout_service import CheckoutService
from pos_ledger.services.exceptions import LedgerError
from pos_ledger.api.errors import http_error
from pos_ledger.schemas.transaction import (
    CheckoutRequest,
    QuoteResponse,
    TransactionResponse,
    TransactionListResponse
)
from pos_ledger.tasks.stock_tasks import dispatch_low_stock_check

router = APIRouter(prefix="/transactions", tags=["Transactions"])


@router.post(
    "/quote",
    response_model=QuoteResponse,
    summary="Price a cart",
    description="Compute subtotal, discount and total for a cart without recording a sale."
)
def quote_cart(
    checkout: CheckoutRequest,
    db: Session = Depends(get_db)
):
    service = CheckoutService(db)
    try:
        session = service.build_session(checkout)
        return service.quote(session)
    except LedgerError as e:
        raise http_error(e)


@router.post(
    "/",
    response_model=TransactionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Check out a cart",
    description="""
    Record a sale: the transaction, its items and the stock debit for every
    item are committed together.

    **Stock handling:**
    - A line asking for more than the product's current stock gives 400
    - If stock runs out between pricing and the debit (another cashier sold
      the units first) the whole sale is rolled back and 409 is returned

    After a successful sale a background Celery task checks the sold
    products against their low-stock thresholds.
    """
)
def submit_checkout(
    checkout: CheckoutRequest,
    db: Session = Depends(get_db)
):
    """
    Submit a cart.

    - **items**: product_id and quantity per line (required, non-empty)
    - **payment_method**: cash or non-cash
    - **discount_percent**: 0-100, folded into the total and noted
    - **cashier**: id, name and role of the acting cashier
    """
    service = CheckoutService(db)
    try:
        session = service.build_session(checkout)
        transaction = service.submit(session)
    except LedgerError as e:
        raise http_error(e)

    dispatch_low_stock_check([item.product_id for item in transaction.items])

    return transaction


@router.get(
    "/",
    response_model=TransactionListResponse,
    summary="List transactions",
    description="Get a paginated list of sales, newest first."
)
def list_transactions(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(10, ge=1, le=100, description="Items per page"),
    cashier_id: Optional[str] = Query(None, description="Filter by cashier"),
    db: Session = Depends(get_db)
):
    """Get paginated list of transactions."""
    service = CheckoutService(db)
    transactions, total, total_pages = service.get_all(page, page_size, cashier_id)

    return TransactionListResponse(
        items=[TransactionResponse.model_validate(t) for t in transactions],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages
    )


@router.get(
    "/{transaction_id}",
    response_model=TransactionResponse,
    summary="Get transaction by ID",
    description="Get a recorded sale with its items."
)
def get_transaction(
    transaction_id: int,
    db: Session = Depends(get_db)
):
    """Get a transaction by ID."""
    service = CheckoutService(db)
    try:
        return service.get(transaction_id)
    except LedgerError as e:
        raise http_error(e)
