from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from pos_ledger.database import get_db
from pos_ledger.services.product_service import ProductService
from pos_ledger.services.exceptions import LedgerError
from pos_ledger.api.errors import http_error
from pos_ledger.schemas.product import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    ProductListResponse
)

router = APIRouter(prefix="/products", tags=["Products"])


@router.post(
    "/",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new product",
    description="Create a catalog product with prices, initial stock and a low-stock threshold."
)
def create_product(
    product_data: ProductCreate,
    db: Session = Depends(get_db)
):
    """
    Create a new product.

    - **name**, **category**, **sku**: required, non-empty
    - **cost_price**, **sell_price**: smallest currency unit, non-negative
    - **stock**, **min_stock**: non-negative
    """
    service = ProductService(db)
    try:
        return service.create(product_data)
    except LedgerError as e:
        raise http_error(e)


@router.get(
    "/",
    response_model=ProductListResponse,
    summary="List products",
    description="Get a paginated product list with search and POS filters."
)
def list_products(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(10, ge=1, le=100, description="Items per page"),
    search: Optional[str] = Query(None, description="Search by name, SKU or category"),
    category: Optional[str] = Query(None, description="Filter by category"),
    in_stock_only: bool = Query(False, description="Only products with stock left"),
    db: Session = Depends(get_db)
):
    """Get paginated list of products."""
    service = ProductService(db)
    products, total, total_pages = service.get_all(
        page, page_size, search, category, in_stock_only
    )

    return ProductListResponse(
        items=[ProductResponse.model_validate(p) for p in products],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages
    )


@router.get(
    "/low-stock",
    response_model=list[ProductResponse],
    summary="List low-stock products",
    description="Products whose stock is at or below their min_stock threshold."
)
def list_low_stock(db: Session = Depends(get_db)):
    service = ProductService(db)
    return service.get_low_stock()


@router.get(
    "/categories",
    response_model=list[str],
    summary="List categories",
    description="Distinct product categories, for the POS category filter."
)
def list_categories(db: Session = Depends(get_db)):
    service = ProductService(db)
    return service.get_categories()


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    summary="Get product by ID",
    description="Get detailed information about a specific product."
)
def get_product(
    product_id: int,
    db: Session = Depends(get_db)
):
    """Get a product by ID. The cache entry is refreshed on every read."""
    service = ProductService(db)
    try:
        return service.get(product_id)
    except LedgerError as e:
        raise http_error(e)


@router.get(
    "/{product_id}/cached",
    summary="Get product from cache",
    description="Get product details from Redis cache (or database if not cached)."
)
def get_product_cached(
    product_id: int,
    db: Session = Depends(get_db)
):
    """
    Get product from cache.

    Returns cached data if available, otherwise fetches from database
    and caches the result.
    """
    service = ProductService(db)
    product_data = service.get_by_id_cached(product_id)

    if not product_data:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Product with ID {product_id} not found"
        )

    return product_data


@router.put(
    "/{product_id}",
    response_model=ProductResponse,
    summary="Update a product",
    description="Update product details. Only provided fields will be updated."
)
def update_product(
    product_id: int,
    product_data: ProductUpdate,
    db: Session = Depends(get_db)
):
    """
    Update a product.

    Partial updates are supported - only include fields you want to change.
    Setting stock here bypasses the stock ledger; use stock movements for
    tracked adjustments.
    """
    service = ProductService(db)
    try:
        return service.update(product_id, product_data)
    except LedgerError as e:
        raise http_error(e)


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a product",
    description="Delete a product by ID. Past transactions and stock logs are kept."
)
def delete_product(
    product_id: int,
    db: Session = Depends(get_db)
):
    """Delete a product."""
    service = ProductService(db)
    try:
        service.delete(product_id)
    except LedgerError as e:
        raise http_error(e)

    return None
