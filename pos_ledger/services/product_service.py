from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import or_
from typing import Optional, List
import math
import logging

from pos_ledger.models.product import Product
from pos_ledger.schemas.product import ProductCreate, ProductUpdate
from pos_ledger.services.exceptions import NotFoundError, StorageError
from pos_ledger.utils.cache import cache_service

logger = logging.getLogger(__name__)


class ProductService:
    """
    Service class for the product catalog.

    This service handles:
    - Creating, reading, updating and deleting products
    - Catalog search and POS filters
    - Low-stock listing
    - Cache invalidation

    Deleting a product does not check for transactions or stock logs that
    reference it; those keep their name snapshots.
    """

    CACHE_PREFIX = "product"

    def __init__(self, db: Session):
        self.db = db

    def create(self, product_data: ProductCreate) -> Product:
        """
        Create a new product.

        Args:
            product_data: Validated product creation data

        Returns:
            Created product instance
        """
        product = Product(**product_data.model_dump())
        self.db.add(product)
        self._commit("create product")
        self.db.refresh(product)

        logger.info(f"Product #{product.id} ({product.sku}) created")
        return product

    def get(self, product_id: int) -> Product:
        """Get a product by ID or raise NotFoundError."""
        product = self.get_by_id(product_id)
        if not product:
            raise NotFoundError("Product", product_id)
        return product

    def get_by_id(self, product_id: int) -> Optional[Product]:
        """
        Get a product by ID and refresh its cache entry.

        Args:
            product_id: Product ID to look up

        Returns:
            Product instance or None if not found
        """
        product = self.db.query(Product).filter(Product.id == product_id).first()

        if product:
            self._cache_product(product)

        return product

    def get_by_id_cached(self, product_id: int) -> Optional[dict]:
        """
        Get product details from cache or database.
        Returns a dictionary (suitable for API response).

        Cached stock may lag behind the database until the entry is
        invalidated by the next write.
        """
        cached = cache_service.get(self.CACHE_PREFIX, str(product_id))
        if cached:
            return cached

        product = self.db.query(Product).filter(Product.id == product_id).first()

        if product:
            return self._cache_product(product)

        return None

    def get_all(
        self,
        page: int = 1,
        page_size: int = 10,
        search: str = None,
        category: str = None,
        in_stock_only: bool = False
    ) -> tuple[List[Product], int, int]:
        """
        Get paginated list of products.

        Args:
            page: Page number (1-indexed)
            page_size: Number of items per page
            search: Case-insensitive match on name, SKU or category
            category: Exact category filter
            in_stock_only: Only products with stock left, as on the POS grid

        Returns:
            Tuple of (products list, total count, total pages)
        """
        query = self.db.query(Product)

        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(
                    Product.name.ilike(pattern),
                    Product.sku.ilike(pattern),
                    Product.category.ilike(pattern),
                )
            )
        if category:
            query = query.filter(Product.category == category)
        if in_stock_only:
            query = query.filter(Product.stock > 0)

        total = query.count()
        total_pages = math.ceil(total / page_size) if total > 0 else 1

        offset = (page - 1) * page_size
        products = query.order_by(Product.id.desc()).offset(offset).limit(page_size).all()

        return products, total, total_pages

    def get_low_stock(self) -> List[Product]:
        """Products at or below their min_stock threshold, lowest stock first."""
        return (
            self.db.query(Product)
            .filter(Product.stock <= Product.min_stock)
            .order_by(Product.stock.asc(), Product.id.asc())
            .all()
        )

    def get_categories(self) -> List[str]:
        """Distinct category names, sorted."""
        rows = self.db.query(Product.category).distinct().order_by(Product.category).all()
        return [row[0] for row in rows]

    def update(self, product_id: int, product_data: ProductUpdate) -> Product:
        """
        Update an existing product.

        Args:
            product_id: ID of product to update
            product_data: Update data (only non-None fields are updated)

        Returns:
            Updated product

        Raises:
            NotFoundError: If product doesn't exist
        """
        product = self.db.query(Product).filter(Product.id == product_id).first()

        if not product:
            raise NotFoundError("Product", product_id)

        update_data = product_data.model_dump(exclude_unset=True)
        for field, value in update_data.items():
            if value is not None:
                setattr(product, field, value)

        self._commit("update product")
        self.db.refresh(product)

        self._invalidate_cache(product_id)
        logger.info(f"Product #{product_id} updated: {sorted(update_data)}")

        return product

    def delete(self, product_id: int) -> None:
        """
        Delete a product.

        Raises:
            NotFoundError: If product doesn't exist
        """
        product = self.db.query(Product).filter(Product.id == product_id).first()

        if not product:
            raise NotFoundError("Product", product_id)

        self.db.delete(product)
        self._commit("delete product")

        self._invalidate_cache(product_id)
        logger.info(f"Product #{product_id} deleted")

    def _commit(self, action: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error during {action}: {e}")
            raise StorageError(f"Could not {action}") from e

    def _cache_product(self, product: Product) -> dict:
        """Cache a product instance."""
        product_dict = {
            "id": product.id,
            "name": product.name,
            "category": product.category,
            "sku": product.sku,
            "cost_price": product.cost_price,
            "sell_price": product.sell_price,
            "stock": product.stock,
            "min_stock": product.min_stock,
            "is_low_stock": product.is_low_stock,
            "stock_status": product.stock_status,
            "created_at": str(product.created_at),
            "updated_at": str(product.updated_at),
        }
        cache_service.set(self.CACHE_PREFIX, str(product.id), product_dict)
        return product_dict

    def _invalidate_cache(self, product_id: int) -> None:
        """Invalidate cache for a product."""
        cache_service.delete(self.CACHE_PREFIX, str(product_id))
