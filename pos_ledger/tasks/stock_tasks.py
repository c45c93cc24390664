import logging

from pos_ledger.tasks.celery_app import celery_app
from pos_ledger.database import SessionLocal
from pos_ledger.models.product import Product

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, name="check_low_stock")
def check_low_stock(self, product_ids: list[int]) -> dict:
    """
    Report products that fell to or below their min_stock threshold.

    Dispatched after a sale or an OUT movement with the IDs of the products
    it touched. min_stock is only a reporting threshold, so nothing is
    blocked here; each low product is logged at WARNING.

    Args:
        product_ids: Products touched by the stock change

    Returns:
        Dictionary with the low-stock products
    """
    db = SessionLocal()

    try:
        products = (
            db.query(Product)
            .filter(Product.id.in_(product_ids))
            .order_by(Product.id)
            .all()
        )

        low_stock = []
        for product in products:
            if product.is_low_stock:
                logger.warning(
                    f"Low stock: product #{product.id} '{product.name}' "
                    f"has {product.stock} left (min {product.min_stock})"
                )
                low_stock.append({
                    "product_id": product.id,
                    "name": product.name,
                    "stock": product.stock,
                    "min_stock": product.min_stock,
                    "status": product.stock_status,
                })

        return {
            "checked": len(products),
            "low_stock": low_stock,
        }

    except Exception as e:
        logger.error(f"Error checking stock levels for {product_ids}: {e}")
        raise self.retry(exc=e, countdown=30, max_retries=3)

    finally:
        db.close()


def dispatch_low_stock_check(product_ids: list[int]) -> bool:
    """
    Queue check_low_stock for products whose stock just went down.

    Called after the sale or movement has committed, so a broker outage is
    logged and never turned into a failed response.

    Returns:
        True if the task was queued, False otherwise
    """
    try:
        check_low_stock.delay(product_ids)
        return True
    except Exception as e:
        logger.error(f"Could not queue low-stock check for {product_ids}: {e}")
        return False
