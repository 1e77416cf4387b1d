import logging

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from storeadmin.config import get_settings
from storeadmin.core.errors import NotFoundError, ValidationError
from storeadmin.core.stock_ledger import new_ledger
from storeadmin.models.inventory import Inventory
from storeadmin.models.product import Product
from storeadmin.services.inventory_service import write_ledger

logger = logging.getLogger(__name__)


def _clean_labels(values) -> list[str]:
    labels = dict.fromkeys(str(value).strip() for value in values or [])
    labels.pop("", None)
    return list(labels)


def create_product(db: Session, payload) -> Product:
    name = (payload.name or "").strip()
    if not name:
        raise ValidationError("name is required.", details={"field": "name"})

    sizes = _clean_labels(payload.sizes)
    colors = _clean_labels(payload.colors)
    product = Product(
        name=name,
        category=payload.category or "",
        sub_category=payload.sub_category or "",
        price=float(payload.price or 0),
        sizes=sizes,
        colors=colors,
    )
    db.add(product)
    db.flush()

    inventory = Inventory(product_id=product.id, product_name=product.name)
    write_ledger(
        inventory,
        new_ledger(sizes, colors, default_size=get_settings().DEFAULT_SIZE_LABEL),
    )
    db.add(inventory)
    db.commit()
    db.refresh(product)

    logger.info("Created product %s (%s) with inventory %s", product.id, product.name, inventory.id)
    return product


def list_products(db: Session) -> list[Product]:
    return list(db.execute(select(Product).order_by(Product.id)).scalars().all())


def get_product(db: Session, product_id: int) -> Product:
    product = db.get(Product, product_id)
    if product is None:
        raise NotFoundError("Product not found.", details={"product_id": product_id})
    return product


def delete_product(db: Session, product_id: int) -> None:
    product = get_product(db, product_id)
    db.execute(delete(Inventory).where(Inventory.product_id == product.id))
    db.delete(product)
    db.commit()
    logger.info("Deleted product %s and its inventory", product_id)


__all__ = ["create_product", "delete_product", "get_product", "list_products"]
