"""Persistence around the stock ledger.

Every counter change is a read-modify-write against the latest stored row:
the row is re-read, the pure ledger rules run on it, and all counters plus
the status go out in one commit guarded by the row's ``version_id``. A
concurrent writer makes the commit fail with ``StaleDataError``; the whole
cycle is then retried from a fresh read.
"""

import logging
from typing import Callable, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from storeadmin.config import get_settings
from storeadmin.core.constants import IN_STOCK, INVENTORY_STATUSES, NEWLY_ADDED, OUT_OF_STOCK
from storeadmin.core.errors import (
    AppError,
    ConcurrentUpdateError,
    ConflictError,
    InsufficientStockError,
    NotFoundError,
    ValidationError,
)
from storeadmin.core.stock_ledger import (
    StockLedger,
    apply_stock_delta,
    complete_grid,
    derive_inventory_status,
    find_discrepancies,
)
from storeadmin.core.status_rules import match_label
from storeadmin.models.inventory import Inventory
from storeadmin.models.product import Product

logger = logging.getLogger(__name__)


def ledger_from_record(inventory: Inventory) -> StockLedger:
    return StockLedger(
        stock=int(inventory.stock or 0),
        size_stock={str(k): int(v) for k, v in (inventory.size_stock or {}).items()},
        color_stock={str(k): int(v) for k, v in (inventory.color_stock or {}).items()},
        color_size_stock={
            str(color): {str(size): int(count) for size, count in (row or {}).items()}
            for color, row in (inventory.color_size_stock or {}).items()
        },
        status=inventory.status or derive_inventory_status(inventory.stock or 0, inventory.tags or []),
        tags=list(inventory.tags or []),
    )


def write_ledger(inventory: Inventory, ledger: StockLedger) -> Inventory:
    # Fresh containers so the ORM sees every JSON column as changed.
    snapshot = ledger.copy()
    inventory.stock = snapshot.stock
    inventory.size_stock = snapshot.size_stock
    inventory.color_stock = snapshot.color_stock
    inventory.color_size_stock = snapshot.color_size_stock
    inventory.status = snapshot.status
    inventory.tags = snapshot.tags
    return inventory


def get_inventory(db: Session, inventory_id: int) -> Inventory:
    inventory = db.get(Inventory, inventory_id)
    if inventory is None:
        raise NotFoundError("Inventory not found.", details={"inventory_id": inventory_id})
    return inventory


def get_inventory_for_product(db: Session, product_id: int) -> Optional[Inventory]:
    return (
        db.execute(select(Inventory).where(Inventory.product_id == product_id))
        .scalars()
        .first()
    )


def inventory_discrepancies(inventory: Inventory) -> list[str]:
    return find_discrepancies(ledger_from_record(inventory))


def list_inventory(db: Session, status: Optional[str] = None, search: Optional[str] = None):
    """Return the filtered items and the per-status counts of the whole table."""
    rows = db.execute(select(Inventory).order_by(Inventory.id)).scalars().all()
    counts = {
        "total": len(rows),
        "in_stock": sum(1 for row in rows if row.status == IN_STOCK),
        "out_of_stock": sum(1 for row in rows if row.status == OUT_OF_STOCK),
        "newly_added": sum(1 for row in rows if row.status == NEWLY_ADDED),
    }

    items = rows
    if status:
        wanted = match_label(status, INVENTORY_STATUSES)
        items = [row for row in items if row.status == wanted]
    if search:
        needle = search.strip().lower()
        items = [row for row in items if needle in (row.product_name or "").lower()]
    return items, counts


def _load_for_update(db: Session, inventory_id: int) -> Inventory:
    inventory = (
        db.execute(
            select(Inventory)
            .where(Inventory.id == inventory_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        .scalars()
        .first()
    )
    if inventory is None:
        raise NotFoundError("Inventory not found.", details={"inventory_id": inventory_id})
    return inventory


def run_ledger_update(
    db: Session,
    inventory_id: int,
    mutate: Callable[[StockLedger], StockLedger],
) -> Inventory:
    retries = max(1, get_settings().INVENTORY_UPDATE_RETRIES)
    for attempt in range(1, retries + 1):
        try:
            inventory = _load_for_update(db, inventory_id)
            write_ledger(inventory, mutate(ledger_from_record(inventory)))
            db.commit()
            return inventory
        except StaleDataError:
            db.rollback()
            logger.warning(
                "Inventory %s changed during update (attempt %s/%s)",
                inventory_id,
                attempt,
                retries,
            )
        except AppError:
            db.rollback()
            raise

    raise ConcurrentUpdateError(
        "Inventory was modified concurrently; please retry.",
        details={"inventory_id": inventory_id, "attempts": retries},
    )


def adjust_stock(
    db: Session,
    inventory_id: int,
    delta: int,
    *,
    size: Optional[str] = None,
    color: Optional[str] = None,
) -> Inventory:
    size = size.strip() if size else None
    color = color.strip() if color else None
    try:
        inventory = run_ledger_update(
            db,
            inventory_id,
            lambda ledger: apply_stock_delta(ledger, delta, size=size, color=color),
        )
    except InsufficientStockError as exc:
        logger.warning(
            "Rejected stock update on inventory %s: %s",
            inventory_id,
            exc.message,
            extra={"dimension": exc.dimension, "delta": delta},
        )
        raise

    logger.info(
        "Inventory %s adjusted by %s (size=%s color=%s) -> stock %s",
        inventory_id,
        delta,
        size,
        color,
        inventory.stock,
    )
    return inventory


def register_colors(db: Session, inventory_id: int, colors) -> Inventory:
    cleaned = list(dict.fromkeys(str(color).strip() for color in colors or []))
    cleaned = [color for color in cleaned if color]
    if not cleaned:
        raise ValidationError("At least one color is required.", details={"field": "colors"})

    inventory = run_ledger_update(
        db,
        inventory_id,
        lambda ledger: complete_grid(ledger, colors=cleaned),
    )
    logger.info("Registered colors %s on inventory %s", cleaned, inventory_id)
    return inventory


def query_inventory(db: Session, color: Optional[str] = None, size: Optional[str] = None) -> dict:
    color = color.strip() if color else None
    size = size.strip() if size else None
    if not color and not size:
        raise ValidationError("Provide at least a color or a size to query.")

    items = []
    for inventory in db.execute(select(Inventory).order_by(Inventory.id)).scalars():
        if color and size:
            quantity = (inventory.color_size_stock or {}).get(color, {}).get(size, 0)
        elif color:
            quantity = (inventory.color_stock or {}).get(color, 0)
        else:
            quantity = (inventory.size_stock or {}).get(size, 0)
        if quantity > 0:
            items.append(
                {
                    "inventory_id": inventory.id,
                    "product_id": inventory.product_id,
                    "product_name": inventory.product_name,
                    "quantity": int(quantity),
                }
            )

    return {
        "total_quantity": sum(item["quantity"] for item in items),
        "count": len(items),
        "items": items,
    }


def color_size_report(db: Session) -> list[dict]:
    totals: dict[tuple[str, str], dict] = {}
    for inventory in db.execute(select(Inventory)).scalars():
        for color, row in (inventory.color_size_stock or {}).items():
            for size, quantity in (row or {}).items():
                entry = totals.setdefault(
                    (color, size),
                    {"color": color, "size": size, "total_quantity": 0, "product_count": 0},
                )
                entry["total_quantity"] += int(quantity)
                if quantity > 0:
                    entry["product_count"] += 1
    return [totals[key] for key in sorted(totals)]


def reduce_for_order(db: Session, line_items) -> list[dict]:
    """Apply one ledger transaction per order line; failures do not stop the rest."""
    results = []
    for line in line_items:
        result = {"product_id": line.product_id, "ok": False}
        inventory = get_inventory_for_product(db, line.product_id)
        if inventory is None:
            result["error"] = "No inventory found for product {}.".format(line.product_id)
            results.append(result)
            continue

        result["inventory_id"] = inventory.id
        try:
            updated = adjust_stock(
                db,
                inventory.id,
                -line.quantity,
                size=line.size,
                color=line.color,
            )
        except AppError as exc:
            result["error"] = exc.message
            result["dimension"] = getattr(exc, "dimension", None)
        else:
            result["ok"] = True
            result["stock"] = updated.stock
        results.append(result)

    failed = sum(1 for result in results if not result["ok"])
    if failed:
        logger.warning("Order reduction finished with %s failed line(s) of %s", failed, len(results))
    return results


def delete_inventory(db: Session, inventory_id: int) -> None:
    inventory = get_inventory(db, inventory_id)
    if db.get(Product, inventory.product_id) is not None:
        raise ConflictError(
            "Inventory cannot be deleted while its product exists.",
            details={"inventory_id": inventory_id, "product_id": inventory.product_id},
        )
    db.delete(inventory)
    db.commit()
    logger.info("Deleted inventory %s", inventory_id)


__all__ = [
    "adjust_stock",
    "color_size_report",
    "delete_inventory",
    "get_inventory",
    "get_inventory_for_product",
    "inventory_discrepancies",
    "ledger_from_record",
    "list_inventory",
    "query_inventory",
    "reduce_for_order",
    "register_colors",
    "run_ledger_update",
    "write_ledger",
]
