from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from storeadmin.dependencies import get_db, require_auth
from storeadmin.schemas.inventory import (
    ColorRegistration,
    ColorSizeReportRow,
    InventoryDetail,
    InventoryListResponse,
    InventoryLookupResponse,
    InventoryQueryResponse,
    InventoryRead,
    OrderReductionRequest,
    OrderReductionResponse,
    StockAdjustment,
)
from storeadmin.services.inventory_service import (
    adjust_stock,
    color_size_report,
    delete_inventory,
    get_inventory,
    get_inventory_for_product,
    inventory_discrepancies,
    list_inventory,
    query_inventory,
    reduce_for_order,
    register_colors,
)

router = APIRouter(prefix="/inventory", tags=["Inventory"])


@router.get("", response_model=InventoryListResponse)
def list_inventory_route(
    status_filter: Optional[str] = Query(None, alias="status"),
    search: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    items, counts = list_inventory(db, status=status_filter, search=search)
    return {"items": items, "counts": counts}


@router.get("/query", response_model=InventoryQueryResponse)
def query_inventory_route(
    color: Optional[str] = Query(None),
    size: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    return query_inventory(db, color=color, size=size)


@router.get("/reports/color-size", response_model=List[ColorSizeReportRow])
def color_size_report_route(db: Session = Depends(get_db)):
    return color_size_report(db)


@router.get("/product/{product_id}", response_model=InventoryLookupResponse)
def inventory_for_product_route(product_id: int, db: Session = Depends(get_db)):
    inventory = get_inventory_for_product(db, product_id)
    if inventory is None:
        return {"inventory": None, "message": "No inventory found for this product."}
    return {"inventory": inventory, "message": "Inventory found."}


@router.post("/order-reductions", response_model=OrderReductionResponse)
def order_reductions_route(
    payload: OrderReductionRequest,
    db: Session = Depends(get_db),
    _auth=Depends(require_auth),
):
    results = reduce_for_order(db, payload.line_items)
    succeeded = sum(1 for result in results if result["ok"])
    return {
        "results": results,
        "succeeded": succeeded,
        "failed": len(results) - succeeded,
    }


@router.get("/{inventory_id}", response_model=InventoryDetail)
def get_inventory_route(inventory_id: int, db: Session = Depends(get_db)):
    inventory = get_inventory(db, inventory_id)
    detail = InventoryDetail.model_validate(inventory)
    detail.discrepancies = inventory_discrepancies(inventory)
    return detail


@router.post("/{inventory_id}/adjustments", response_model=InventoryRead)
def adjust_inventory_route(
    inventory_id: int,
    payload: StockAdjustment,
    db: Session = Depends(get_db),
    _auth=Depends(require_auth),
):
    return adjust_stock(
        db,
        inventory_id,
        payload.delta,
        size=payload.size,
        color=payload.color,
    )


@router.put("/{inventory_id}/colors", response_model=InventoryRead)
def register_colors_route(
    inventory_id: int,
    payload: ColorRegistration,
    db: Session = Depends(get_db),
    _auth=Depends(require_auth),
):
    return register_colors(db, inventory_id, payload.colors)


@router.delete("/{inventory_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_inventory_route(
    inventory_id: int,
    db: Session = Depends(get_db),
    _auth=Depends(require_auth),
):
    delete_inventory(db, inventory_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
