from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from storeadmin.dependencies import get_db, require_auth
from storeadmin.schemas.discount import (
    BulkDiscountRequest,
    BulkDiscountResponse,
    DiscountCreate,
    DiscountListResponse,
    DiscountRead,
    DiscountUpdate,
)
from storeadmin.services.discount_service import (
    best_discount_for_product,
    bulk_discounts,
    create_discount,
    delete_discount,
    get_discount,
    list_discounts,
    update_discount,
)

router = APIRouter(prefix="/discounts", tags=["Discounts"])


@router.get("", response_model=DiscountListResponse)
def list_discounts_route(
    status_filter: Optional[str] = Query(None, alias="status"),
    db: Session = Depends(get_db),
):
    items, counts = list_discounts(db, status=status_filter)
    return {"items": items, "counts": counts}


@router.post("", response_model=DiscountRead, status_code=status.HTTP_201_CREATED)
def create_discount_route(
    payload: DiscountCreate,
    db: Session = Depends(get_db),
    _auth=Depends(require_auth),
):
    return create_discount(db, payload)


@router.get("/product/{product_id}", response_model=Optional[DiscountRead])
def product_discount_route(product_id: int, db: Session = Depends(get_db)):
    return best_discount_for_product(db, product_id)


@router.post("/bulk", response_model=BulkDiscountResponse)
def bulk_discounts_route(payload: BulkDiscountRequest, db: Session = Depends(get_db)):
    discounts = bulk_discounts(db, payload.product_ids)
    return {"discounts": discounts, "count": len(discounts)}


@router.get("/{discount_id}", response_model=DiscountRead)
def get_discount_route(discount_id: int, db: Session = Depends(get_db)):
    return get_discount(db, discount_id)


@router.put("/{discount_id}", response_model=DiscountRead)
def update_discount_route(
    discount_id: int,
    payload: DiscountUpdate,
    db: Session = Depends(get_db),
    _auth=Depends(require_auth),
):
    return update_discount(db, discount_id, payload)


@router.delete("/{discount_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_discount_route(
    discount_id: int,
    db: Session = Depends(get_db),
    _auth=Depends(require_auth),
):
    delete_discount(db, discount_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
