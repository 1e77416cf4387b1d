from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from storeadmin.dependencies import get_db, require_auth
from storeadmin.schemas.coupon import (
    CouponCreate,
    CouponListResponse,
    CouponRead,
    CouponUpdate,
    CouponValidateRequest,
    CouponValidateResponse,
    StatusRefreshResponse,
)
from storeadmin.services.coupon_service import (
    best_coupon_for_product,
    create_coupon,
    delete_coupon,
    get_coupon,
    list_coupons,
    refresh_coupon_statuses,
    update_coupon,
    validate_coupon,
)

router = APIRouter(prefix="/coupons", tags=["Coupons"])


@router.get("", response_model=CouponListResponse)
def list_coupons_route(
    status_filter: Optional[str] = Query(None, alias="status"),
    db: Session = Depends(get_db),
):
    items, counts = list_coupons(db, status=status_filter)
    return {"items": items, "counts": counts}


@router.post("", response_model=CouponRead, status_code=status.HTTP_201_CREATED)
def create_coupon_route(
    payload: CouponCreate,
    db: Session = Depends(get_db),
    _auth=Depends(require_auth),
):
    return create_coupon(db, payload)


@router.post("/validate", response_model=CouponValidateResponse)
def validate_coupon_route(payload: CouponValidateRequest, db: Session = Depends(get_db)):
    return validate_coupon(db, payload.code, payload.subtotal)


@router.get("/status-refresh", response_model=StatusRefreshResponse)
def preview_status_refresh(db: Session = Depends(get_db)):
    changes = refresh_coupon_statuses(db, dry_run=True)
    return {"dry_run": True, "updated": 0, "changes": changes}


@router.post("/status-refresh", response_model=StatusRefreshResponse)
def run_status_refresh(db: Session = Depends(get_db), _auth=Depends(require_auth)):
    changes = refresh_coupon_statuses(db)
    return {"dry_run": False, "updated": len(changes), "changes": changes}


@router.get("/product/{product_id}", response_model=Optional[CouponRead])
def product_coupon_route(product_id: int, db: Session = Depends(get_db)):
    return best_coupon_for_product(db, product_id)


@router.get("/{coupon_id}", response_model=CouponRead)
def get_coupon_route(coupon_id: int, db: Session = Depends(get_db)):
    return get_coupon(db, coupon_id)


@router.put("/{coupon_id}", response_model=CouponRead)
def update_coupon_route(
    coupon_id: int,
    payload: CouponUpdate,
    db: Session = Depends(get_db),
    _auth=Depends(require_auth),
):
    return update_coupon(db, coupon_id, payload)


@router.delete("/{coupon_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_coupon_route(
    coupon_id: int,
    db: Session = Depends(get_db),
    _auth=Depends(require_auth),
):
    delete_coupon(db, coupon_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
