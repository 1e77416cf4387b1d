from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from storeadmin.dependencies import get_db, require_auth
from storeadmin.schemas.product import ProductCreate, ProductRead
from storeadmin.services.product_service import (
    create_product,
    delete_product,
    get_product,
    list_products,
)

router = APIRouter(prefix="/products", tags=["Products"])


@router.post("", response_model=ProductRead, status_code=status.HTTP_201_CREATED)
def create_product_route(
    payload: ProductCreate,
    db: Session = Depends(get_db),
    _auth=Depends(require_auth),
):
    return create_product(db, payload)


@router.get("", response_model=List[ProductRead])
def list_products_route(db: Session = Depends(get_db)):
    return list_products(db)


@router.get("/{product_id}", response_model=ProductRead)
def get_product_route(product_id: int, db: Session = Depends(get_db)):
    return get_product(db, product_id)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product_route(
    product_id: int,
    db: Session = Depends(get_db),
    _auth=Depends(require_auth),
):
    delete_product(db, product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
