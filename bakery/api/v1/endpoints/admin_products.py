"""Admin catalog endpoints."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from bakery.db.session import get_db
from bakery.models import Product, ProductDeliveryRule
from bakery.schemas.catalog import (
    ProductCreate,
    ProductDeliveryRulePayload,
    ProductDeliveryRuleRead,
    ProductRead,
    ProductUpdate,
)
from bakery.services import catalog_service
from bakery.services.errors import NotFound

router: APIRouter = APIRouter()


@router.get("", response_model=list[ProductRead])
def list_products(db: Session = Depends(get_db)) -> list[Product]:
    return catalog_service.list_products(db)


@router.post("", response_model=ProductRead, status_code=status.HTTP_201_CREATED)
def create_product(payload: ProductCreate, db: Session = Depends(get_db)) -> Product:
    return catalog_service.create_product(db, payload)


@router.get("/{product_id}", response_model=ProductRead)
def get_product(product_id: int, db: Session = Depends(get_db)) -> Product:
    return catalog_service.get_product(db, product_id)


@router.patch("/{product_id}", response_model=ProductRead)
def update_product(product_id: int, payload: ProductUpdate, db: Session = Depends(get_db)) -> Product:
    return catalog_service.update_product(db, product_id, payload)


@router.delete("/{product_id}", response_model=ProductRead)
def deactivate_product(product_id: int, db: Session = Depends(get_db)) -> Product:
    return catalog_service.deactivate_product(db, product_id)


@router.get("/{product_id}/delivery-rules", response_model=ProductDeliveryRuleRead)
def get_delivery_rule(product_id: int, db: Session = Depends(get_db)) -> ProductDeliveryRule:
    rule = catalog_service.get_delivery_rule(db, product_id)
    if rule is None:
        raise NotFound("Product has no delivery rule")
    return rule


@router.put("/{product_id}/delivery-rules", response_model=ProductDeliveryRuleRead)
def put_delivery_rule(
    product_id: int,
    payload: ProductDeliveryRulePayload,
    db: Session = Depends(get_db),
) -> ProductDeliveryRule:
    return catalog_service.upsert_delivery_rule(db, product_id, payload)


@router.delete("/{product_id}/delivery-rules")
def delete_delivery_rule(product_id: int, db: Session = Depends(get_db)) -> dict[str, str]:
    catalog_service.delete_delivery_rule(db, product_id)
    return {"message": "Delivery rule removed"}
