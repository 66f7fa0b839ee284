"""Storefront catalog endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from bakery.db.session import get_db
from bakery.models import Product
from bakery.schemas.catalog import ProductRead
from bakery.services.catalog_service import list_storefront_products

router: APIRouter = APIRouter()


@router.get("", response_model=list[ProductRead])
def list_products(category: str | None = None, db: Session = Depends(get_db)) -> list[Product]:
    return list_storefront_products(db, category=category)
