"""Product catalog operations."""

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from bakery.models import Product, ProductDeliveryRule, ProductVariant
from bakery.models.catalog import PRODUCT_STATUSES
from bakery.schemas.catalog import ProductCreate, ProductDeliveryRulePayload, ProductUpdate
from bakery.services.errors import NotFound, ValidationError

STOREFRONT_STATUSES: tuple[str, ...] = ("active", "featured")


def _validate_status(status: str) -> str:
    canonical = str(status or "").strip().lower()
    if canonical not in PRODUCT_STATUSES:
        raise ValidationError(f"Unsupported product status: {status}")
    return canonical


def list_storefront_products(db: Session, category: str | None = None) -> list[Product]:
    """Products customers can buy, featured first."""
    stmt = (
        select(Product)
        .options(selectinload(Product.variants))
        .where(Product.status.in_(STOREFRONT_STATUSES))
        .order_by((Product.status == "featured").desc(), Product.name, Product.id)
    )
    if category:
        stmt = stmt.where(Product.category == category)
    return list(db.scalars(stmt).all())


def list_products(db: Session) -> list[Product]:
    return list(db.scalars(select(Product).options(selectinload(Product.variants)).order_by(Product.id)).all())


def get_product(db: Session, product_id: int) -> Product:
    product = db.get(Product, product_id)
    if product is None:
        raise NotFound("Product not found")
    return product


def create_product(db: Session, payload: ProductCreate) -> Product:
    data = payload.model_dump(exclude={"variants"})
    data["status"] = _validate_status(payload.status)
    product = Product(**data)
    product.variants = [ProductVariant(**variant.model_dump()) for variant in payload.variants]
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


def update_product(db: Session, product_id: int, payload: ProductUpdate) -> Product:
    product = get_product(db, product_id)
    data = payload.model_dump(exclude_unset=True, exclude={"variants"})
    if "status" in data:
        data["status"] = _validate_status(data["status"])
    for key, value in data.items():
        if value is None and key in {"name", "price_cents", "status", "quantity_available"}:
            continue
        setattr(product, key, value)
    if payload.variants is not None:
        product.variants = [ProductVariant(**variant.model_dump()) for variant in payload.variants]
    db.commit()
    db.refresh(product)
    return product


def deactivate_product(db: Session, product_id: int) -> Product:
    """Hide a product from the storefront; past orders keep referencing it."""
    product = get_product(db, product_id)
    product.status = "inactive"
    db.commit()
    db.refresh(product)
    return product


def get_delivery_rule(db: Session, product_id: int) -> ProductDeliveryRule | None:
    get_product(db, product_id)
    return db.scalar(select(ProductDeliveryRule).where(ProductDeliveryRule.product_id == product_id))


def upsert_delivery_rule(db: Session, product_id: int, payload: ProductDeliveryRulePayload) -> ProductDeliveryRule:
    rule = get_delivery_rule(db, product_id)
    if rule is None:
        rule = ProductDeliveryRule(product_id=product_id)
        db.add(rule)
    for key, value in payload.model_dump().items():
        setattr(rule, key, value)
    db.commit()
    db.refresh(rule)
    return rule


def delete_delivery_rule(db: Session, product_id: int) -> None:
    rule = get_delivery_rule(db, product_id)
    if rule is None:
        raise NotFound("Product has no delivery rule")
    db.delete(rule)
    db.commit()
