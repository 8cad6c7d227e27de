import logging
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from .auth import Principal
from .core import ProductIn, _make_product
from .errors import InvalidInputError, OwnershipError, ProductNotFoundError
from .models import Category, Product

# This file contains the store logic behind the API endpoints.

logger = logging.getLogger(__name__)


def _newest_first(stmt):
    return stmt.order_by(Product.created_at.desc(), Product.id.desc())


def _load_product(db: Session, product_id: int) -> Product:
    product = db.get(Product, product_id)
    if product is None:
        raise ProductNotFoundError(product_id)
    return product


def _load_owned_product(db: Session, principal: Principal, product_id: int) -> Product:
    product = _load_product(db, product_id)
    if product.user_id != principal.user_id:
        logger.warning(
            f"User {principal.user_id} tried to modify product {product_id} owned by {product.user_id}"
        )
        raise OwnershipError(product_id)
    return product


# Categories
def list_categories_logic(db: Session) -> List[Category]:
    return list(db.scalars(select(Category).order_by(Category.name.asc())))


# Products
def list_products_logic(db: Session, category_id: Optional[int] = None) -> List[Product]:
    stmt = select(Product)
    if category_id is not None:
        stmt = stmt.where(Product.category_id == category_id)
    return list(db.scalars(_newest_first(stmt)))


def list_my_products_logic(db: Session, principal: Principal) -> List[Product]:
    stmt = select(Product).where(Product.user_id == principal.user_id)
    return list(db.scalars(_newest_first(stmt)))


def get_product_logic(db: Session, product_id: int) -> Product:
    return _load_product(db, product_id)


def create_product_logic(db: Session, principal: Principal, payload: ProductIn) -> Product:
    if db.get(Category, payload.category_id) is None:
        raise InvalidInputError("Unknown category")

    product = _make_product(principal.user_id, payload)
    db.add(product)
    db.commit()
    db.refresh(product)
    logger.info(f"User {principal.user_id} created product {product.id} ({product.title!r})")
    return product


def mark_sold_logic(db: Session, principal: Principal, product_id: int) -> Product:
    product = _load_owned_product(db, principal, product_id)
    if product.is_sold:
        return product

    # conditional so a concurrent second call changes nothing
    result = db.execute(
        update(Product)
        .where(Product.id == product_id, Product.is_sold.is_(False))
        .values(is_sold=True)
    )
    db.commit()
    db.refresh(product)
    if result.rowcount:
        logger.info(f"User {principal.user_id} marked product {product_id} sold")
    return product


def delete_product_logic(db: Session, principal: Principal, product_id: int) -> None:
    product = _load_owned_product(db, principal, product_id)
    db.delete(product)
    db.commit()
    logger.info(f"User {principal.user_id} deleted product {product_id}")
