"""Catalog API: product listings."""

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, col, select

from storefront.database import get_session
from storefront.models.product import Product
from storefront.schemas.product import ProductRead

router = APIRouter(prefix="/api/products", tags=["products"])


@router.get("", response_model=list[ProductRead])
def list_products(session: Session = Depends(get_session)):
    return session.exec(select(Product).order_by(Product.created_at.desc())).all()


@router.get("/featured", response_model=list[ProductRead])
def featured_products(session: Session = Depends(get_session)):
    stmt = (
        select(Product)
        .where(col(Product.is_featured).is_(True))
        .order_by(Product.created_at.desc())
    )
    return session.exec(stmt).all()


@router.get("/{product_id}", response_model=ProductRead)
def get_product(product_id: int, session: Session = Depends(get_session)):
    product = session.get(Product, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product
