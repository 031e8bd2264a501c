"""Cart API: the logged-in user's shopping cart."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from storefront.api.deps import require_user_id
from storefront.database import get_session
from storefront.models.cart_item import CartItem
from storefront.models.product import Product
from storefront.schemas.cart import CartAdd, CartItemRead, CartMessage, CartRead, CartUpdate

router = APIRouter(prefix="/api/cart", tags=["cart"])

INSUFFICIENT_STOCK = "Requested quantity is not available in stock"


def _get_own_item(session: Session, item_id: int, user_id: int) -> CartItem:
    item = session.exec(
        select(CartItem).where(CartItem.id == item_id, CartItem.user_id == user_id)
    ).first()
    if not item:
        raise HTTPException(status_code=404, detail="Item not found in cart")
    return item


@router.post("", response_model=CartMessage)
def add_to_cart(
    data: CartAdd,
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    product = session.get(Product, data.product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    if product.stock_quantity < data.quantity:
        raise HTTPException(status_code=400, detail=INSUFFICIENT_STOCK)

    existing = session.exec(
        select(CartItem).where(
            CartItem.user_id == user_id, CartItem.product_id == data.product_id
        )
    ).first()

    if existing:
        new_quantity = existing.quantity + data.quantity
        if new_quantity > product.stock_quantity:
            raise HTTPException(status_code=400, detail=INSUFFICIENT_STOCK)
        existing.quantity = new_quantity
        existing.updated_at = datetime.now(timezone.utc)
        session.add(existing)
        session.commit()
        return CartMessage(message="Cart quantity updated")

    session.add(CartItem(user_id=user_id, product_id=data.product_id, quantity=data.quantity))
    session.commit()
    return CartMessage(message="Product added to cart")


@router.get("", response_model=CartRead)
def get_cart(
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    rows = session.exec(
        select(CartItem, Product)
        .join(Product, CartItem.product_id == Product.id)
        .where(CartItem.user_id == user_id)
        .order_by(CartItem.created_at.desc())
    ).all()

    items = [
        CartItemRead(
            id=item.id,
            user_id=item.user_id,
            product_id=item.product_id,
            quantity=item.quantity,
            created_at=item.created_at,
            updated_at=item.updated_at,
            product_name=product.name,
            product_price=product.price,
            product_image=product.image_url,
        )
        for item, product in rows
    ]
    total = sum(i.product_price * i.quantity for i in items)
    return CartRead(items=items, total=round(total, 2))


@router.put("/{item_id}", response_model=CartMessage)
def update_cart_item(
    item_id: int,
    data: CartUpdate,
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    item = _get_own_item(session, item_id, user_id)

    product = session.get(Product, item.product_id)
    if not product or product.stock_quantity < data.quantity:
        raise HTTPException(status_code=400, detail=INSUFFICIENT_STOCK)

    if data.quantity <= 0:
        session.delete(item)
        session.commit()
        return CartMessage(message="Product removed from cart")

    item.quantity = data.quantity
    item.updated_at = datetime.now(timezone.utc)
    session.add(item)
    session.commit()
    return CartMessage(message="Cart quantity updated")


@router.delete("/{item_id}", response_model=CartMessage)
def remove_cart_item(
    item_id: int,
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    item = _get_own_item(session, item_id, user_id)
    session.delete(item)
    session.commit()
    return CartMessage(message="Product removed from cart")


@router.delete("", response_model=CartMessage)
def clear_cart(
    user_id: int = Depends(require_user_id),
    session: Session = Depends(get_session),
):
    items = session.exec(select(CartItem).where(CartItem.user_id == user_id)).all()
    for item in items:
        session.delete(item)
    session.commit()
    return CartMessage(message="Cart emptied")
