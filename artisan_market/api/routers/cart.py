# artisan_market/api/routers/cart.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from artisan_market.api.errors import http_error
from artisan_market.data.database import get_db
from artisan_market.domain.errors import ConflictError, NotFoundError
from artisan_market.domain.schemas import CartAddIn, CartOut, CartRemoveIn, CartUpdateIn
from artisan_market.services.cart_service import CartService

router = APIRouter(prefix="/api/cart", tags=["cart"])


def get_service(db: Session):
    return CartService(db)


@router.get("/{user_id}", response_model=CartOut)
def get_cart(user_id: int, db: Session = Depends(get_db)):
    return get_service(db).get_cart(user_id)


@router.post("/add", response_model=CartOut)
def add_item(payload: CartAddIn, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.add_item(payload.user_id, payload.product_id, payload.quantity)
    except (NotFoundError, ConflictError) as e:
        raise http_error(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/update", response_model=CartOut)
def update_item(payload: CartUpdateIn, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.update_item(payload.user_id, payload.product_id, payload.quantity)
    except (NotFoundError, ConflictError) as e:
        raise http_error(e)


@router.post("/remove", response_model=CartOut)
def remove_item(payload: CartRemoveIn, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.remove_item(payload.user_id, payload.product_id)
    except (NotFoundError, ConflictError) as e:
        raise http_error(e)


@router.delete("/{user_id}", response_model=CartOut)
def clear_cart(user_id: int, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.clear(user_id)
    except ConflictError as e:
        raise http_error(e)
