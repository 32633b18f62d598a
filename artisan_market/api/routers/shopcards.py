# artisan_market/api/routers/shopcards.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from artisan_market.api.errors import http_error
from artisan_market.data.database import get_db
from artisan_market.domain.errors import NotFoundError
from artisan_market.domain.schemas import (
    MessageOut,
    ProductsWithoutSellerOut,
    SellerAssignIn,
    ShopCardCreate,
    ShopCardOut,
    ShopCardUpdate,
)
from artisan_market.services.shop_card_service import ShopCardService

router = APIRouter(prefix="/api/shopcards", tags=["shopcards"])


def get_service(db: Session):
    return ShopCardService(db)


@router.post("/", response_model=ShopCardOut, status_code=201)
def create_card(payload: ShopCardCreate, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.create(payload.model_dump())
    except NotFoundError as e:
        raise http_error(e)


@router.get("/", response_model=List[ShopCardOut])
def list_cards(db: Session = Depends(get_db)):
    return get_service(db).list_all()


@router.get("/without-seller", response_model=ProductsWithoutSellerOut)
def without_seller(db: Session = Depends(get_db)):
    return get_service(db).without_seller()


@router.get("/category/{category}", response_model=List[ShopCardOut])
def by_category(category: str, db: Session = Depends(get_db)):
    return get_service(db).list_by_category(category)


@router.get("/state/{state}", response_model=List[ShopCardOut])
def by_state(state: str, db: Session = Depends(get_db)):
    return get_service(db).list_by_state(state)


@router.get("/seller/{seller_id}", response_model=List[ShopCardOut])
def by_seller(seller_id: int, db: Session = Depends(get_db)):
    return get_service(db).list_by_seller(seller_id)


@router.get("/{card_id}", response_model=ShopCardOut)
def get_card(card_id: int, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.get(card_id)
    except NotFoundError as e:
        raise http_error(e)


@router.patch("/{card_id}", response_model=ShopCardOut)
def update_card(card_id: int, payload: ShopCardUpdate, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.update(card_id, payload.model_dump(exclude_unset=True))
    except NotFoundError as e:
        raise http_error(e)


@router.patch("/{card_id}/seller", response_model=ShopCardOut)
def assign_seller(card_id: int, payload: SellerAssignIn, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.assign_seller(card_id, payload.seller_id)
    except NotFoundError as e:
        raise http_error(e)


@router.delete("/{card_id}", response_model=MessageOut)
def delete_card(card_id: int, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        svc.delete(card_id)
    except NotFoundError as e:
        raise http_error(e)
    return {"message": "Product deleted successfully"}
