# artisan_market/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from artisan_market.api.errors import http_error
from artisan_market.data.database import get_db
from artisan_market.domain.errors import NotFoundError
from artisan_market.domain.schemas import OrderCreate, OrderOut
from artisan_market.services.order_service import OrderService

router = APIRouter(prefix="/api/orders", tags=["orders"])


def get_service(db: Session):
    return OrderService(db)


@router.post("/create", response_model=OrderOut, status_code=201)
def create_order(payload: OrderCreate, db: Session = Depends(get_db)):
    """
    Stores an order document as pending. Payment goes through /api/payment.
    """
    svc = get_service(db)
    try:
        return svc.create_order(payload.model_dump())
    except NotFoundError as e:
        raise http_error(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/buyer/{buyer_id}", response_model=List[OrderOut])
def buyer_orders(buyer_id: int, db: Session = Depends(get_db)):
    return get_service(db).paid_for_buyer(buyer_id)


@router.get("/{order_pk}", response_model=OrderOut)
def get_order(order_pk: int, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.get_order(order_pk)
    except NotFoundError as e:
        raise http_error(e)
