# artisan_market/api/routers/payment.py
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from artisan_market.api.deps import get_payment_gateway
from artisan_market.api.errors import http_error
from artisan_market.data.database import get_db
from artisan_market.domain.errors import MarketplaceError
from artisan_market.domain.schemas import (
    CreatePaymentOrderIn,
    CreatePaymentOrderOut,
    PaymentStatusOut,
    VerifyPaymentIn,
    VerifyPaymentOut,
)
from artisan_market.services.payment_gateway import CashfreeClient
from artisan_market.services.payment_service import PaymentService

router = APIRouter(prefix="/api/payment", tags=["payment"])


def get_service(db: Session, gateway: CashfreeClient):
    return PaymentService(db, gateway)


@router.post("/create-order", response_model=CreatePaymentOrderOut)
def create_order(
    payload: CreatePaymentOrderIn,
    db: Session = Depends(get_db),
    gateway: CashfreeClient = Depends(get_payment_gateway),
):
    """
    Persists a pending order, then asks the gateway for a payment session.
    """
    svc = get_service(db, gateway)
    data = payload.model_dump()
    if payload.product_details is not None:
        # stored snapshot keeps the camelCase keys the frontend sends
        data["product_details"] = payload.product_details.model_dump(mode="json", by_alias=True, exclude_none=True)
    try:
        return svc.create_order(data)
    except MarketplaceError as e:
        raise http_error(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/verify", response_model=VerifyPaymentOut)
def verify_payment(
    payload: VerifyPaymentIn,
    db: Session = Depends(get_db),
    gateway: CashfreeClient = Depends(get_payment_gateway),
):
    """
    Checks the gateway; PAID applies seller credit / subscription exactly once.
    """
    svc = get_service(db, gateway)
    try:
        return svc.verify(payload.order_id)
    except MarketplaceError as e:
        raise http_error(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/status", response_model=PaymentStatusOut)
def payment_status(
    order_id: str | None = Query(None, alias="orderId"),
    db: Session = Depends(get_db),
    gateway: CashfreeClient = Depends(get_payment_gateway),
):
    svc = get_service(db, gateway)
    try:
        return svc.get_status(order_id)
    except MarketplaceError as e:
        raise http_error(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
