# artisan_market/api/routers/subscription.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from artisan_market.api.deps import get_payment_gateway
from artisan_market.api.errors import http_error
from artisan_market.data.database import get_db
from artisan_market.domain.errors import MarketplaceError
from artisan_market.domain.schemas import (
    CreatePaymentOrderOut,
    SubscriptionOrderIn,
    SubscriptionVerifyOut,
    VerifyPaymentIn,
)
from artisan_market.services.payment_gateway import CashfreeClient
from artisan_market.services.payment_service import PaymentService

router = APIRouter(prefix="/api/subscription", tags=["subscription"])


def get_service(db: Session, gateway: CashfreeClient):
    return PaymentService(db, gateway)


@router.post("/create-order", response_model=CreatePaymentOrderOut)
def create_subscription_order(
    payload: SubscriptionOrderIn,
    db: Session = Depends(get_db),
    gateway: CashfreeClient = Depends(get_payment_gateway),
):
    svc = get_service(db, gateway)
    try:
        return svc.create_order({**payload.model_dump(), "is_subscription": True})
    except MarketplaceError as e:
        raise http_error(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/verify", response_model=SubscriptionVerifyOut)
def verify_subscription(
    payload: VerifyPaymentIn,
    db: Session = Depends(get_db),
    gateway: CashfreeClient = Depends(get_payment_gateway),
):
    svc = get_service(db, gateway)
    try:
        result = svc.verify(payload.order_id, subscription_only=True)
    except MarketplaceError as e:
        raise http_error(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {
        "success": result["success"],
        "message": result["message"],
        "code": result.get("code"),
        "order_status": result["status"],
        "order": result["order"],
    }
