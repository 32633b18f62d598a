# artisan_market/api/routers/analytics.py
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from artisan_market.data.database import get_db
from artisan_market.domain.schemas import BuyerAnalyticsOut, SellerAnalyticsOut
from artisan_market.services.analytics_service import AnalyticsService

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


def get_service(db: Session):
    return AnalyticsService(db)


@router.get("/seller/{seller_id}", response_model=SellerAnalyticsOut)
def seller_analytics(
    seller_id: int,
    range_name: str = Query("monthly", alias="range"),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return svc.seller_analytics(seller_id, range_name)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/buyer/{buyer_id}", response_model=BuyerAnalyticsOut)
def buyer_analytics(buyer_id: int, db: Session = Depends(get_db)):
    return get_service(db).buyer_analytics(buyer_id)
