# artisan_market/api/routers/resale.py
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from artisan_market.api.deps import get_media_service, get_optional_user_id, get_request_user_id
from artisan_market.api.errors import http_error
from artisan_market.data.database import get_db
from artisan_market.domain.errors import NotFoundError
from artisan_market.domain.schemas import (
    InterestIn,
    ResaleCreate,
    ResaleEnvelope,
    ResaleListEnvelope,
    ResaleStatsEnvelope,
    ResaleUpdate,
    StatusMessageOut,
)
from artisan_market.services.media_service import MediaService
from artisan_market.services.resale_service import ResaleService

router = APIRouter(prefix="/api/resale", tags=["resale"])


def get_service(db: Session, media: MediaService | None = None):
    return ResaleService(db, media)


#public

@router.get("/", response_model=ResaleListEnvelope)
def search_listings(
    category: str | None = None,
    condition: str | None = None,
    min_price: Decimal | None = Query(None, alias="minPrice", ge=0),
    max_price: Decimal | None = Query(None, alias="maxPrice", ge=0),
    sort_by: str = Query("listedAt", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder", pattern="^(asc|desc)$"),
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    db: Session = Depends(get_db),
):
    return get_service(db).search(category, condition, min_price, max_price, sort_by, sort_order, page, limit)


#seller, declared before /{listing_id}

@router.get("/user/listings", response_model=ResaleListEnvelope)
def my_listings(
    status: str = "all",
    user_id: int = Depends(get_request_user_id),
    db: Session = Depends(get_db),
):
    return {"success": True, "data": get_service(db).list_for_seller(user_id, status)}


@router.get("/user/stats", response_model=ResaleStatsEnvelope)
def my_stats(user_id: int = Depends(get_request_user_id), db: Session = Depends(get_db)):
    return {"success": True, "data": get_service(db).stats(user_id)}


@router.get("/{listing_id}", response_model=ResaleEnvelope)
def get_listing(
    listing_id: int,
    viewer_id: int | None = Depends(get_optional_user_id),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return {"success": True, "data": svc.view(listing_id, viewer_id)}
    except NotFoundError as e:
        raise http_error(e)


@router.post("/", response_model=ResaleEnvelope, status_code=201)
def create_listing(
    payload: ResaleCreate,
    user_id: int = Depends(get_request_user_id),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        listing = svc.create(user_id, payload.model_dump())
    except NotFoundError as e:
        raise http_error(e)
    return {"success": True, "message": "Resale listing created successfully", "data": listing}


@router.put("/{listing_id}", response_model=ResaleEnvelope)
def update_listing(
    listing_id: int,
    payload: ResaleUpdate,
    user_id: int = Depends(get_request_user_id),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        listing = svc.update(listing_id, user_id, payload.model_dump(exclude_unset=True))
    except NotFoundError as e:
        raise http_error(e)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    return {"success": True, "message": "Listing updated successfully", "data": listing}


@router.delete("/{listing_id}", response_model=StatusMessageOut)
def delete_listing(
    listing_id: int,
    user_id: int = Depends(get_request_user_id),
    db: Session = Depends(get_db),
    media: MediaService = Depends(get_media_service),
):
    svc = get_service(db, media)
    try:
        svc.delete(listing_id, user_id)
    except NotFoundError as e:
        raise http_error(e)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    return {"status": "success", "message": "Listing deleted successfully"}


@router.patch("/{listing_id}/sold", response_model=ResaleEnvelope)
def mark_sold(
    listing_id: int,
    user_id: int = Depends(get_request_user_id),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        listing = svc.mark_sold(listing_id, user_id)
    except NotFoundError as e:
        raise http_error(e)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    return {"success": True, "message": "Listing marked as sold", "data": listing}


@router.post("/{listing_id}/interest", response_model=StatusMessageOut)
def express_interest(
    listing_id: int,
    payload: InterestIn,
    user_id: int = Depends(get_request_user_id),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        svc.express_interest(listing_id, user_id, payload.message)
    except NotFoundError as e:
        raise http_error(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"status": "success", "message": "Interest expressed successfully"}
