# artisan_market/api/routers/users.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from artisan_market.api.errors import http_error
from artisan_market.data.database import get_db
from artisan_market.domain.errors import NotFoundError
from artisan_market.domain.schemas import (
    ArtisanUpdate,
    MessageOut,
    SubscriptionUpdate,
    UserCreate,
    UserOut,
    UserSavedOut,
    WalletOut,
)
from artisan_market.services.user_service import UserService

router = APIRouter(prefix="/api/user", tags=["users"])


def get_service(db: Session):
    return UserService(db)


@router.post("/", response_model=UserSavedOut, status_code=201)
def create_user(payload: UserCreate, response: Response, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        user, created = svc.create_user(payload.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not created:
        response.status_code = 200
    return {"message": "User saved" if created else "User already exists", "user": user}


@router.get("/", response_model=List[UserOut])
def list_users(db: Session = Depends(get_db)):
    return get_service(db).list_users()


@router.get("/email/{email}", response_model=UserOut)
def get_by_email(email: str, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.get_by_email(email)
    except NotFoundError as e:
        raise http_error(e)


@router.get("/username/{username}", response_model=UserOut)
def get_by_username(username: str, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.get_by_username(username)
    except NotFoundError as e:
        raise http_error(e)


@router.get("/wallet/{user_id}", response_model=WalletOut)
def wallet(user_id: int, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.wallet(user_id)
    except NotFoundError as e:
        raise http_error(e)


@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: int, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.get_user(user_id)
    except NotFoundError as e:
        raise http_error(e)


@router.patch("/{user_id}/artisan", response_model=UserOut)
def set_artisan(user_id: int, payload: ArtisanUpdate, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.set_artisan(user_id, payload.is_artisan)
    except NotFoundError as e:
        raise http_error(e)


@router.patch("/{user_id}/subscription", response_model=UserOut)
def update_subscription(user_id: int, payload: SubscriptionUpdate, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.update_subscription(user_id, payload.model_dump())
    except NotFoundError as e:
        raise http_error(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/{user_id}", response_model=MessageOut)
def delete_user(user_id: int, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        svc.delete_user(user_id)
    except NotFoundError as e:
        raise http_error(e)
    return {"message": "User deleted successfully"}
