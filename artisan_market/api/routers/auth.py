# artisan_market/api/routers/auth.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from artisan_market.api.deps import auth_rate_limit, get_current_user, get_google_client
from artisan_market.api.errors import http_error
from artisan_market.data.database import get_db
from artisan_market.data.models.user import UserModel
from artisan_market.domain.errors import MarketplaceError
from artisan_market.domain.schemas import (
    AuthOut,
    ForgotPasswordIn,
    GoogleCodeIn,
    LinkedUserOut,
    LoginIn,
    RefreshTokenIn,
    RegisterIn,
    RegisterOut,
    ResetPasswordIn,
    StatusMessageOut,
    TokenOut,
    VerifyOtpIn,
)
from artisan_market.services.auth_service import AuthService
from artisan_market.services.google_client import GoogleOAuthClient

router = APIRouter(prefix="/api/auth", tags=["auth"], dependencies=[Depends(auth_rate_limit)])


def get_service(db: Session, google: GoogleOAuthClient | None = None):
    return AuthService(db, google=google)


@router.post("/register", response_model=RegisterOut, status_code=201)
def register(payload: RegisterIn, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        user = svc.register(payload.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"status": "success", "message": "OTP sent to email", "data": {"user_id": user.id}}


@router.post("/verify-otp", response_model=AuthOut)
def verify_otp(payload: VerifyOtpIn, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.verify_otp(payload.user_id, payload.otp)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/login", response_model=AuthOut)
def login(payload: LoginIn, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.login(payload.email, payload.password)
    except MarketplaceError as e:
        raise http_error(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/google", response_model=AuthOut)
def google_login(
    payload: GoogleCodeIn,
    db: Session = Depends(get_db),
    google: GoogleOAuthClient = Depends(get_google_client),
):
    svc = get_service(db, google)
    try:
        return svc.google_login(payload.code)
    except MarketplaceError as e:
        raise http_error(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/link-google", response_model=LinkedUserOut)
def link_google(
    payload: GoogleCodeIn,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
    google: GoogleOAuthClient = Depends(get_google_client),
):
    svc = get_service(db, google)
    try:
        user = svc.link_google(user, payload.code)
    except MarketplaceError as e:
        raise http_error(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"status": "success", "message": "Google account linked successfully", "user": user}


@router.post("/refresh-token", response_model=TokenOut)
def refresh_token(payload: RefreshTokenIn, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.refresh(payload.refresh_token)
    except MarketplaceError as e:
        raise http_error(e)


@router.post("/forgot-password", response_model=StatusMessageOut)
def forgot_password(payload: ForgotPasswordIn, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        svc.forgot_password(payload.email)
    except MarketplaceError as e:
        raise http_error(e)
    return {"status": "success", "message": "Token sent to email!"}


@router.patch("/reset-password/{token}", response_model=StatusMessageOut)
def reset_password(token: str, payload: ResetPasswordIn, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        svc.reset_password(token, payload.password)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"status": "success", "message": "Password reset successful. Please log in again."}
