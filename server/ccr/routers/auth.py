from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ccr.auth.security import create_access_token, verify_password
from ccr.core.clock import now_utc
from ccr.core.db import get_db
from ccr.models.user import User
from ccr.schemas.auth import LoginRequest, RegisterRequest, TokenResponse
from ccr.services.user_accounts import normalize_email, register_user

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, db: Session = Depends(get_db)) -> TokenResponse:
    metadata = {
        "first_name": payload.first_name,
        "last_name": payload.last_name,
        "phone": payload.phone,
    }
    try:
        user = register_user(db, payload.email, payload.password, metadata)
    except ValueError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    db.commit()
    token = create_access_token(subject=str(user.id), role=user.profile.role)
    return TokenResponse(access_token=token)


@router.post("/login", response_model=TokenResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)) -> TokenResponse:
    user = db.query(User).filter(User.email == normalize_email(payload.email)).first()
    if not user or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    if not verify_password(payload.password, user.hashed_password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    user.last_login_at = now_utc()
    db.commit()
    role = user.profile.role if user.profile else None
    token = create_access_token(subject=str(user.id), role=role)
    return TokenResponse(access_token=token)
