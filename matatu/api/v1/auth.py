# matatu/api/v1/auth.py
from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from matatu.core.deps import get_current_user
from matatu.db.session import get_db
from matatu.models.user import User
from matatu.schemas.auth import LoginRequest, LoginResponse, RefreshRequest, TokenPair
from matatu.schemas.common import ExistsOut, MessageOut
from matatu.schemas.user import UserOut
from matatu.services import users_service

router = APIRouter(prefix="/auth", tags=["auth"])
me_router = APIRouter(tags=["auth"])


@router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = users_service.authenticate(db, payload.username, payload.password)
    tokens = users_service.issue_tokens(db, user)
    return LoginResponse(**tokens.model_dump(), user=UserOut.model_validate(user))


@router.post("/token", response_model=TokenPair)
def token(form: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    # OAuth2 password flow for the interactive docs
    user = users_service.authenticate(db, form.username, form.password)
    return users_service.issue_tokens(db, user)


@router.post("/refresh", response_model=TokenPair)
def refresh(payload: RefreshRequest, db: Session = Depends(get_db)):
    _, tokens = users_service.rotate_refresh(db, payload.refresh_token)
    return tokens


@router.post("/logout", response_model=MessageOut)
def logout(payload: RefreshRequest, db: Session = Depends(get_db)):
    users_service.revoke_refresh(db, payload.refresh_token)
    return MessageOut(message="Logged out")


@router.get("/check-username/{username}", response_model=ExistsOut)
def check_username(username: str, db: Session = Depends(get_db)):
    return ExistsOut(exists=users_service.username_exists(db, username))


@router.get("/check-email/{email}", response_model=ExistsOut)
def check_email(email: str, db: Session = Depends(get_db)):
    return ExistsOut(exists=users_service.email_exists(db, email))


@me_router.get("/me", response_model=UserOut)
def me(user: User = Depends(get_current_user)):
    return user
