from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from matatu.core.deps import ensure_self_or_admin, get_current_user
from matatu.db.session import get_db
from matatu.models.user import User
from matatu.schemas.common import MessageOut
from matatu.schemas.user import PasswordUpdate, UserCreate, UserDeleted, UserOut, UserUpdate
from matatu.services import users_service

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def sign_up(payload: UserCreate, db: Session = Depends(get_db)):
    return users_service.create_user(db, payload)


@router.get("", response_model=List[UserOut])
def list_users(db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    return db.query(User).order_by(User.created_at.desc(), User.id.desc()).all()


@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: int, db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    return users_service.get_user(db, user_id)


@router.put("/{user_id}", response_model=UserOut)
def update_user(
    user_id: int,
    payload: UserUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    ensure_self_or_admin(user, user_id)
    return users_service.update_user(db, user_id, payload)


@router.put("/{user_id}/password", response_model=MessageOut)
def update_password(
    user_id: int,
    payload: PasswordUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    ensure_self_or_admin(user, user_id)
    users_service.set_password(db, user_id, payload.password)
    return MessageOut(message="Password updated successfully")


@router.delete("/{user_id}", response_model=UserDeleted)
def delete_user(user_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    ensure_self_or_admin(user, user_id)
    deleted = users_service.delete_user(db, user_id)
    return UserDeleted(message="User deleted successfully", user=UserOut.model_validate(deleted))
