import logging
from typing import Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session

from matatu.core.errors import AuthenticationError, AuthorizationError, ConflictError, NotFoundError, ValidationError
from matatu.core.security import check_password, hash_password, hash_token
from matatu.core.tokens import create_access_token, create_refresh_token
from matatu.db.session import commit
from matatu.models.enums import UserRole
from matatu.models.refresh_token import RefreshToken
from matatu.models.user import User
from matatu.schemas.auth import TokenPair
from matatu.schemas.user import UserCreate, UserUpdate
from matatu.utils.clock import utcnow

logger = logging.getLogger(__name__)

MIN_PASSWORD_LEN = 6


def get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("User not found")
    return user


def username_exists(db: Session, username: str) -> bool:
    return db.query(User.id).filter(User.username == username).first() is not None


def email_exists(db: Session, email: str) -> bool:
    return db.query(User.id).filter(User.email == email.lower()).first() is not None


def _check_unique(db: Session, username: Optional[str], email: Optional[str], exclude_id: Optional[int] = None):
    conds = []
    if username:
        conds.append(User.username == username)
    if email:
        conds.append(User.email == email)
    if not conds:
        return
    q = db.query(User.id).filter(or_(*conds))
    if exclude_id is not None:
        q = q.filter(User.id != exclude_id)
    if q.first():
        raise ConflictError("Username or email already exists")


def _check_password(password: Optional[str]) -> str:
    if not password:
        raise ValidationError("Password is required")
    if len(password) < MIN_PASSWORD_LEN:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LEN} characters")
    return password


def create_user(db: Session, payload: UserCreate, allow_admin: bool = False) -> User:
    if payload.role == UserRole.admin and not allow_admin:
        raise AuthorizationError("Admin accounts cannot be self-registered")
    fields = {"firstname": payload.firstname, "lastname": payload.lastname, "username": payload.username}
    for name, value in fields.items():
        if not value or not value.strip():
            raise ValidationError(f"Missing required field: {name}")
    email = str(payload.email).lower()
    _check_unique(db, payload.username.strip(), email)
    user = User(
        firstname=payload.firstname.strip(),
        lastname=payload.lastname.strip(),
        username=payload.username.strip(),
        email=email,
        password_hash=hash_password(_check_password(payload.password)),
        role=payload.role,
    )
    db.add(user)
    commit(db)
    logger.info("user %s registered as %s", user.id, user.role.value)
    return user


def update_user(db: Session, user_id: int, payload: UserUpdate) -> User:
    user = get_user(db, user_id)
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "email" in changes:
        changes["email"] = str(changes["email"]).lower()
    for name in ("firstname", "lastname", "username"):
        if name in changes:
            changes[name] = changes[name].strip()
            if not changes[name]:
                raise ValidationError(f"{name} cannot be empty")
    _check_unique(db, changes.get("username"), changes.get("email"), exclude_id=user.id)
    for name, value in changes.items():
        setattr(user, name, value)
    commit(db)
    return user


def set_password(db: Session, user_id: int, password: Optional[str]) -> None:
    user = get_user(db, user_id)
    user.password_hash = hash_password(_check_password(password))
    # a password change ends every outstanding session
    db.query(RefreshToken).filter(RefreshToken.user_id == user.id).update({"revoked": True})
    commit(db)


def delete_user(db: Session, user_id: int) -> User:
    user = get_user(db, user_id)
    db.delete(user)
    commit(db)
    logger.info("user %s deleted", user_id)
    return user


# ---------- sessions ----------

def authenticate(db: Session, login: str, password: str) -> User:
    login = (login or "").strip()
    user = (
        db.query(User)
        .filter(or_(User.username == login, User.email == login.lower()), User.is_active.is_(True))
        .first()
    )
    ok, new_hash = check_password(password, user.password_hash) if user else (False, None)
    if not ok:
        raise AuthenticationError("Invalid username or password")
    if new_hash:
        user.password_hash = new_hash
        commit(db)
    return user


def issue_tokens(db: Session, user: User) -> TokenPair:
    access = create_access_token(sub=str(user.id), role=user.role.value)
    refresh_raw, expires_at = create_refresh_token(sub=str(user.id))
    db.add(RefreshToken(user_id=user.id, token_hash=hash_token(refresh_raw), expires_at=expires_at, revoked=False))
    commit(db)
    return TokenPair(access_token=access, refresh_token=refresh_raw)


def _live_refresh(db: Session, raw: str) -> RefreshToken:
    rt = db.query(RefreshToken).filter(
        RefreshToken.token_hash == hash_token(raw),
        RefreshToken.revoked.is_(False),
    ).first()
    if not rt or rt.expires_at <= utcnow():
        raise AuthenticationError("Invalid/expired refresh token")
    return rt


def rotate_refresh(db: Session, raw: str) -> Tuple[User, TokenPair]:
    rt = _live_refresh(db, raw)
    user = db.query(User).filter(User.id == rt.user_id, User.is_active.is_(True)).first()
    if not user:
        raise AuthenticationError("User not found")
    rt.revoked = True
    return user, issue_tokens(db, user)


def revoke_refresh(db: Session, raw: str) -> None:
    rt = _live_refresh(db, raw)
    rt.revoked = True
    commit(db)

