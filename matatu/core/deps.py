# matatu/core/deps.py
import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from jose import JWTError

from matatu.core.config_env import settings
from matatu.core.errors import AuthenticationError, AuthorizationError
from matatu.core.tokens import decode_token
from matatu.db.session import get_db
from matatu.models.enums import UserRole
from matatu.models.user import User

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token", auto_error=False)

logger = logging.getLogger("matatu.auth")


def _log(msg: str, **kw):
    if settings.DEBUG_AUTH:
        safe_kw = {k: (v if k != "token" else f"{str(v)[:16]}...") for k, v in kw.items()}
        logger.debug("[auth] " + msg + " " + " ".join(f"{k}={v}" for k, v in safe_kw.items()))


def _user_from_token(db: Session, token: str) -> Optional[User]:
    try:
        payload = decode_token(token)
    except JWTError as e:
        _log("JWTError on decode", err=str(e))
        return None

    tok_type = payload.get("type")
    sub_raw = payload.get("sub")
    if tok_type != "access" or not sub_raw:
        _log("bad claims", type=tok_type, sub=sub_raw)
        return None
    try:
        user_id = int(str(sub_raw))
    except ValueError:
        _log("sub is not a user id", sub=sub_raw)
        return None

    user = db.query(User).filter(User.id == user_id, User.is_active.is_(True)).first()
    _log("find by id result", user_id=user_id, found=bool(user))
    return user


def get_current_user(
    db: Session = Depends(get_db),
    token: Optional[str] = Depends(oauth2_scheme),
) -> User:
    _log("incoming token", token=token, len=len(token) if token else 0)
    if not token:
        raise AuthenticationError("Authentication required")
    user = _user_from_token(db, token)
    if not user:
        raise AuthenticationError("Could not validate credentials")
    return user


def require_role(*allowed: UserRole):
    allowed_set = set(allowed or [])

    def dep(user: User = Depends(get_current_user)) -> User:
        if allowed_set and user.role not in allowed_set:
            _log("role denied", have=getattr(user.role, "value", user.role), need=[r.value for r in allowed_set])
            raise AuthorizationError("Insufficient permissions")
        return user

    return dep


def ensure_self_or_admin(user: User, target_user_id: int) -> None:
    if user.role != UserRole.admin and user.id != target_user_id:
        raise AuthorizationError("You can only manage your own account")
