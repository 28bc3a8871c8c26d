# matatu/core/tokens.py
from datetime import datetime, timedelta, timezone
from typing import Dict, Any, Tuple
import uuid
from jose import jwt

from matatu.core.config_env import settings
from matatu.utils.clock import utcnow

def _to_epoch_seconds(dt_naive_utc: datetime) -> int:
    return int(dt_naive_utc.replace(tzinfo=timezone.utc).timestamp())

def create_access_token(sub: str, role: str, extra: Dict[str, Any] | None = None) -> str:
    """
    JWT access token. iat/exp are epoch seconds, UTC.
    """
    now = utcnow()
    exp = now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload: Dict[str, Any] = {
        "sub": sub,
        "role": role,
        "type": "access",
        "iat": _to_epoch_seconds(now),
        "exp": _to_epoch_seconds(exp),
    }
    if extra:
        payload.update(extra)
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALG)

def create_refresh_token(sub: str) -> Tuple[str, datetime]:
    """
    Returns (refresh_token, expires_at as naive UTC).
    jti keeps two tokens issued in the same second distinct.
    """
    now = utcnow()
    exp = now + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    payload = {
        "sub": sub,
        "type": "refresh",
        "jti": uuid.uuid4().hex,
        "iat": _to_epoch_seconds(now),
        "exp": _to_epoch_seconds(exp),
    }
    token = jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALG)
    return token, exp

def decode_token(token: str) -> Dict[str, Any]:
    """Raises jose.JWTError on bad signature or expiry."""
    return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALG], options={"verify_aud": False})
