"""Password hashing for accounts, digests for stored refresh tokens."""
import hashlib
from typing import Optional, Tuple

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def check_password(password: str, password_hash: str) -> Tuple[bool, Optional[str]]:
    """
    Returns (matches, new_hash). new_hash is set when the stored hash was
    made with outdated bcrypt settings and should be replaced.
    """
    if not password or not password_hash:
        return False, None
    return pwd_context.verify_and_update(password, password_hash)


def hash_token(token: str) -> str:
    # refresh tokens are looked up by digest, the raw value is never stored
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
