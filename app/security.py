"""
TechNotes Backend - Password Hashing
=====================================

What:  One-way, per-record salted password hashing.
How:   passlib's CryptContext with the bcrypt scheme. The cost factor comes
       from settings.password_hash_rounds (10 by default).
Who:   UserService hashes on create and on update when a new password is sent.
       verify_password is the counterpart for whatever login layer sits in
       front of this API.
"""

from passlib.context import CryptContext

from app.config import settings
from app.exceptions import ValidationError

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.password_hash_rounds,
)

# bcrypt silently ignores everything past 72 bytes
MAX_BCRYPT_BYTES = 72


def hash_password(password: str) -> str:
    """Hash a plaintext password; rejects passwords bcrypt would truncate."""
    if len(password.encode("utf-8")) > MAX_BCRYPT_BYTES:
        raise ValidationError(
            message=f"Password too long. Max {MAX_BCRYPT_BYTES} bytes allowed.",
            field="password",
        )
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plaintext password against its hash."""
    if len(plain_password.encode("utf-8")) > MAX_BCRYPT_BYTES:
        return False
    return pwd_context.verify(plain_password, hashed_password)
