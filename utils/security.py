"""
security helpers:
- Argon2 password hashing via argon2-cffi
- JWT creation/verification via PyJWT
- JTI generation for token identifiers
"""
from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Dict, Any, Optional

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import VerifyMismatchError, InvalidHashError

ph = PasswordHasher()


class TokenError(Exception):
    """Raised when a JWT fails signature, expiry or type checks."""


def hash_password(password: str) -> str:
    """Hash a plaintext password using Argon2
    """
    return ph.hash(password)

def verify_password(password: str, password_hash: str) -> bool:
    """ Verify a plaintext password using argon2
    """
    try:
        return ph.verify(password_hash, password)
    except (VerifyMismatchError, InvalidHashError):
        return False

def generate_jti() -> str:
    """Generate a unique JTI (JWT ID).
    """
    return str(uuid.uuid4())

def _now() -> datetime:
    return datetime.now(timezone.utc)

def create_token(
    subject: str,
    token_type: str,
    secret: str,
    expires: timedelta,
    algorithm: str = "HS256",
    issuer: Optional[str] = None,
    claims: Optional[Dict[str, Any]] = None,
) -> str:
    """
    Sign a JWT for `subject`. Every token gets a fresh jti so two tokens
    minted in the same second for the same subject never collide.
    """
    now = _now()
    payload: Dict[str, Any] = dict(claims or {})
    payload.update(
        {
            "sub": str(subject),
            "iat": int(now.timestamp()),
            "exp": int((now + expires).timestamp()),
            "type": token_type,
            "jti": generate_jti(),
        }
    )
    if issuer:
        payload["iss"] = issuer
    return jwt.encode(payload, secret, algorithm=algorithm)

def decode_token(
    token: str,
    secret: str,
    expected_type: str,
    algorithm: str = "HS256",
    issuer: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Decode and validate a JWT. Raises TokenError on invalid signature/expired jwt,
    when the "type" claim is not `expected_type`, or, when `issuer` is given,
    when the "iss" claim is missing or different.
    """
    options = {"require": ["iss"]} if issuer else None
    try:
        decoded = jwt.decode(token, secret, algorithms=[algorithm], issuer=issuer, options=options)
    except jwt.ExpiredSignatureError:
        raise TokenError("Token expired")
    except jwt.InvalidTokenError as exc:
        raise TokenError(f"Invalid token: {exc}")

    if decoded.get("type") != expected_type:
        raise TokenError("Wrong token type")
    if not decoded.get("sub"):
        raise TokenError("Token has no subject")
    return decoded
