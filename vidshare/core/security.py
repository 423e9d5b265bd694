"""
Password hashing and JWT issuance for account sessions.
"""
from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from passlib.context import CryptContext

from vidshare.core.config import Settings

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

ACCESS = "access"
REFRESH = "refresh"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def _encode(subject: uuid.UUID, token_type: str, key: str, lifetime: timedelta, settings: Settings, **claims) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(subject),
        "type": token_type,
        "iat": now,
        "exp": now + lifetime,
        # jti keeps two tokens issued within the same second distinct
        "jti": uuid.uuid4().hex,
        **claims,
    }
    return jwt.encode(payload, key, algorithm=settings.jwt_algorithm)


def create_access_token(account, settings: Settings) -> str:
    return _encode(
        account.id, ACCESS, settings.secret_key,
        timedelta(minutes=settings.access_token_expire_minutes), settings,
        username=account.username, email=account.email,
    )


def create_refresh_token(account, settings: Settings) -> str:
    return _encode(
        account.id, REFRESH, settings.refresh_secret_key,
        timedelta(days=settings.refresh_token_expire_days), settings,
    )


def decode_token(token: str, token_type: str, settings: Settings) -> Optional[uuid.UUID]:
    """Return the token's subject, or None when the token is invalid or expired."""
    key = settings.secret_key if token_type == ACCESS else settings.refresh_secret_key
    try:
        payload = jwt.decode(token, key, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None
    if payload.get("type") != token_type:
        return None
    try:
        return uuid.UUID(payload.get("sub", ""))
    except ValueError:
        return None
