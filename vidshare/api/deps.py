"""
Shared FastAPI dependencies: settings and the authenticated actor.
"""
from __future__ import annotations

from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.core.config import Settings, get_settings
from vidshare.core.database import get_db
from vidshare.core.errors import Unauthorized
from vidshare.core.security import ACCESS, decode_token
from vidshare.models.models import Account


def get_app_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or get_settings()


def _bearer_token(request: Request) -> Optional[str]:
    header = request.headers.get("Authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip() or None
    return request.cookies.get("accessToken")


async def get_optional_account(
    request: Request,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> Optional[Account]:
    token = _bearer_token(request)
    if not token:
        return None
    account_id = decode_token(token, ACCESS, settings)
    if account_id is None:
        raise Unauthorized("Invalid or expired access token")
    account = await db.get(Account, account_id)
    if account is None:
        raise Unauthorized("Invalid access token")
    return account


async def get_current_account(account: Optional[Account] = Depends(get_optional_account)) -> Account:
    if account is None:
        raise Unauthorized("Unauthorized request")
    return account
