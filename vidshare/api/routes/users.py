"""
VidShare API - Account routes: registration and session lifecycle.
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, Response, UploadFile
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vidshare.api.deps import get_app_settings, get_current_account
from vidshare.core.config import Settings
from vidshare.core.database import get_db
from vidshare.core.errors import Conflict, InternalError, NotFound, Unauthorized, ValidationError
from vidshare.core.security import (
    REFRESH,
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    verify_password,
)
from vidshare.models.models import Account, MediaKind
from vidshare.schemas.schemas import (
    AccountSchema,
    ApiResponse,
    LoginRequest,
    RefreshTokenRequest,
    SessionTokens,
)
from vidshare.services.media.storage_service import (
    MediaStorage,
    MediaStorageError,
    discard_uploads,
    get_media_storage,
    has_content,
    store_upload,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/users", tags=["Users"])


def _set_session_cookies(response: Response, tokens: SessionTokens, settings: Settings) -> None:
    for name, value in (("accessToken", tokens.access_token), ("refreshToken", tokens.refresh_token)):
        response.set_cookie(name, value, httponly=True, secure=settings.cookie_secure, samesite="lax")


def _clear_session_cookies(response: Response, settings: Settings) -> None:
    for name in ("accessToken", "refreshToken"):
        response.delete_cookie(name, httponly=True, secure=settings.cookie_secure, samesite="lax")


async def _issue_tokens(db: AsyncSession, account: Account, settings: Settings) -> SessionTokens:
    access_token = create_access_token(account, settings)
    refresh_token = create_refresh_token(account, settings)
    account.refresh_token = refresh_token
    await db.commit()
    return SessionTokens(access_token=access_token, refresh_token=refresh_token)


@router.post("/register", response_model=ApiResponse, status_code=201)
async def register(
    full_name: Optional[str] = Form(None, alias="fullName"),
    email: Optional[str] = Form(None),
    username: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    avatar: Optional[UploadFile] = File(None),
    cover_image: Optional[UploadFile] = File(None, alias="coverImage"),
    db: AsyncSession = Depends(get_db),
    storage: MediaStorage = Depends(get_media_storage),
    settings: Settings = Depends(get_app_settings),
):
    """Create an account with an avatar and an optional cover image."""
    if any(not (field or "").strip() for field in (full_name, email, username, password)):
        raise ValidationError("All fields are required")
    if not has_content(avatar):
        raise ValidationError("Avatar is required")

    username = username.strip().lower()
    email = email.strip().lower()
    existing = await db.scalar(
        select(Account.id).where(or_(Account.username == username, Account.email == email)).limit(1)
    )
    if existing is not None:
        raise Conflict("User already exists with this email or username")

    try:
        avatar_upload = await store_upload(storage, avatar, settings.temp_dir, MediaKind.IMAGE)
    except MediaStorageError as e:
        raise InternalError("Failed to upload avatar") from e

    cover_upload = None
    if has_content(cover_image):
        try:
            cover_upload = await store_upload(storage, cover_image, settings.temp_dir, MediaKind.IMAGE)
        except MediaStorageError:
            # Cover image is optional; the account is created without it
            logger.warning("Cover image upload failed for %s", username)

    account = Account(
        full_name=full_name.strip(),
        email=email,
        username=username,
        hashed_password=hash_password(password),
        avatar=avatar_upload.url,
        avatar_public_id=avatar_upload.public_id,
        cover_image=cover_upload.url if cover_upload else None,
        cover_image_public_id=cover_upload.public_id if cover_upload else None,
    )
    db.add(account)
    try:
        await db.commit()
    except Exception as e:
        await db.rollback()
        await discard_uploads(storage, (avatar_upload, cover_upload))
        if isinstance(e, IntegrityError):
            # Lost a race with a concurrent registration for the same name
            raise Conflict("User already exists with this email or username") from e
        raise

    logger.info("Registered account %s", account.username)
    return ApiResponse(
        status_code=201,
        data=AccountSchema.model_validate(account),
        message="User registered successfully",
    )


@router.post("/login", response_model=ApiResponse)
async def login(
    body: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    if not body.email and not body.username:
        raise ValidationError("Email or Username is required")
    if not body.password:
        raise ValidationError("Password is required")

    criteria = []
    if body.email:
        criteria.append(Account.email == body.email.strip().lower())
    if body.username:
        criteria.append(Account.username == body.username.strip().lower())
    account = await db.scalar(select(Account).where(or_(*criteria)).limit(1))
    if account is None:
        raise NotFound("User not found")
    if not verify_password(body.password, account.hashed_password):
        raise Unauthorized("Invalid user credentials")

    tokens = await _issue_tokens(db, account, settings)
    tokens.user = AccountSchema.model_validate(account)
    _set_session_cookies(response, tokens, settings)
    return ApiResponse(status_code=200, data=tokens, message="User logged in successfully")


@router.post("/logout", response_model=ApiResponse)
async def logout(
    response: Response,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    account.refresh_token = None
    await db.commit()
    _clear_session_cookies(response, settings)
    return ApiResponse(status_code=200, data={}, message="User logged out successfully")


@router.post("/refresh-token", response_model=ApiResponse)
async def refresh_access_token(
    request: Request,
    response: Response,
    body: Optional[RefreshTokenRequest] = None,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """Rotate the session: a refresh token matching the stored one buys a new pair."""
    incoming = request.cookies.get("refreshToken") or (body.refresh_token if body else None)
    if not incoming:
        raise Unauthorized("Refresh token is required")

    account_id = decode_token(incoming, REFRESH, settings)
    account = await db.get(Account, account_id) if account_id else None
    if account is None or account.refresh_token != incoming:
        raise Unauthorized("Refresh token is expired or has been used")

    tokens = await _issue_tokens(db, account, settings)
    _set_session_cookies(response, tokens, settings)
    return ApiResponse(status_code=200, data=tokens, message="Access token refreshed")


@router.get("/current-user", response_model=ApiResponse)
async def current_user(account: Account = Depends(get_current_account)):
    return ApiResponse(
        status_code=200,
        data=AccountSchema.model_validate(account),
        message="Current user fetched successfully",
    )
