"""User account API endpoints."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, File, Form, Request, Response, UploadFile, status
from fastapi.encoders import jsonable_encoder
from pydantic import ValidationError
from sqlalchemy.orm import Session

from src.api.dependencies import ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE, get_current_user
from src.config import get_settings
from src.database import get_db
from src.errors import BadRequestError, InternalServerError, UnauthorizedError
from src.models.user import User
from src.schemas.auth import (
    ChangePasswordRequest,
    LoginResponse,
    RefreshTokenRequest,
    TokenPairResponse,
    UpdateAccountRequest,
    UserLogin,
    UserRegister,
    UserResponse,
)
from src.schemas.channel import ChannelProfileResponse, WatchHistoryVideo
from src.schemas.common import ApiResponse
from src.services import auth as auth_service
from src.services.auth import TokenPair
from src.services.channel import get_channel_profile, get_watch_history
from src.services.media import MediaStorageService, get_media_service

logger = logging.getLogger(__name__)

settings = get_settings()

router = APIRouter(prefix="/api/v1/users", tags=["users"])


def _set_auth_cookies(response: Response, tokens: TokenPair) -> None:
    """Set both tokens as HttpOnly cookies."""
    for key, value in (
        (ACCESS_TOKEN_COOKIE, tokens.access_token),
        (REFRESH_TOKEN_COOKIE, tokens.refresh_token),
    ):
        response.set_cookie(
            key=key,
            value=value,
            httponly=True,
            secure=settings.cookie_secure,
            samesite=settings.cookie_samesite,
        )


def _clear_auth_cookies(response: Response) -> None:
    for key in (ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE):
        response.delete_cookie(
            key=key,
            httponly=True,
            secure=settings.cookie_secure,
            samesite=settings.cookie_samesite,
        )


def _validation_errors(exc: ValidationError) -> list[Any]:
    return jsonable_encoder(exc.errors(include_url=False, include_context=False))


# -------------------------------
# Session
# -------------------------------


@router.post(
    "/register", response_model=ApiResponse[UserResponse], status_code=status.HTTP_201_CREATED
)
async def register(
    db: Annotated[Session, Depends(get_db)],
    media: Annotated[MediaStorageService, Depends(get_media_service)],
    fullname: Annotated[str | None, Form()] = None,
    email: Annotated[str | None, Form()] = None,
    username: Annotated[str | None, Form()] = None,
    password: Annotated[str | None, Form()] = None,
    avatar: Annotated[UploadFile | None, File()] = None,
    cover_image: Annotated[UploadFile | None, File(alias="coverImage")] = None,
):
    """Register a new user with an avatar and an optional cover image."""
    fields = {"fullname": fullname, "email": email, "username": username, "password": password}
    if any(value is None or not value.strip() for value in fields.values()):
        raise BadRequestError("All fields are required")

    try:
        user_data = UserRegister(**fields)
    except ValidationError as e:
        raise BadRequestError("Invalid registration details", _validation_errors(e)) from e

    existing_user = auth_service.get_user_by_username_or_email(
        db, username=user_data.username, email=user_data.email
    )
    if existing_user:
        raise BadRequestError("User with email or username already exists")

    if avatar is None or not avatar.filename:
        raise BadRequestError("Avatar file is required")

    avatar_upload = await media.upload_file(avatar)
    if avatar_upload is None:
        raise InternalServerError("Error while uploading avatar")

    cover_upload = await media.upload_file(cover_image)
    if cover_image is not None and cover_image.filename and cover_upload is None:
        logger.warning("Cover image upload failed during registration, continuing without it")

    user = auth_service.create_user(
        db,
        username=user_data.username,
        email=user_data.email,
        fullname=user_data.fullname,
        password=user_data.password,
        avatar=avatar_upload.url,
        cover_image=cover_upload.url if cover_upload else "",
    )
    logger.info(f"Registered user {user.id}")

    return ApiResponse(
        status_code=status.HTTP_201_CREATED,
        data=UserResponse.model_validate(user),
        message="User registered successfully",
    )


@router.post("/login", response_model=ApiResponse[LoginResponse])
async def login(
    credentials: UserLogin,
    response: Response,
    db: Annotated[Session, Depends(get_db)],
):
    """Login with username or email and password."""
    user = auth_service.authenticate_user(
        db, credentials.password, username=credentials.username, email=credentials.email
    )
    tokens = auth_service.issue_tokens(db, user.id)
    _set_auth_cookies(response, tokens)
    logger.info(f"User {user.id} logged in")

    return ApiResponse(
        status_code=status.HTTP_200_OK,
        data=LoginResponse(
            user=UserResponse.model_validate(user),
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
        ),
        message="User logged in successfully",
    )


@router.post("/logout", response_model=ApiResponse[dict])
async def logout(
    response: Response,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Logout: forget the stored refresh token and clear both cookies."""
    auth_service.clear_refresh_token(db, current_user)
    _clear_auth_cookies(response)
    logger.info(f"User {current_user.id} logged out")
    return ApiResponse(status_code=status.HTTP_200_OK, data={}, message="User logged out")


@router.post("/refresh-token", response_model=ApiResponse[TokenPairResponse])
async def refresh_access_token(
    request: Request,
    response: Response,
    db: Annotated[Session, Depends(get_db)],
    body: Annotated[RefreshTokenRequest | None, Body()] = None,
):
    """Exchange a refresh token (cookie or body) for a new token pair."""
    incoming = request.cookies.get(REFRESH_TOKEN_COOKIE) or (body.refresh_token if body else None)
    if not incoming:
        raise UnauthorizedError("Unauthorized request")

    tokens = auth_service.rotate_refresh_token(db, incoming)
    _set_auth_cookies(response, tokens)

    return ApiResponse(
        status_code=status.HTTP_200_OK,
        data=TokenPairResponse(
            access_token=tokens.access_token, refresh_token=tokens.refresh_token
        ),
        message="Access token refreshed",
    )


# -------------------------------
# Profile
# -------------------------------


@router.post("/change-password", response_model=ApiResponse[dict])
async def change_password(
    password_data: ChangePasswordRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Change the current user's password."""
    auth_service.change_password(
        db, current_user, password_data.old_password, password_data.new_password
    )
    logger.info(f"User {current_user.id} changed password")
    return ApiResponse(
        status_code=status.HTTP_200_OK, data={}, message="Password changed successfully"
    )


@router.get("/current-user", response_model=ApiResponse[UserResponse])
async def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Get current user information."""
    return ApiResponse(
        status_code=status.HTTP_200_OK,
        data=UserResponse.model_validate(current_user),
        message="Current user fetched successfully",
    )


@router.patch("/update-account", response_model=ApiResponse[UserResponse])
async def update_account(
    account_data: UpdateAccountRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Update the current user's full name and email."""
    owner = auth_service.get_user_by_email(db, account_data.email)
    if owner is not None and owner.id != current_user.id:
        raise BadRequestError("Email is already in use")

    user = auth_service.update_user_fields(
        db,
        current_user,
        conflict_message="Email is already in use",
        fullname=account_data.fullname,
        email=account_data.email,
    )
    return ApiResponse(
        status_code=status.HTTP_200_OK,
        data=UserResponse.model_validate(user),
        message="Account details updated successfully",
    )


async def _replace_media(
    db: Session,
    media: MediaStorageService,
    user: User,
    upload: UploadFile | None,
    field: str,
    label: str,
) -> User:
    if upload is None or not upload.filename:
        raise BadRequestError(f"{label} file is missing")

    result = await media.upload_file(upload)
    if result is None or not result.url:
        raise InternalServerError(f"Error while uploading {label.lower()}")

    return auth_service.update_user_fields(db, user, **{field: result.url})


@router.patch("/avatar", response_model=ApiResponse[UserResponse])
async def update_avatar(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    media: Annotated[MediaStorageService, Depends(get_media_service)],
    avatar: Annotated[UploadFile | None, File()] = None,
):
    """Replace the current user's avatar."""
    user = await _replace_media(db, media, current_user, avatar, "avatar", "Avatar")
    return ApiResponse(
        status_code=status.HTTP_200_OK,
        data=UserResponse.model_validate(user),
        message="Avatar updated successfully",
    )


@router.patch("/cover-image", response_model=ApiResponse[UserResponse])
async def update_cover_image(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
    media: Annotated[MediaStorageService, Depends(get_media_service)],
    cover_image: Annotated[UploadFile | None, File(alias="coverImage")] = None,
):
    """Replace the current user's cover image."""
    user = await _replace_media(db, media, current_user, cover_image, "cover_image", "Cover image")
    return ApiResponse(
        status_code=status.HTTP_200_OK,
        data=UserResponse.model_validate(user),
        message="Cover image updated successfully",
    )


@router.get("/c/{username}", response_model=ApiResponse[ChannelProfileResponse])
async def channel_profile(
    username: str,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get a channel's profile with subscriber counts."""
    profile = get_channel_profile(db, username, current_user.id)
    return ApiResponse(
        status_code=status.HTTP_200_OK, data=profile, message="Channel fetched successfully"
    )


@router.get("/history", response_model=ApiResponse[list[WatchHistoryVideo]])
async def watch_history(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Get the current user's watch history."""
    history = get_watch_history(db, current_user.id)
    return ApiResponse(
        status_code=status.HTTP_200_OK,
        data=history,
        message="Watch history fetched successfully",
    )
