"""Pydantic schemas for API requests and responses."""

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
from src.schemas.channel import ChannelProfileResponse, VideoOwner, WatchHistoryVideo
from src.schemas.common import ApiResponse

__all__ = [
    "ApiResponse",
    "UserRegister",
    "UserLogin",
    "RefreshTokenRequest",
    "ChangePasswordRequest",
    "UpdateAccountRequest",
    "UserResponse",
    "TokenPairResponse",
    "LoginResponse",
    "ChannelProfileResponse",
    "VideoOwner",
    "WatchHistoryVideo",
]
