"""Authentication service for credentials, JWT issuance and rotation."""

import logging
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from src.config import get_settings
from src.errors import (
    BadRequestError,
    InternalServerError,
    NotFoundError,
    UnauthorizedError,
)
from src.models.user import User

logger = logging.getLogger(__name__)

settings = get_settings()

ACCESS_TOKEN_TYPE = "access"  # noqa: S105
REFRESH_TOKEN_TYPE = "refresh"  # noqa: S105

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


@dataclass
class TokenPair:
    """An access token and the refresh token stored for the same user."""

    access_token: str
    refresh_token: str


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------


def _encode(claims: dict, secret: str, lifetime: timedelta) -> str:
    now = datetime.now(UTC)
    to_encode = {
        **claims,
        "jti": uuid.uuid4().hex,
        "iat": now,
        "exp": now + lifetime,
    }
    return jwt.encode(to_encode, secret, algorithm=settings.jwt_algorithm)


def create_access_token(user: User) -> str:
    """Create a short-lived JWT access token carrying the user's identity."""
    return _encode(
        {
            "sub": str(user.id),
            "username": user.username,
            "email": user.email,
            "fullname": user.fullname,
            "type": ACCESS_TOKEN_TYPE,
        },
        settings.access_token_secret,
        timedelta(minutes=settings.access_token_expiration_minutes),
    )


def create_refresh_token(user_id: int) -> str:
    """Create a long-lived JWT refresh token carrying only the user id."""
    return _encode(
        {"sub": str(user_id), "type": REFRESH_TOKEN_TYPE},
        settings.refresh_token_secret,
        timedelta(days=settings.refresh_token_expiration_days),
    )


def _decode(token: str, secret: str, token_type: str) -> dict | None:
    try:
        payload = jwt.decode(token, secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
    if payload.get("type") != token_type or payload.get("sub") is None:
        return None
    return payload


def decode_access_token(token: str) -> dict | None:
    """Decode and validate an access token."""
    return _decode(token, settings.access_token_secret, ACCESS_TOKEN_TYPE)


def decode_refresh_token(token: str) -> dict | None:
    """Decode and validate a refresh token."""
    return _decode(token, settings.refresh_token_secret, REFRESH_TOKEN_TYPE)


def issue_tokens(db: Session, user_id: int) -> TokenPair:
    """Issue a fresh token pair and store the refresh token on the user.

    The new refresh token overwrites whatever was stored before, so at most
    one refresh token per user is ever valid.
    """
    user = get_user_by_id(db, user_id)
    if user is None:
        raise NotFoundError("User not found")

    try:
        access_token = create_access_token(user)
        refresh_token = create_refresh_token(user.id)
        user.refresh_token = refresh_token
        db.commit()
    except (JWTError, SQLAlchemyError) as e:
        db.rollback()
        logger.error(f"Token generation failed for user {user_id}: {e}")
        raise InternalServerError(
            "Something went wrong while generating access and refresh token"
        ) from e

    return TokenPair(access_token=access_token, refresh_token=refresh_token)


def rotate_refresh_token(db: Session, presented_token: str) -> TokenPair:
    """Exchange a refresh token for a new pair.

    Fails with the same error whether the token is forged, expired, belongs
    to a missing user, or was already superseded by a later issue.
    """
    invalid = UnauthorizedError("Invalid refresh token")

    payload = decode_refresh_token(presented_token)
    if payload is None:
        logger.warning("Rejected refresh token: failed verification")
        raise invalid

    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        logger.warning("Rejected refresh token: malformed subject")
        raise invalid from None

    user = get_user_by_id(db, user_id)
    if user is None:
        logger.warning(f"Rejected refresh token: user {user_id} not found")
        raise invalid

    if user.refresh_token is None or presented_token != user.refresh_token:
        logger.warning(f"Rejected refresh token for user {user_id}: not the active token")
        raise invalid

    tokens = issue_tokens(db, user.id)
    logger.info(f"Rotated refresh token for user {user_id}")
    return tokens


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


def get_user_by_id(db: Session, user_id: int) -> User | None:
    """Get a user by primary key."""
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> User | None:
    """Get a user by email."""
    return db.query(User).filter(User.email == email).first()


def get_user_by_username_or_email(
    db: Session, username: str | None = None, email: str | None = None
) -> User | None:
    """Get a user matching the username or the email, whichever is given."""
    conditions = []
    if username:
        conditions.append(User.username == username.strip().lower())
    if email:
        conditions.append(User.email == email.strip())
    if not conditions:
        return None
    return db.query(User).filter(or_(*conditions)).first()


def authenticate_user(
    db: Session, password: str, username: str | None = None, email: str | None = None
) -> User:
    """Authenticate a user by username or email and password."""
    user = get_user_by_username_or_email(db, username=username, email=email)
    if not user:
        raise NotFoundError("User does not exist")
    if not verify_password(password, user.password_hash):
        raise UnauthorizedError("Invalid user credentials")
    return user


def create_user(
    db: Session,
    username: str,
    email: str,
    fullname: str,
    password: str,
    avatar: str,
    cover_image: str | None = None,
) -> User:
    """Create a new user with a hashed password."""
    user = User(
        username=username.lower(),
        email=email,
        fullname=fullname,
        password_hash=get_password_hash(password),
        avatar=avatar,
        cover_image=cover_image or "",
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise BadRequestError("User with email or username already exists") from e
    db.refresh(user)
    return user


def update_user_fields(
    db: Session,
    user: User,
    conflict_message: str = "Account details conflict with another user",
    **fields,
) -> User:
    """Set the given attributes on the user and persist them."""
    for name, value in fields.items():
        setattr(user, name, value)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise BadRequestError(conflict_message) from e
    db.refresh(user)
    return user


def clear_refresh_token(db: Session, user: User) -> None:
    """Remove the stored refresh token so no refresh can succeed."""
    user.refresh_token = None
    db.commit()


def change_password(db: Session, user: User, old_password: str, new_password: str) -> None:
    """Replace the user's password after verifying the old one."""
    if not verify_password(old_password, user.password_hash):
        raise UnauthorizedError("Invalid old password")
    user.password_hash = get_password_hash(new_password)
    db.commit()
