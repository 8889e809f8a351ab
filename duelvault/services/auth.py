"""
Accounts and access tokens.

Passwords are stored as werkzeug salted hashes. Access tokens are
itsdangerous timed signatures over the user id; they carry no server-side
state and expire after ``settings.token_max_age_seconds``.

The rest of the service layer only ever sees a plain ``user_id``; this
module is the one place that knows how a token maps to it.
"""

import logging
from dataclasses import dataclass

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from werkzeug.security import check_password_hash, generate_password_hash

from duelvault.config import settings
from duelvault.db.operations import (
    count_collection_items,
    count_user_decks,
    create_user,
    get_user,
    get_user_by_email,
    get_user_by_username,
)
from duelvault.models.db import UserDB
from duelvault.models.enums import SearchLanguage
from duelvault.models.failure import ConflictError, NotFoundError, UnauthorizedError

logger = logging.getLogger(__name__)

TOKEN_SALT = "duelvault-access-token"

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 20
PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_LENGTH = 100


@dataclass
class AuthResult:
    """A signed-in user and their access token."""

    access_token: str
    user: UserDB


@dataclass
class Profile:
    user: UserDB
    collection_items: int
    decks: int


def _serializer(secret_key: str | None = None) -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(secret_key or settings.secret_key, salt=TOKEN_SALT)


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def issue_token(user_id: int, secret_key: str | None = None) -> str:
    """Sign a user id into an access token."""
    return _serializer(secret_key).dumps({"uid": user_id})


def verify_token(token: str, max_age: int | None = None, secret_key: str | None = None) -> int:
    """
    Resolve an access token to a user id.

    Raises:
        UnauthorizedError: If the token is expired, tampered with or malformed
    """
    if max_age is None:
        max_age = settings.token_max_age_seconds
    try:
        payload = _serializer(secret_key).loads(token, max_age=max_age)
    except SignatureExpired as e:
        raise UnauthorizedError("Access token has expired") from e
    except BadSignature as e:
        raise UnauthorizedError("Invalid access token") from e

    user_id = payload.get("uid") if isinstance(payload, dict) else None
    if not isinstance(user_id, int):
        raise UnauthorizedError("Invalid access token")
    return user_id


def validate_credentials(username: str, password: str) -> None:
    """
    Check username and password length.

    Raises:
        ValueError: If either is outside its allowed length
    """
    if not USERNAME_MIN_LENGTH <= len(username) <= USERNAME_MAX_LENGTH:
        raise ValueError(
            f"Username must be {USERNAME_MIN_LENGTH}-{USERNAME_MAX_LENGTH} characters"
        )
    if not PASSWORD_MIN_LENGTH <= len(password) <= PASSWORD_MAX_LENGTH:
        raise ValueError(
            f"Password must be {PASSWORD_MIN_LENGTH}-{PASSWORD_MAX_LENGTH} characters"
        )


async def register(session: AsyncSession, email: str, username: str, password: str) -> AuthResult:
    """
    Create an account and sign it in.

    Raises:
        ValueError: If username or password length is invalid
        ConflictError: If the email or username is taken
    """
    email = _normalize_email(email)
    username = username.strip()
    validate_credentials(username, password)

    if await get_user_by_email(session, email) is not None:
        raise ConflictError("Email is already registered", detail=email)
    if await get_user_by_username(session, username) is not None:
        raise ConflictError("Username is already taken", detail=username)

    try:
        user = await create_user(session, email, username, generate_password_hash(password))
    except IntegrityError as e:
        # Lost a race with a concurrent registration
        raise ConflictError("Email or username is already taken") from e

    await session.refresh(user)
    logger.info("Registered user %s (%s)", user.id, username)
    return AuthResult(access_token=issue_token(user.id), user=user)


async def login(session: AsyncSession, email: str, password: str) -> AuthResult:
    """
    Sign in with email and password.

    Raises:
        UnauthorizedError: If the email is unknown or the password is wrong
    """
    user = await get_user_by_email(session, _normalize_email(email))
    if user is None or not check_password_hash(user.password_hash, password):
        raise UnauthorizedError()
    return AuthResult(access_token=issue_token(user.id), user=user)


async def require_user(session: AsyncSession, user_id: int) -> UserDB:
    """
    Load the user a token refers to.

    Raises:
        UnauthorizedError: If the account no longer exists
    """
    user = await get_user(session, user_id)
    if user is None:
        raise UnauthorizedError("User no longer exists")
    return user


async def get_profile(session: AsyncSession, user_id: int) -> Profile:
    user = await get_user(session, user_id)
    if user is None:
        raise NotFoundError("User", user_id)
    return Profile(
        user=user,
        collection_items=await count_collection_items(session, user_id),
        decks=await count_user_decks(session, user_id),
    )


async def update_settings(
    session: AsyncSession, user_id: int, search_language: SearchLanguage | None = None
) -> UserDB:
    """Change a user's preferences. Passing None leaves a setting unchanged."""
    user = await get_user(session, user_id)
    if user is None:
        raise NotFoundError("User", user_id)
    if search_language is not None:
        user.search_language = search_language
    await session.flush()
    return user
