"""
Account endpoints: register, login, profile and settings.
"""

from fastapi import APIRouter, HTTPException, status
from pydantic import Field

from duelvault.api.deps import CurrentUser, SessionDep
from duelvault.api.schemas import CamelModel, UserResponse
from duelvault.models.enums import SearchLanguage
from duelvault.services import auth as auth_service
from duelvault.services.auth import (
    PASSWORD_MAX_LENGTH,
    PASSWORD_MIN_LENGTH,
    USERNAME_MAX_LENGTH,
    USERNAME_MIN_LENGTH,
    AuthResult,
)

router = APIRouter(prefix="/auth", tags=["auth"])


class RegisterRequest(CamelModel):
    email: str = Field(..., min_length=3, max_length=255)
    username: str = Field(..., min_length=USERNAME_MIN_LENGTH, max_length=USERNAME_MAX_LENGTH)
    password: str = Field(..., min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)


class LoginRequest(CamelModel):
    email: str
    password: str


class SettingsRequest(CamelModel):
    search_language: SearchLanguage | None = None


class AuthResponse(CamelModel):
    access_token: str
    user: UserResponse

    @classmethod
    def from_result(cls, result: AuthResult) -> "AuthResponse":
        return cls(access_token=result.access_token, user=UserResponse.from_db(result.user))


class ProfileResponse(UserResponse):
    collection_items: int
    decks: int


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(request: RegisterRequest, session: SessionDep) -> AuthResponse:
    """Create an account. Returns 409 if the email or username is taken."""
    try:
        result = await auth_service.register(
            session, request.email, request.username, request.password
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return AuthResponse.from_result(result)


@router.post("/login", response_model=AuthResponse)
async def login(request: LoginRequest, session: SessionDep) -> AuthResponse:
    result = await auth_service.login(session, request.email, request.password)
    return AuthResponse.from_result(result)


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(user: CurrentUser, session: SessionDep) -> ProfileResponse:
    """Current user with collection and deck counts."""
    profile = await auth_service.get_profile(session, user.id)
    return ProfileResponse(
        **UserResponse.from_db(profile.user).model_dump(),
        collection_items=profile.collection_items,
        decks=profile.decks,
    )


@router.put("/settings", response_model=UserResponse)
async def update_settings(
    request: SettingsRequest, user: CurrentUser, session: SessionDep
) -> UserResponse:
    updated = await auth_service.update_settings(session, user.id, request.search_language)
    return UserResponse.from_db(updated)
