"""
Request dependencies shared by the routers.
"""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from duelvault.db.database import get_session
from duelvault.models.db import UserDB
from duelvault.models.failure import UnauthorizedError
from duelvault.services.auth import require_user, verify_token

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> UserDB:
    """
    Resolve the Bearer token to a user.

    Raises UnauthorizedError (401) for a missing, invalid or expired token.
    """
    if credentials is None:
        raise UnauthorizedError("Missing access token")
    user_id = verify_token(credentials.credentials)
    return await require_user(session, user_id)


SessionDep = Annotated[AsyncSession, Depends(get_session)]
CurrentUser = Annotated[UserDB, Depends(get_current_user)]
