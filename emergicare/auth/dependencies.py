# emergicare/auth/dependencies.py

from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession
import jwt

from emergicare.auth.role_resolver import get_profile
from emergicare.common.config import settings
from emergicare.common.database.database import get_db_session
from emergicare.common.exceptions import NotFound, ProfileRequired
from emergicare.common.utils.global_messages import GlobalMessages
from emergicare.models.models import Profile

bearer_scheme = HTTPBearer()

credentials_exception = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail=GlobalMessages.INVALID_CREDENTIALS,
    headers={"WWW-Authenticate": "Bearer"}
)


def decode_identity(token: str) -> UUID:
    """
    Resolve a bearer token issued by the identity provider to its subject id.

    Raises the 401 credentials exception for any invalid, expired or
    malformed token.
    """
    options = {"require": ["sub", "exp"]}
    kwargs = {"algorithms": [settings.JWT_ALGORITHM], "options": options}
    if settings.JWT_AUDIENCE:
        kwargs["audience"] = settings.JWT_AUDIENCE
    else:
        options["verify_aud"] = False

    try:
        payload = jwt.decode(token, settings.JWT_SECRET, **kwargs)
        return UUID(str(payload["sub"]))
    except jwt.InvalidTokenError:
        raise credentials_exception
    except (KeyError, ValueError) as e:
        raise credentials_exception from e


async def get_current_identity(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> UUID:
    """
    Dependency returning the caller's identity from the Authorization header.
    """
    return decode_identity(credentials.credentials)


async def get_current_profile(
    identity: UUID = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session)
) -> Profile:
    """
    Dependency returning the caller's profile. Callers without a profile
    have no role and get a 403 asking them to finish signup.
    """
    try:
        return await get_profile(db, identity)
    except NotFound:
        raise ProfileRequired(GlobalMessages.PROFILE_REQUIRED)
