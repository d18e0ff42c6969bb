"""Shared API dependencies for authentication and common functionality."""

from typing import Annotated, TypeVar

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from forge_api.core.security import decode_access_token
from forge_api.db.session import get_db
from forge_api.models import User
from forge_api.services.bans import BanService
from forge_api.services.cache import Cache, get_cache
from forge_api.services.errors import AuthenticationError
from forge_api.services.geolocation import GeolocationService, get_geolocation
from forge_api.services.tracking import RequestContext

ModelT = TypeVar("ModelT")

# HTTP Bearer scheme for JWT authentication
bearer_scheme = HTTPBearer()
optional_bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def _user_from_token(token: str, db: Session) -> User:
    try:
        user_id = decode_access_token(token)
    except ValueError as err:
        raise AuthenticationError("Could not validate credentials") from err

    user = db.get(User, user_id)
    if user is None:
        raise AuthenticationError("User not found")
    if BanService(db).is_banned(user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Your account has been banned",
        )
    return user


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer_scheme)],
    db: SessionDep,
) -> User:
    """Get the current authenticated user from JWT token.

    Args:
        credentials: HTTP Bearer token credentials
        db: Database session

    Returns:
        User object for the authenticated user

    Raises:
        HTTPException: 401 if the token is invalid or the user is gone,
            403 if the account is banned
    """
    return _user_from_token(credentials.credentials, db)


def get_optional_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(optional_bearer_scheme)],
    db: SessionDep,
) -> User | None:
    """Like :func:`get_current_user` but returns None for guests."""
    if credentials is None:
        return None
    return _user_from_token(credentials.credentials, db)


# Type alias for current user dependency
CurrentUserDep = Annotated[User, Depends(get_current_user)]
OptionalUserDep = Annotated[User | None, Depends(get_optional_user)]


def get_staff_user(user: CurrentUserDep) -> User:
    """Require a moderator or administrator."""
    if not user.is_mod_or_admin():
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Moderator access required",
        )
    return user


def get_admin_user(user: CurrentUserDep) -> User:
    """Require an administrator."""
    if not user.is_admin():
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator access required",
        )
    return user


StaffUserDep = Annotated[User, Depends(get_staff_user)]
AdminUserDep = Annotated[User, Depends(get_admin_user)]


GeolocationDep = Annotated[GeolocationService, Depends(get_geolocation)]


def get_request_context(request: Request, geolocation: GeolocationDep) -> RequestContext:
    """Capture request details and the client location for tracking events."""
    languages = [
        part.split(";")[0].strip()
        for part in request.headers.get("accept-language", "").split(",")
        if part.strip()
    ]
    ip = request.client.host if request.client else None
    location = geolocation.locate(ip)
    # Cloudflare still knows the country when the database does not.
    location["country_code"] = location["country_code"] or request.headers.get("cf-ipcountry")
    return RequestContext(
        url=request.url.path,
        referer=request.headers.get("referer"),
        languages=languages,
        useragent=request.headers.get("user-agent"),
        ip=ip,
        **location,
    )


RequestContextDep = Annotated[RequestContext, Depends(get_request_context)]
CacheDep = Annotated[Cache, Depends(get_cache)]


def get_or_404(db: Session, model: type[ModelT], object_id: int) -> ModelT:
    """Load a row by primary key or answer 404."""
    obj = db.get(model, object_id)
    if obj is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{model.__name__} not found",
        )
    return obj
