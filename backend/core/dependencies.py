from typing import Optional
from uuid import UUID

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.database import get_db
from core.exceptions import AuthenticationException, ModerationException, ReviewException
from models.user import User


def _authenticated_user_id(request: Request) -> Optional[UUID]:
    """User id placed on the request by the upstream authentication middleware."""
    raw_user_id = getattr(request.state, "user_id", None)
    if not raw_user_id:
        return None
    try:
        return UUID(str(raw_user_id))
    except ValueError:
        return None


async def get_optional_user(request: Request, db: AsyncSession = Depends(get_db)) -> Optional[User]:
    """Current user, or None for guests and anonymous visitors"""
    user_id = _authenticated_user_id(request)
    if user_id is None:
        return None
    user = await db.get(User, user_id)
    if not user or not user.active:
        return None
    return user


async def get_current_user(current_user: Optional[User] = Depends(get_optional_user)) -> User:
    """Current authenticated user"""
    if current_user is None:
        raise AuthenticationException()
    return current_user


async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """Require admin role for moderation endpoints"""
    if not current_user.is_admin:
        raise ModerationException()
    return current_user


def get_client_ip(request: Request) -> str:
    """
    Client address used as the voter key for anonymous helpful votes.

    X-Forwarded-For is read only when TRUST_PROXY_HEADERS is set; its first
    entry is the original client as recorded by the proxy.
    """
    if settings.TRUST_PROXY_HEADERS:
        forwarded_for = request.headers.get("x-forwarded-for", "")
        client_ip = forwarded_for.split(",")[0].strip()
        if client_ip:
            return client_ip

    if request.client and request.client.host:
        return request.client.host

    # Unresolvable callers must not share one voter key
    raise ReviewException(
        "Could not determine the client address for this vote",
        status_code=400,
        error_code="CLIENT_ADDRESS_UNKNOWN"
    )
