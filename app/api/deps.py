from fastapi import Depends, HTTPException, status, Request
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import List

from ..core.config import settings
from ..core.database import get_db, get_redis
from ..core.exceptions import AuthorizationError
from ..core.security import (
    security, verify_token, AuthenticationError,
    Identity, UserGroup, TokenPayload
)
from ..models.user import User
from ..services.auth_service import revoked_key

async def get_current_user_token(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    redis_client = Depends(get_redis)
) -> TokenPayload:
    """Extract and verify JWT token from Authorization header."""
    token = credentials.credentials

    # Verify token
    token_payload = verify_token(token)
    if not token_payload:
        raise AuthenticationError("Invalid or expired token")

    # Check if token is access token
    if token_payload.token_type != "access" or not token_payload.sub:
        raise AuthenticationError("Invalid token type")

    if token_payload.jti and redis_client.exists(revoked_key(token_payload.jti)):
        raise AuthenticationError("Token has been revoked")

    return token_payload

async def get_current_identity(
    token_payload: TokenPayload = Depends(get_current_user_token)
) -> Identity:
    """The caller identity passed into every domain operation."""
    return token_payload.to_identity()

async def get_current_user(
    token_payload: TokenPayload = Depends(get_current_user_token),
    db: Session = Depends(get_db)
) -> User:
    """Get current authenticated user from database."""
    user = db.query(User).filter(User.id == token_payload.sub).first()
    if not user:
        raise AuthenticationError("User not found")

    return user

# Group-based access control dependencies
def require_group(allowed_groups: List[UserGroup]):
    """Create a dependency that requires membership in one of the groups."""
    async def group_checker(
        identity: Identity = Depends(get_current_identity)
    ) -> Identity:
        if not any(identity.in_group(group) for group in allowed_groups):
            raise AuthorizationError(
                f"Access denied. Required groups: {[group.value for group in allowed_groups]}"
            )
        return identity

    return group_checker

# Rate limiting dependency
async def rate_limit_check(
    request: Request,
    redis_client = Depends(get_redis)
) -> None:
    """Basic rate limiting for login and registration."""
    client_ip = request.client.host if request.client else "unknown"
    key = f"rate_limit:{client_ip}"

    current_requests = redis_client.get(key)
    if current_requests is None:
        redis_client.setex(key, settings.LOGIN_RATE_WINDOW_SECONDS, 1)
    else:
        if int(current_requests) >= settings.LOGIN_RATE_LIMIT:
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Too many requests. Please try again later."
            )
        redis_client.incr(key)
