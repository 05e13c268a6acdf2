from sqlalchemy import func
from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from datetime import datetime, timezone
import logging

from ..models.user import User
from ..core.security import (
    verify_password, get_password_hash, create_identity_token,
    verify_token, UserGroup, AuthenticationError
)
from ..schemas.user import UserLogin, UserRegister, TokenResponse, UserResponse

logger = logging.getLogger(__name__)

DEMO_USERS = [
    {"username": "alice", "password": "patient123", "name": "Alice Johnson", "group": UserGroup.PATIENTS},
    {"username": "drbob", "password": "doctor123", "name": "Dr. Bob Smith", "group": UserGroup.DOCTORS},
    {"username": "drlee", "password": "doctor123", "name": "Dr. Emily Lee", "group": UserGroup.DOCTORS},
]

def revoked_key(jti: str) -> str:
    return f"revoked_token:{jti}"

class AuthService:
    """Local stand-in for the identity provider: users, groups and bearer tokens."""

    def __init__(self, db: Session, redis_client=None):
        self.db = db
        self.redis = redis_client

    def register_user(self, user_data: UserRegister) -> User:
        """Register a new user."""
        existing_user = self._find_by_username(user_data.username)

        if existing_user:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Username already registered"
            )

        new_user = User(
            username=user_data.username,
            password_hash=get_password_hash(user_data.password),
            name=user_data.name.strip(),
            group=user_data.group,
        )

        self.db.add(new_user)
        self.db.commit()
        self.db.refresh(new_user)

        logger.info(f"Registered user {new_user.username} in group {new_user.group.value}")
        return new_user

    def authenticate_user(self, login_data: UserLogin) -> TokenResponse:
        """Authenticate user and return an access token."""
        user = self._find_by_username(login_data.username)

        if not user or not verify_password(login_data.password, user.password_hash):
            logger.warning(f"Failed login for username {login_data.username}")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid username or password"
            )

        token = create_identity_token(user.id, user.groups)

        return TokenResponse(
            access_token=token.access_token,
            token_type=token.token_type,
            expires_in=token.expires_in,
            user=UserResponse.model_validate(user)
        )

    def logout_user(self, access_token: str) -> bool:
        """Put the token on the deny-list until it would have expired anyway."""
        token_payload = verify_token(access_token)
        if not token_payload or not token_payload.jti:
            raise AuthenticationError("Invalid or expired token")

        now = int(datetime.now(timezone.utc).timestamp())
        ttl = max((token_payload.exp or now) - now, 1)
        self.redis.setex(revoked_key(token_payload.jti), ttl, 1)

        logger.info(f"Logged out identity {token_payload.sub}")
        return True

    def is_revoked(self, jti: str) -> bool:
        return bool(self.redis.exists(revoked_key(jti)))

    def seed_demo_users(self) -> int:
        """Insert the demo roster when no users exist yet."""
        if self.db.query(User).count() > 0:
            return 0

        for demo in DEMO_USERS:
            self.db.add(User(
                username=demo["username"],
                password_hash=get_password_hash(demo["password"]),
                name=demo["name"],
                group=demo["group"],
            ))
        self.db.commit()

        logger.info(f"Seeded {len(DEMO_USERS)} demo users")
        return len(DEMO_USERS)

    def _find_by_username(self, username: str):
        return self.db.query(User).filter(
            func.lower(User.username) == username.lower()
        ).first()
