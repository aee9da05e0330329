import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
from fastapi import Depends, Request, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from connecto.core.config import settings
from connecto.core.errors import ConfigurationError, Forbidden, NotFound, Unauthorized
from connecto.db.database import get_db
from connecto.models.user import User, UserRole

logger = logging.getLogger(__name__)

COOKIE_NAME = "jwt"

bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=10)).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def _signing_secret() -> str:
    if not settings.jwt_secret:
        logger.error("JWT_SECRET is not defined, cannot issue or verify session tokens")
        raise ConfigurationError("Server configuration error")
    return settings.jwt_secret


def ensure_token_signing() -> None:
    """Fail the current request early when tokens cannot be issued."""
    _signing_secret()


def create_access_token(user_id: int) -> str:
    expires = datetime.now(timezone.utc) + timedelta(days=settings.jwt_expire_days)
    return jwt.encode({"userId": user_id, "exp": expires}, _signing_secret(), algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> int:
    secret = _signing_secret()
    try:
        payload = jwt.decode(token, secret, algorithms=[settings.jwt_algorithm])
    except jwt.PyJWTError as e:
        logger.info("Token verification failed: %s", e)
        raise Unauthorized("Unauthorized - Invalid Token")
    user_id = payload.get("userId")
    if user_id is None:
        raise Unauthorized("Unauthorized - Invalid Token")
    return int(user_id)


def set_session_cookie(response: Response, user_id: int) -> None:
    response.set_cookie(
        key=COOKIE_NAME,
        value=create_access_token(user_id),
        httponly=True,
        max_age=settings.jwt_expire_days * 24 * 60 * 60,
        samesite="strict",
        secure=settings.cookie_secure,
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(COOKIE_NAME)


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the caller from an explicit bearer token, falling back to the session cookie."""
    token = credentials.credentials if credentials is not None else request.cookies.get(COOKIE_NAME)
    if not token:
        raise Unauthorized("Unauthorized - No Token")

    user_id = decode_access_token(token)
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFound("User not found")
    return user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != UserRole.ADMIN:
        raise Forbidden("Access denied. Not an admin.")
    return current_user
