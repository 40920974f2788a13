import base64
import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional

import bcrypt
import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from config import settings
from database import get_db
from errors import ForbiddenError
from models import UserDB
from timeutil import utcnow

logger = logging.getLogger(__name__)

ADMIN_ROLE = "Admin"
USER_ROLE = "User"

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/token")


def get_password_hash(password: str) -> str:
    # bcrypt only looks at the first 72 bytes
    return bcrypt.hashpw(password.encode("utf-8")[:72], bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8")[:72], hashed_password.encode("utf-8"))
    except ValueError:
        return False


def create_access_token(user: UserDB, expires_delta: Optional[timedelta] = None) -> tuple[str, datetime]:
    """Signs an access token for the user.

    Returns the encoded token together with its expiry (naive UTC).
    """
    expires_at = utcnow() + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    payload = {
        "sub": str(user.id),
        "unique_name": user.username,
        "email": user.email or "",
        "full_name": user.full_name or "",
        "roles": [user.role],
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "exp": int((expires_at - datetime(1970, 1, 1)).total_seconds()),
    }
    token = jwt.encode(payload, settings.jwt_key, algorithm=settings.jwt_algorithm)
    return token, expires_at


def verify_token(token: str) -> Optional[dict]:
    try:
        return jwt.decode(
            token,
            settings.jwt_key,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
        )
    except jwt.PyJWTError as e:
        logger.debug("Rejected access token: %s", e)
        return None


def generate_refresh_token() -> str:
    return base64.b64encode(secrets.token_bytes(64)).decode("ascii")


def get_current_user(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> UserDB:
    payload = verify_token(token)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    user = db.query(UserDB).filter(UserDB.id == int(payload["sub"])).first()
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def require_admin(current_user: UserDB = Depends(get_current_user)) -> UserDB:
    if current_user.role != ADMIN_ROLE:
        logger.warning("User %s denied admin operation", current_user.username)
        raise ForbiddenError("Administrator role required.")
    return current_user
