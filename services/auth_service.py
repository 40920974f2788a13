import logging
from datetime import timedelta

from sqlalchemy.orm import Session

from auth import USER_ROLE, ADMIN_ROLE, create_access_token, generate_refresh_token, get_password_hash, verify_password
from config import settings
from errors import (
    AccountLockedError,
    DuplicateEmailError,
    DuplicateUsernameError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
)
from models import RefreshTokenDB, Token, UserCreate, UserDB
from repository import RefreshTokenRepository, UserRepository
from timeutil import utcnow

logger = logging.getLogger(__name__)


class AuthService:
    """Registration, login with lockout, and refresh-token rotation."""

    def __init__(self, db: Session):
        self.db = db
        self.users = UserRepository(db)
        self.refresh_tokens = RefreshTokenRepository(db)

    def register(self, data: UserCreate, role: str = USER_ROLE) -> Token:
        if self.users.exists_by_username(data.username):
            raise DuplicateUsernameError("Username already registered.")
        if self.users.exists_by_email(data.email):
            raise DuplicateEmailError("Email already registered.")

        user = self.users.add(
            UserDB(
                username=data.username,
                email=data.email.lower(),
                full_name=data.full_name,
                hashed_password=get_password_hash(data.password),
                role=role,
            )
        )
        logger.info("User %s registered with role %s", user.username, role)
        return self._issue_tokens(user)

    def login(self, username: str, password: str) -> Token:
        user = self.users.get_by_username(username)
        if user is None:
            logger.warning("Login failed for unknown user %s", username)
            raise InvalidCredentialsError("Invalid credentials.")

        now = utcnow()
        if user.lockout_until is not None and user.lockout_until > now:
            logger.warning("Login refused for locked account %s", username)
            raise AccountLockedError("Account locked out.")

        if not verify_password(password, user.hashed_password):
            user.failed_login_attempts += 1
            if user.failed_login_attempts >= settings.max_failed_logins:
                user.lockout_until = now + timedelta(minutes=settings.lockout_minutes)
                user.failed_login_attempts = 0
                logger.warning("Account %s locked until %s", username, user.lockout_until)
            self.users.update(user)
            raise InvalidCredentialsError("Invalid credentials.")

        user.failed_login_attempts = 0
        user.lockout_until = None
        self.users.update(user, commit=False)
        logger.info("User %s logged in", username)
        return self._issue_tokens(user)

    def refresh(self, token: str) -> Token:
        stored = self.refresh_tokens.get_by_token(token)
        if stored is None or stored.is_revoked or stored.is_expired:
            raise InvalidRefreshTokenError("Invalid refresh token.")

        user = self.users.get_by_id(stored.user_id)
        if user is None:
            raise InvalidRefreshTokenError("User not found.")

        stored.is_revoked = True
        self.refresh_tokens.update(stored, commit=False)
        return self._issue_tokens(user)

    def logout(self, token: str) -> None:
        stored = self.refresh_tokens.get_by_token(token)
        if stored is None or stored.is_revoked:
            return
        stored.is_revoked = True
        self.refresh_tokens.update(stored)
        logger.info("Refresh token of user %s revoked", stored.user_id)

    def ensure_admin(self, username: str, password: str, email: str) -> UserDB:
        """Creates the administrator account if it does not exist yet."""
        user = self.users.get_by_username(username)
        if user is not None:
            if user.role != ADMIN_ROLE:
                user.role = ADMIN_ROLE
                self.users.update(user)
            return user

        user = self.users.add(
            UserDB(
                username=username,
                email=email.lower(),
                full_name="Administrator",
                hashed_password=get_password_hash(password),
                role=ADMIN_ROLE,
            )
        )
        logger.info("Administrator account %s created", username)
        return user

    def _issue_tokens(self, user: UserDB) -> Token:
        access_token, expires_at = create_access_token(user)
        refresh_token = RefreshTokenDB(
            user_id=user.id,
            token=generate_refresh_token(),
            expires_at=utcnow() + timedelta(days=settings.refresh_token_expire_days),
        )
        try:
            self.refresh_tokens.add(refresh_token, commit=False)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return Token(access_token=access_token, refresh_token=refresh_token.token, expires_at=expires_at)
