"""
Accounts and session tokens.

Passwords are stored as salted hashes (werkzeug). Sessions are stateless,
signed JWTs carrying the user id and role.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from sqlmodel import Session
from werkzeug.security import check_password_hash, generate_password_hash

from config.settings import Settings
from models.user import Role, User
from repositories import UserRepository
from services.exceptions import (
    DuplicateEmailError,
    InterviewValidationError,
    InvalidCredentialsError,
)

logger = logging.getLogger(__name__)


class TokenError(Exception):
    """Session token could not be decoded; reason says why."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class AuthService:
    def __init__(self, db_session: Session, config: Settings):
        self.db = db_session
        self.config = config
        self.user_repo = UserRepository(db_session)

    def signup(self, name: str, email: str, password: str, role: Optional[str] = None) -> User:
        """
        Register a new account.

        Raises:
            InterviewValidationError: missing field or unknown role
            DuplicateEmailError: email already registered
        """
        name = (name or "").strip()
        email = (email or "").strip().lower()
        if not name or not email or not password:
            raise InterviewValidationError("Name, email and password are required")

        try:
            role = Role(role or Role.CANDIDATE.value)
        except ValueError:
            raise InterviewValidationError(f"Unknown role: {role}")

        if self.user_repo.get_by_email(email):
            raise DuplicateEmailError("User already exists")

        user = User(
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            role=role.value,
        )
        user = self.user_repo.create(user)
        logger.info("Registered %s %s", user.role, user.id)
        return user

    def login(self, email: str, password: str) -> User:
        """Check credentials; the same error is raised for unknown email and wrong password."""
        user = self.user_repo.get_by_email(email or "")
        if not user or not check_password_hash(user.password_hash, password or ""):
            logger.info("Failed login for %s", (email or "").strip().lower())
            raise InvalidCredentialsError("Invalid credentials")
        return user

    def issue_token(self, user: User) -> str:
        now = datetime.now(timezone.utc)
        claims = {
            "sub": user.id,
            "role": user.role,
            "iat": now,
            "exp": now + timedelta(minutes=self.config.JWT_EXPIRES_MINUTES),
        }
        return jwt.encode(claims, self.config.JWT_SECRET_KEY, algorithm=self.config.JWT_ALGORITHM)

    def decode_token(self, token: str) -> Dict[str, Any]:
        """
        Verify a token and return its claims.

        Raises:
            TokenError: with reason "expired" or "malformed"
        """
        try:
            claims = jwt.decode(
                token,
                self.config.JWT_SECRET_KEY,
                algorithms=[self.config.JWT_ALGORITHM],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError:
            raise TokenError("expired")
        except jwt.InvalidTokenError:
            raise TokenError("malformed")
        return claims

    def get_user(self, user_id: str) -> Optional[User]:
        return self.user_repo.get_by_id(user_id)
