"""
Session Tokens and Passwords

Signs and verifies the session token held by the auth client. The claim
layout mirrors what the hosted auth provider issues: ``sub``, ``email``
plus free-form ``user_metadata`` and ``app_metadata`` mappings.

Passwords are hashed with bcrypt; only the hash is ever stored.
"""

import secrets
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

import bcrypt
import jwt
from jwt.exceptions import ExpiredSignatureError, PyJWTError

from projecthub.core.config import settings
from projecthub.core.logging import get_logger

logger = get_logger(__name__)


@dataclass
class SessionClaims:
    """Decoded session token."""
    sub: str
    email: str
    exp: datetime
    jti: str = ""
    user_metadata: Dict[str, Any] = field(default_factory=dict)
    app_metadata: Dict[str, Any] = field(default_factory=dict)


class SessionTokenError(Exception):
    """Session token could not be used."""


class TokenExpiredError(SessionTokenError):
    """Token has expired."""


class InvalidTokenError(SessionTokenError):
    """Token is malformed or its signature does not verify."""


class SessionTokenManager:
    """
    Session token manager.

    Handles creation and validation of the bearer token a logged-in
    client presents on every page load.
    """

    def __init__(
        self,
        secret_key: Optional[str] = None,
        algorithm: Optional[str] = None,
        expire_minutes: Optional[int] = None,
    ) -> None:
        self.secret_key = secret_key or settings.SECRET_KEY
        self.algorithm = algorithm or settings.JWT_ALGORITHM
        self.expire = timedelta(
            minutes=expire_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES
        )

    def create_token(
        self,
        user_id: str,
        email: str,
        user_metadata: Optional[Dict[str, Any]] = None,
        app_metadata: Optional[Dict[str, Any]] = None,
        expires_delta: Optional[timedelta] = None,
    ) -> str:
        """
        Create a session token.

        Args:
            user_id: Profile id (subject)
            email: Account email
            user_metadata: Editable profile metadata (``full_name``, ...)
            app_metadata: Server-controlled metadata (``role``)
            expires_delta: Override of the configured lifetime

        Returns:
            Encoded JWT
        """
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "email": email,
            "jti": str(uuid.uuid4()),
            "iat": now,
            "exp": now + (expires_delta if expires_delta is not None else self.expire),
            "user_metadata": user_metadata or {},
            "app_metadata": app_metadata or {},
        }
        token = jwt.encode(payload, self.secret_key, algorithm=self.algorithm)
        logger.debug("Created session token", user_id=user_id, jti=payload["jti"])
        return token

    def decode_token(self, token: str) -> SessionClaims:
        """
        Decode and validate a session token.

        Raises:
            TokenExpiredError: If token has expired
            InvalidTokenError: If token is invalid
        """
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except ExpiredSignatureError as e:
            logger.info("Session token has expired")
            raise TokenExpiredError("Token has expired") from e
        except PyJWTError as e:
            logger.warning("Invalid session token", error=str(e))
            raise InvalidTokenError(f"Invalid token: {e}") from e

        if not payload.get("sub") or not payload.get("email"):
            raise InvalidTokenError("Token is missing subject or email")

        return SessionClaims(
            sub=str(payload["sub"]),
            email=str(payload["email"]),
            exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            jti=payload.get("jti", ""),
            user_metadata=payload.get("user_metadata") or {},
            app_metadata=payload.get("app_metadata") or {},
        )


token_manager = SessionTokenManager()


class PasswordManager:
    """
    Password hashing and verification manager.

    Uses bcrypt with a configurable cost factor and an optional pepper.
    """

    MIN_LENGTH = 8
    MAX_LENGTH = 72  # bcrypt ignores anything past 72 bytes

    def __init__(self, rounds: Optional[int] = None, pepper: Optional[str] = None) -> None:
        self.rounds = rounds or settings.PASSWORD_HASH_ROUNDS
        self.pepper = pepper if pepper is not None else (settings.PASSWORD_PEPPER or "")
        self._dummy_hash: Optional[str] = None

    def _apply_pepper(self, password: str) -> bytes:
        return f"{password}{self.pepper}".encode("utf-8")

    def hash(self, password: str) -> str:
        """Hash a password using bcrypt."""
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(self._apply_pepper(password), salt).decode("utf-8")

    def verify(self, password: str, hashed: Optional[str]) -> bool:
        """
        Verify a password against a stored hash.

        A missing hash (unknown account, or a profile created before
        passwords were stored) is checked against a throwaway hash so the
        response takes as long as a real mismatch.
        """
        candidate = hashed or self._throwaway_hash()
        try:
            matched = bcrypt.checkpw(self._apply_pepper(password), candidate.encode("utf-8"))
        except ValueError as e:
            logger.warning("Password verification failed", error=str(e))
            return False
        return matched and bool(hashed)

    def validate(self, password: str) -> Tuple[bool, List[str]]:
        """
        Validate a new password.

        Returns:
            Tuple of (is_valid, list of error messages)
        """
        errors = []
        if len(password) < self.MIN_LENGTH:
            errors.append(f"Password must be at least {self.MIN_LENGTH} characters long")
        if len(password.encode("utf-8")) > self.MAX_LENGTH:
            errors.append(f"Password must not exceed {self.MAX_LENGTH} bytes")
        if not any(c.islower() for c in password):
            errors.append("Password must contain lowercase letters")
        if not any(c.isupper() for c in password):
            errors.append("Password must contain uppercase letters")
        if not any(c.isdigit() for c in password):
            errors.append("Password must contain at least one number")
        return len(errors) == 0, errors

    def _throwaway_hash(self) -> str:
        if self._dummy_hash is None:
            self._dummy_hash = self.hash(secrets.token_urlsafe(16))
        return self._dummy_hash


password_manager = PasswordManager()
