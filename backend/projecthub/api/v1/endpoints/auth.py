"""
Authentication Endpoints

Stands in for the hosted auth client: register stores a profile with a
bcrypt password hash, login checks the password and issues the session
token into the client state, logout clears every state key. The demo
account always lands in demo mode.
"""

import hmac
from typing import Any, Dict, Optional, Tuple

from fastapi import APIRouter, Depends, status

from projecthub.api.deps import get_state_store
from projecthub.core.config import settings
from projecthub.core.logging import get_logger
from projecthub.core.security import password_manager, token_manager
from projecthub.data import SessionMode, create_data_access
from projecthub.middleware.exception import (
    ConflictException,
    UnauthorizedException,
    ValidationException,
)
from projecthub.schemas import LoginRequest, RegisterRequest, UserRecord
from projecthub.session.resolver import demo_user
from projecthub.session.state import StateStore

logger = get_logger(__name__)
router = APIRouter(prefix="/auth")

INVALID_CREDENTIALS = "Invalid email or password"


async def find_credentials(email: str) -> Optional[Tuple[UserRecord, Optional[str]]]:
    data = create_data_access(SessionMode.REAL)
    try:
        return await data.users.get_credentials(email)
    finally:
        await data.close()


async def authenticate(email: str, password: str) -> UserRecord:
    """
    Check a password against the stored hash.

    Unknown emails still pay for one bcrypt comparison, so the response
    time does not reveal which accounts exist.
    """
    credentials = await find_credentials(email)
    user, hashed = credentials if credentials else (None, None)
    if not password_manager.verify(password, hashed) or user is None:
        logger.info("Login rejected", known_account=user is not None)
        raise UnauthorizedException(INVALID_CREDENTIALS)
    return user


@router.post("/register", status_code=status.HTTP_201_CREATED, summary="Create an account")
async def register(payload: RegisterRequest) -> Dict[str, Any]:
    """
    Create an account with role ``user``.

    The client is sent to the login page afterwards; registering does not
    start a session.
    """
    valid, errors = password_manager.validate(payload.password)
    if not valid:
        raise ValidationException(". ".join(errors), details={"errors": errors})

    email = payload.email.lower()
    if email == settings.DEMO_USER_EMAIL.lower():
        raise ConflictException("Email already registered. Please login instead.")

    data = create_data_access(SessionMode.REAL)
    try:
        if await data.users.get_by_email(email) is not None:
            raise ConflictException("Email already registered. Please login instead.")
        user = await data.users.create({
            "email": email,
            "full_name": payload.full_name,
            "password_hash": password_manager.hash(payload.password),
        })
    finally:
        await data.close()

    logger.info("User registered", user_id=user.id)
    return {
        "success": True,
        "user": user.model_dump(mode="json"),
        "redirect": settings.LOGIN_URL,
        "toast": {"level": "success", "message": "Registration successful! Please log in."},
    }


@router.post("/login", summary="Start a session")
async def login(
    payload: LoginRequest,
    state: StateStore = Depends(get_state_store),
) -> Dict[str, Any]:
    """
    Log in with an existing account.

    Returns the mode the session will run in and the page to open next.
    """
    email = payload.email.lower()
    if email == settings.DEMO_USER_EMAIL.lower():
        if not settings.DEMO_MODE_ENABLED:
            raise UnauthorizedException("Demo mode is disabled")
        expected = settings.DEMO_USER_PASSWORD.encode("utf-8")
        if not hmac.compare_digest(payload.password.encode("utf-8"), expected):
            raise UnauthorizedException(INVALID_CREDENTIALS)
        user, mode = demo_user(), SessionMode.DEMO
    else:
        user, mode = await authenticate(email, payload.password), SessionMode.REAL

    token = token_manager.create_token(
        user_id=user.id,
        email=user.email,
        user_metadata={"full_name": user.full_name} if user.full_name else {},
        app_metadata={"role": user.role},
    )
    state.delete(settings.STATE_USER_KEY)
    state.delete(settings.STATE_DEMO_MODE_KEY)
    state.set(settings.STATE_AUTH_TOKEN_KEY, token)

    if mode == SessionMode.DEMO:
        redirect = f"/dashboard?{settings.DEMO_QUERY_PARAM}=true"
    elif user.is_admin:
        redirect = settings.ADMIN_URL
    else:
        redirect = "/dashboard"

    logger.info("User logged in", user_id=user.id, mode=mode.value)
    return {
        "success": True,
        "mode": mode.value,
        "user": user.model_dump(mode="json"),
        "redirect": redirect,
        "toast": {"level": "success", "message": f"Welcome back, {user.full_name or user.email}"},
    }


@router.post("/logout", summary="End the session")
async def logout(state: StateStore = Depends(get_state_store)) -> Dict[str, Any]:
    state.clear()
    logger.info("User logged out")
    return {
        "success": True,
        "redirect": settings.LOGIN_URL,
        "toast": {"level": "info", "message": "You have been logged out"},
    }
