import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tournament_registration.api.auth.dependencies import Credential, get_current_user
from tournament_registration.api.auth.jwt_handler import JWTHandler, get_jwt_handler
from tournament_registration.api.auth.models import (
    LoginResponse,
    Token,
    TokenValidationRequest,
    TokenValidationResponse,
    UserLogin,
    UserResponse,
    VerifyResponse,
)
from tournament_registration.api.schemas import MessageResponse
from tournament_registration.db import get_db_session
from tournament_registration.errors import AuthenticationError
from tournament_registration.models import User
from tournament_registration.models.base import utcnow

logger = logging.getLogger(__name__)

router = APIRouter()


async def _active_user(db: AsyncSession, user_id: str) -> User:
    user = await db.get(User, user_id)
    if user is None or not user.is_active:
        raise AuthenticationError("Invalid or expired token")
    return user


@router.post("/login", response_model=LoginResponse)
async def login(
    user_data: UserLogin,
    db: AsyncSession = Depends(get_db_session),
    jwt_handler: JWTHandler = Depends(get_jwt_handler),
):
    """Authenticate a delegate or organiser and return a bearer token"""
    username = user_data.username.strip().lower()
    result = await db.execute(select(User).where(User.username == username))
    user = result.scalar_one_or_none()

    if user is None or not user.is_active or not jwt_handler.verify_password(user_data.password, user.password_hash):
        logger.warning(f"Failed login attempt for username '{username}'")
        raise AuthenticationError("Invalid credentials")

    issued = jwt_handler.issue(user)
    user.last_login_at = utcnow()
    await db.flush()

    logger.info(f"User {user.username} ({user.country}) logged in, token {issued.token_id}")
    return LoginResponse(
        access_token=issued.token,
        expires_in=issued.expires_in,
        user=UserResponse.model_validate(user),
    )


@router.get("/me", response_model=UserResponse)
async def get_profile(
    user: Credential = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    """Get current user profile"""
    return await _active_user(db, user.user_id)


@router.get("/verify", response_model=VerifyResponse)
async def verify_token(user: Credential = Depends(get_current_user)):
    return VerifyResponse(user=user.to_claims())


@router.post("/validate", response_model=TokenValidationResponse)
async def validate_token(
    payload: TokenValidationRequest,
    jwt_handler: JWTHandler = Depends(get_jwt_handler),
):
    """Check a token without failing the request"""
    try:
        credential = Credential.from_claims(jwt_handler.verify(payload.token))
    except AuthenticationError as e:
        return TokenValidationResponse(is_valid=False, error=e.message)
    return TokenValidationResponse(is_valid=True, user=credential.to_claims())


@router.post("/refresh", response_model=Token)
async def refresh_token(
    user: Credential = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    jwt_handler: JWTHandler = Depends(get_jwt_handler),
):
    """Issue a fresh token for the current user"""
    account = await _active_user(db, user.user_id)
    issued = jwt_handler.issue(account)
    return Token(access_token=issued.token, expires_in=issued.expires_in)


@router.post("/logout", response_model=MessageResponse)
async def logout(user: Credential = Depends(get_current_user)):
    # Tokens are self-contained; the client discards its copy
    logger.info(f"User {user.username} logged out")
    return MessageResponse(message="Logged out successfully")
