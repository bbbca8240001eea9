"""
Authentication Routes

POST /auth/register - Register new account (student or employer)
POST /auth/login - Login and get JWT token
POST /auth/logout - End the current session
GET /auth/me - Session state: does the caller still need onboarding?
"""

from fastapi import APIRouter, HTTPException, Depends
from sqlalchemy.exc import IntegrityError

from udyoga_mitra.db.database import get_db_session
from udyoga_mitra.core.auth import (
    SessionContext, hash_password, verify_password, start_session, end_session, get_current_session
)
from udyoga_mitra.services.repositories import AccountRepository
from udyoga_mitra.schemas.schemas import (
    RegisterRequest, LoginRequest, TokenResponse, SessionStateResponse, MessageResponse, OnboardingState
)
from udyoga_mitra.utils.logging import get_logger

router = APIRouter(prefix="/auth", tags=["Authentication"])
logger = get_logger(__name__)


@router.post("/register", response_model=MessageResponse, status_code=201)
async def register(request: RegisterRequest):
    """
    Register a new account.

    After registration, login to get access token, then create profile.
    """
    try:
        with get_db_session() as db:
            accounts = AccountRepository(db)
            if accounts.get_by_email(request.email):
                raise HTTPException(status_code=400, detail="Email already registered")

            account_id = accounts.create(
                email=request.email,
                password_hash=hash_password(request.password),
                user_type=request.user_type.value
            )
    except IntegrityError:
        raise HTTPException(status_code=400, detail="Email already registered")

    logger.info("Account registered", account_id=account_id, user_type=request.user_type.value)
    return MessageResponse(message=f"Registered successfully as {request.user_type.value}. Please login.")


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    with get_db_session() as db:
        account = AccountRepository(db).get_by_email(request.email)

    if not account or not verify_password(request.password, account["password_hash"]):
        logger.warning("Login failed", email=request.email)
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if not account["is_active"]:
        raise HTTPException(status_code=403, detail="Account deactivated")

    token, expires_at = start_session(account["id"], account["user_type"])
    logger.info("Session started", account_id=account["id"])

    return TokenResponse(
        access_token=token,
        account_id=account["id"],
        user_type=account["user_type"],
        expires_at=expires_at
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(session: SessionContext = Depends(get_current_session)):
    """End the current session. The token is rejected afterwards."""
    end_session(session)
    logger.info("Session ended", account_id=session.account_id)
    return MessageResponse(message="Signed out")


@router.get("/me", response_model=SessionStateResponse)
async def get_me(session: SessionContext = Depends(get_current_session)):
    """Who is signed in, and whether onboarding is still needed."""
    return SessionStateResponse(
        account_id=session.account_id,
        email=session.email,
        user_type=session.user_type,
        onboarding_state=OnboardingState.complete if session.has_profile else OnboardingState.needs_profile
    )
