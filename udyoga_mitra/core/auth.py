"""
Authentication Utility - passwords, tokens and the session context.

Provides:
- Password hashing with bcrypt
- JWT access tokens bound to a server-side session row
- SessionContext, the explicit "who is calling" object handed to services
- FastAPI dependencies for protected routes
"""

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Tuple
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from udyoga_mitra.core.config import get_settings
from udyoga_mitra.db.database import get_db_session
from udyoga_mitra.services.repositories import AccountRepository, ProfileRepository, utcnow

settings = get_settings()

# Password hashing
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.password_hash_rounds
)

# Bearer token extractor
bearer_scheme = HTTPBearer()


@dataclass
class SessionContext:
    """The authenticated caller of one API request."""
    account_id: int
    email: str
    user_type: str
    session_id: str
    has_profile: bool

    @property
    def is_student(self) -> bool:
        return self.user_type == "student"

    @property
    def is_employer(self) -> bool:
        return self.user_type == "employer"


def hash_password(password: str) -> str:
    """Hash password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> Tuple[str, datetime]:
    """Create JWT access token. Returns the token and its expiry."""
    to_encode = data.copy()
    expire = utcnow() + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm), expire


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def start_session(account_id: int, user_type: str) -> Tuple[str, datetime]:
    """Create a session row and the token that refers to it."""
    session_id = secrets.token_hex(16)
    token, expires_at = create_access_token(
        data={"sub": str(account_id), "sid": session_id, "user_type": user_type}
    )
    with get_db_session() as db:
        AccountRepository(db).create_session(session_id, account_id, expires_at)
    return token, expires_at


def end_session(session: SessionContext) -> bool:
    """Delete the session row; its token stops working immediately."""
    with get_db_session() as db:
        return AccountRepository(db).delete_session(session.session_id)


async def get_current_session(credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme)) -> SessionContext:
    """
    FastAPI dependency - Get the caller's session context.

    Usage:
        @router.get("/protected")
        async def route(session: SessionContext = Depends(get_current_session)):
            ...
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = decode_token(credentials.credentials)
    if not payload:
        raise credentials_exception

    account_id = payload.get("sub")
    session_id = payload.get("sid")
    if not account_id or not session_id:
        raise credentials_exception

    with get_db_session() as db:
        row = AccountRepository(db).get_live_session(session_id, int(account_id))
        has_profile = row is not None and ProfileRepository(db).exists(row["account_id"])

    if not row:
        raise credentials_exception

    if not row["is_active"]:
        raise HTTPException(status_code=403, detail="Account deactivated")

    return SessionContext(
        account_id=row["account_id"],
        email=row["email"],
        user_type=row["user_type"],
        session_id=row["id"],
        has_profile=has_profile
    )


async def get_profiled_session(session: SessionContext = Depends(get_current_session)) -> SessionContext:
    """Dependency - Require a completed profile."""
    if not session.has_profile:
        raise HTTPException(status_code=404, detail="Profile not found. Complete onboarding first.")
    return session


async def get_current_student(session: SessionContext = Depends(get_current_session)) -> SessionContext:
    """Dependency - Require student account with a profile."""
    if not session.is_student:
        raise HTTPException(status_code=403, detail="Students only")
    if not session.has_profile:
        raise HTTPException(status_code=404, detail="Student profile not found. Create profile first.")
    return session


async def get_current_employer(session: SessionContext = Depends(get_current_session)) -> SessionContext:
    """Dependency - Require employer account with a profile."""
    if not session.is_employer:
        raise HTTPException(status_code=403, detail="Employers only")
    if not session.has_profile:
        raise HTTPException(status_code=404, detail="Employer profile not found. Create profile first.")
    return session
