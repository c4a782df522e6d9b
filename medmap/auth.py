import logging

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError
from jose import jwt as jose_jwt
from sqlalchemy.orm import Session

from .config import SUPABASE_JWT_AUDIENCE, SUPABASE_JWT_SECRET
from .database import get_db
from .models import Profile

logger = logging.getLogger(__name__)

security = HTTPBearer()

ALGORITHM = "HS256"


def verify_access_token(token: str) -> dict:
    """
    Verify an access token issued by the hosted auth provider.
    Tokens are HS256 JWTs signed with the project's JWT secret.
    """
    if not SUPABASE_JWT_SECRET:
        logger.error("❌ SUPABASE_JWT_SECRET not configured")
        raise HTTPException(status_code=500, detail="Authentication not configured")

    try:
        return jose_jwt.decode(
            token,
            SUPABASE_JWT_SECRET,
            algorithms=[ALGORITHM],
            audience=SUPABASE_JWT_AUDIENCE,
        )
    except ExpiredSignatureError as e:
        raise HTTPException(
            status_code=401,
            detail="Token has expired. Please refresh your session.",
            headers={"X-Token-Expired": "true"},
        ) from e
    except JWTError as e:
        logger.warning(f"⚠️ Token verification failed: {e}")
        raise HTTPException(status_code=401, detail="Invalid token") from e


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> Profile:
    """Get current user's profile from the bearer token, creating it on first sight"""

    if not credentials:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated. Please provide a valid Bearer token in the Authorization header.",
        )

    token = credentials.credentials
    if len(token.split(".")) != 3:
        logger.warning(f"⚠️ Malformed token received, token length: {len(token)}")
        raise HTTPException(
            status_code=401, detail="Invalid token format. Expected a valid JWT token."
        )

    claims = verify_access_token(token)
    user_id = claims.get("sub")
    if not user_id:
        logger.error(f"❌ Token missing user ID claim. Available claims: {list(claims.keys())}")
        raise HTTPException(status_code=401, detail="Invalid token claims")

    profile = db.query(Profile).filter(Profile.id == user_id).first()
    if profile:
        return profile

    email = claims.get("email")
    if not email:
        raise HTTPException(status_code=401, detail="Invalid token claims")

    metadata = claims.get("user_metadata") or {}
    logger.info(f"🆕 Creating profile for {email}")
    profile = Profile(
        id=user_id,
        email=email,
        first_name=metadata.get("first_name"),
        last_name=metadata.get("last_name"),
        phone=metadata.get("phone"),
        role="patient",
    )
    db.add(profile)
    try:
        db.commit()
        db.refresh(profile)
    except Exception as e:
        db.rollback()
        if "unique" in str(e).lower() or "duplicate key" in str(e).lower():
            logger.error(f"❌ Email {email} is already registered to another account")
            raise HTTPException(
                status_code=409,
                detail="This email is already registered. Please sign in with your existing account.",
            ) from e
        raise
    return profile


def require_role(*roles: str):
    """
    Build a dependency that only lets through users whose stored role is one of `roles`.
    The role is read from the persisted profile, never from the client.
    """

    async def role_checker(user: Profile = Depends(get_current_user)) -> Profile:
        if user.role not in roles:
            logger.warning(f"⚠️ User {user.email} ({user.role}) denied, requires {roles}")
            raise HTTPException(status_code=403, detail="You do not have access to this resource")
        return user

    return role_checker


require_admin = require_role("admin")
require_doctor = require_role("doctor")
