"""
Authentication helpers for Shopdesk Backend

Session tokens are issued by Supabase Auth (HS256 JWTs). The backend does not
manage sessions; it only decodes the token to know who performed an action,
so audit entries can name the operator.
"""
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from pydantic import BaseModel

from .config import settings


# Security scheme for bearer tokens
security = HTTPBearer(auto_error=False)


class TokenUser(BaseModel):
    """User data extracted from JWT token"""
    id: str
    email: Optional[str] = None
    role: str = "authenticated"

    @property
    def actor(self) -> str:
        """Identifier written to the audit log"""
        return self.email or self.id


class AuthConfig:
    """Authentication configuration"""

    @staticmethod
    def get_jwt_secret() -> str:
        secret = settings.SUPABASE_JWT_SECRET
        if not secret:
            raise ValueError("SUPABASE_JWT_SECRET is not set")
        return secret

    @staticmethod
    def get_jwt_algorithm() -> str:
        # Supabase signs session tokens with HS256
        return "HS256"


def decode_session_token(token: str) -> dict:
    """
    Decode and validate a Supabase session token.

    Supabase JWT structure:
    {
        "sub": "user-uuid",
        "email": "admin@example.com",
        "role": "authenticated",
        "aud": "authenticated",
        "exp": 1234567890
    }
    """
    try:
        return jwt.decode(
            token,
            AuthConfig.get_jwt_secret(),
            algorithms=[AuthConfig.get_jwt_algorithm()],
            options={"verify_aud": False}
        )
    except JWTError as e:
        if "expired" in str(e).lower():
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Token has expired",
                headers={"WWW-Authenticate": "Bearer"}
            )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"}
        )


def _user_from_payload(payload: dict) -> Optional[TokenUser]:
    user_id = payload.get("sub") or payload.get("id")
    if not user_id:
        return None
    return TokenUser(
        id=user_id,
        email=payload.get("email"),
        role=payload.get("role", "authenticated")
    )


async def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[TokenUser]:
    """
    Optional authentication - returns None if no valid token provided.

    Used on mutating endpoints only to attribute audit entries.
    """
    if not credentials:
        return None

    try:
        return _user_from_payload(decode_session_token(credentials.credentials))
    except (HTTPException, ValueError):
        return None


def actor_of(user: Optional[TokenUser]) -> Optional[str]:
    return user.actor if user else None
