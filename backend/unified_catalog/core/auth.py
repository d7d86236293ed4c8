"""
Authentication for the catalog API
Validates HS256 JWT bearer tokens and provides the acting user
"""
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from pydantic import BaseModel

from .config import settings


# Security scheme for bearer tokens
security = HTTPBearer(auto_error=False)

JWT_ALGORITHM = "HS256"

ROLE_ADMIN = "admin"
ROLE_WAREHOUSE_STAFF = "warehouse_staff"
ROLE_CUSTOMER = "customer"


class TokenUser(BaseModel):
    """User data extracted from JWT token"""
    id: str
    email: Optional[str] = None
    name: Optional[str] = None
    role: str = ROLE_CUSTOMER


def get_auth_secret() -> str:
    """Get the AUTH_SECRET from settings"""
    if not settings.AUTH_SECRET:
        raise ValueError("AUTH_SECRET is not configured")
    return settings.AUTH_SECRET


def decode_token(token: str) -> dict:
    """
    Decode and validate a JWT.

    Expected payload:
    {
        "sub": "user_id",
        "email": "staff@store.vn",
        "name": "Staff",
        "role": "warehouse_staff",
        "exp": 1234567890
    }
    """
    try:
        return jwt.decode(
            token,
            get_auth_secret(),
            algorithms=[JWT_ALGORITHM],
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


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> TokenUser:
    """
    Dependency that extracts and validates the current user from JWT.

    Usage:
        @router.post("/")
        async def create(user: TokenUser = Depends(get_current_user)):
            ...
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"}
        )

    payload = decode_token(credentials.credentials)

    user_id = payload.get("id") or payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload: missing user id",
            headers={"WWW-Authenticate": "Bearer"}
        )

    return TokenUser(
        id=str(user_id),
        email=payload.get("email"),
        name=payload.get("name"),
        role=str(payload.get("role", ROLE_CUSTOMER)).lower()
    )


def require_roles(*roles: str):
    """
    Dependency factory for role-based access control.

    Usage:
        @router.delete("/{product_id}")
        async def delete_product(
            product_id: int,
            user: TokenUser = Depends(require_roles("admin", "warehouse_staff"))
        ):
            ...
    """
    async def role_checker(
        user: TokenUser = Depends(get_current_user)
    ) -> TokenUser:
        if user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required role: {', '.join(roles)}, your role: {user.role}"
            )
        return user

    return role_checker


# Convenience dependencies for common role requirements
require_admin = require_roles(ROLE_ADMIN)
require_catalog_editor = require_roles(ROLE_ADMIN, ROLE_WAREHOUSE_STAFF)
