"""
collabhub/auth_context.py

Shared authentication context primitives for FastAPI dependency injection.

Contains:
- AuthContext: Immutable caller identity derived from the verified token
- require_auth_context: FastAPI dependency for auth enforcement
- verify_token / create_access_token: JWT helpers

Tokens are issued by the auth service; this backend only verifies them.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from bson import ObjectId
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, ConfigDict
from pymongo.database import Database

try:
    from collabhub.config import ACCESS_TOKEN_MINUTES, ALGORITHM, IS_DEV, SECRET_KEY
    from collabhub.db import USERS, get_db
except ModuleNotFoundError:
    from config import ACCESS_TOKEN_MINUTES, ALGORITHM, IS_DEV, SECRET_KEY
    from db import USERS, get_db

# Security scheme for HTTPBearer; a missing header is answered with 401 below
security = HTTPBearer(auto_error=False)


# ---------------------------------------------------------
# JWT Helpers
# ---------------------------------------------------------
def create_access_token(data: dict, expires_minutes: Optional[int] = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes or ACCESS_TOKEN_MINUTES)
    to_encode["exp"] = expire
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def verify_token(token: str) -> dict:
    """
    Verify JWT access token and return decoded payload.

    Raises:
        HTTPException(401): If token is expired or invalid
    """
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        return payload
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid token")


# ---------------------------------------------------------
# AuthContext
# ---------------------------------------------------------
class AuthContext(BaseModel):
    """
    Caller identity derived from the JWT and the users collection.
    This is the ONLY source of the acting user id in protected endpoints.
    Never trust user ids from request bodies for the actor.
    """
    model_config = ConfigDict(frozen=True)

    user_id: str
    name: str
    email: str


def require_auth_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Database = Depends(get_db),
) -> AuthContext:
    """
    Auth context dependency for FastAPI routes.

    Process:
    1. Require a bearer token, then verify its signature and expiration
    2. Extract user id from the "sub" claim
    3. Fetch the user record (source of truth)
    4. Reject inactive users

    Raises:
        HTTPException(401): If token is missing, invalid, expired, or user not found
        HTTPException(403): If user is inactive
    """
    if credentials is None:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = verify_token(credentials.credentials)
    user_id = payload.get("sub")

    if not user_id or not ObjectId.is_valid(str(user_id)):
        print("[AUTH] Missing or malformed user id in token payload")
        raise HTTPException(status_code=401, detail="Invalid token payload")

    user = db[USERS].find_one({"_id": ObjectId(str(user_id))})
    if not user:
        print(f"[AUTH] User not found: user_id={user_id}")
        raise HTTPException(status_code=401, detail="User not found")

    if not user.get("isActive", True):
        print(f"[AUTH] Inactive user attempted access: user_id={user_id}")
        raise HTTPException(status_code=403, detail="Account inactive")

    ctx = AuthContext(
        user_id=str(user["_id"]),
        name=user.get("name", ""),
        email=user.get("email", ""),
    )

    if IS_DEV:
        print(f"[AUTH] Authenticated: user_id={ctx.user_id}")

    return ctx
