# app/api/dependencies/authentication.py

import logging
from typing import Optional
from fastapi import HTTPException, status, Request
from pydantic import BaseModel
from jose import JWTError

from app.core.security import decode_token

# --- 定义 AuthContext ---
class AuthContext(BaseModel):
    """
    The verified identity of the caller. Token issuance belongs to the external
    identity provider; here we only verify the signature and read the claims.
    """
    user_id: str
    email: Optional[str] = None
    token: Optional[str] = None


def get_auth_context_from_token(token: str) -> AuthContext:
    """
    Decodes a JWT and builds an AuthContext from its claims.
    Pure: does not depend on the request object or the database.
    """
    try:
        payload = decode_token(token)
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token payload")
    return AuthContext(user_id=str(user_id), email=payload.get("email"), token=token)


# --- [主依赖项] ---
async def get_auth(request: Request) -> AuthContext:
    """
    The single entry point for authentication.
    Reads the credential extracted by AuthenticationMiddleware.
    """
    token = getattr(request.state, "token", None)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication credentials were not provided.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    auth_context = get_auth_context_from_token(token)
    logging.debug(f"[Auth] Request authenticated as user {auth_context.user_id}.")
    return auth_context
