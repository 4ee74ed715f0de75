# app/core/security.py

from datetime import datetime, timedelta
from typing import Any, Union, Optional
from jose import jwt, JWTError

from app.core.config import settings

# ------------------------------------------------------------------------------
# JSON Web Token (JWT) Management
#    - Tokens are issued by the external identity provider; this service only
#      verifies them. create_access_token exists for tooling and tests.
# ------------------------------------------------------------------------------

def create_access_token(
    subject: Union[str, Any],
    expires_delta: Optional[timedelta] = None,
    extra_claims: Optional[dict] = None
) -> str:
    """
    Creates a new JWT access token.

    :param subject: The subject of the token (the user id). Encoded in the 'sub' claim.
    :param expires_delta: Optional timedelta for token expiration. Defaults to one hour.
    :param extra_claims: Optional additional claims (e.g. 'email', 'plan').
    :return: The encoded JWT string.
    """
    expire = datetime.utcnow() + (expires_delta or timedelta(hours=1))
    to_encode = {"exp": expire, "sub": str(subject)}
    if extra_claims:
        to_encode.update(extra_claims)
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> dict:
    """
    Decodes and verifies a JWT access token.

    Signature, expiration and algorithm checks are delegated to python-jose.

    :raises JWTError: Propagates for invalid or expired tokens. The caller
                      (the authentication dependency) maps it to a 401.
    """
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise
