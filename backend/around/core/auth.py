"""
Authentication dependencies for FastAPI.

Protected routes declare ``Depends(get_current_username)``; the token is
read from the ``Authorization: Bearer <token>`` header and verified
before the handler runs.
"""

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer

from around.core.errors import AuthError
from around.core.security import decode_access_token

# auto_error=False so a missing header goes through the same AuthError
# path (401) as a bad token
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="login", auto_error=False)


async def get_current_username(token: str | None = Depends(oauth2_scheme)) -> str:
    """
    Return the username carried by a valid bearer token.

    Raises:
        AuthError: If the token is missing, malformed, tampered or expired
    """
    if not token:
        raise AuthError("Not authenticated")

    payload = decode_access_token(token)
    if payload is None:
        raise AuthError("Could not validate credentials")

    username = payload.get("username")
    if not isinstance(username, str) or not username:
        raise AuthError("Could not validate credentials")

    return username
