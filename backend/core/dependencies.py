"""
FastAPI dependencies for authentication
"""
from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from .config import SECRET_KEY, ALGORITHM
from .errors import Unauthorized

# Missing credentials must surface as 401, not HTTPBearer's default 403
security = HTTPBearer(auto_error=False)


def decode_identity(token: str) -> dict:
    """Verify a bearer token and return {authenticated, identity}"""
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return {"authenticated": False, "identity": None}

    identity = payload.get("sub")
    if not identity:
        return {"authenticated": False, "identity": None}
    return {"authenticated": True, "identity": identity}


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> dict:
    """Get the authenticated admin from the bearer token"""
    if credentials is None:
        raise Unauthorized("Unauthorized - Please sign in")

    auth = decode_identity(credentials.credentials)
    if not auth["authenticated"]:
        raise Unauthorized("Invalid token")
    return {"id": auth["identity"], "is_admin": True}
