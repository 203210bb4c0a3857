"""Authentication utilities"""
import secrets
from datetime import datetime, timezone, timedelta
from jose import jwt

from core.config import SECRET_KEY, ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES, ADMIN_USERNAME, ADMIN_PASSWORD
from core.errors import Unauthorized


def create_access_token(data: dict) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def verify_admin_credentials(username: str, password: str) -> bool:
    # Compare both fields even when the first one fails
    user_ok = secrets.compare_digest(username.encode('utf-8'), ADMIN_USERNAME.encode('utf-8'))
    pass_ok = secrets.compare_digest(password.encode('utf-8'), ADMIN_PASSWORD.encode('utf-8'))
    return user_ok and pass_ok


def login_admin(username: str, password: str) -> str:
    """Issue an admin token or raise Unauthorized"""
    if not verify_admin_credentials(username, password):
        raise Unauthorized("Invalid credentials")
    return create_access_token({"sub": username, "is_admin": True})
