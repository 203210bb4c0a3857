"""
Admin authentication models
"""
from pydantic import BaseModel


class AdminLogin(BaseModel):
    username: str
    password: str


class AdminToken(BaseModel):
    access_token: str
    token_type: str = "bearer"


class CurrentUser(BaseModel):
    id: str
    is_admin: bool = True
