"""
Admin authentication routes
"""
from fastapi import APIRouter, Depends

from core.dependencies import get_current_user
from models.auth import AdminLogin, AdminToken, CurrentUser
from services.auth import login_admin

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", response_model=AdminToken)
async def admin_login(credentials: AdminLogin):
    return AdminToken(access_token=login_admin(credentials.username, credentials.password))


@router.get("/me", response_model=CurrentUser)
async def get_me(current_user: dict = Depends(get_current_user)):
    return CurrentUser(**current_user)
