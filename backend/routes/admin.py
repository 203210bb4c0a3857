"""
Admin maintenance routes: consistency audit and repair
"""
from fastapi import APIRouter, Depends

from core.dependencies import get_current_user
from services.consistency import audit_store, repair_store
from services.store import GalleryStore, get_store

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/consistency")
async def check_consistency(
    current_user: dict = Depends(get_current_user),
    store: GalleryStore = Depends(get_store),
):
    return await audit_store(store)


@router.post("/consistency/repair")
async def repair_consistency(
    current_user: dict = Depends(get_current_user),
    store: GalleryStore = Depends(get_store),
):
    return await repair_store(store)
