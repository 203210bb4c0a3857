"""
Photo lifecycle routes: trash, restore, permanent delete and the image proxy
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from core.config import IMAGE_CACHE_CONTROL
from core.dependencies import get_current_user
from core.errors import NotFound, ValidationError
from models.trash import DeletedPhoto, DeletedPhotoList, RestoreRequest, SoftDeleteRequest
from services import reconciliation
from services.images import ImageRelay, get_image_relay
from services.store import GalleryStore, get_store
from utils.helpers import parse_id_csv

router = APIRouter(prefix="/api/photos", tags=["photos"])


@router.post("/delete")
async def soft_delete_photos(
    data: SoftDeleteRequest,
    current_user: dict = Depends(get_current_user),
    store: GalleryStore = Depends(get_store),
):
    return await reconciliation.soft_delete(store, data.photoIds, deleted_by=current_user["id"])


@router.post("/restore")
async def restore_photos(
    data: RestoreRequest,
    current_user: dict = Depends(get_current_user),
    store: GalleryStore = Depends(get_store),
):
    return await reconciliation.restore(
        store,
        data.photoIds,
        restored_by=current_user["id"],
        restore_categories=data.restoreCategories,
        restore_pin=data.restorePin,
    )


@router.delete("/permanent-delete")
async def permanently_delete_photos(
    photoIds: Optional[str] = Query(None),
    current_user: dict = Depends(get_current_user),
    store: GalleryStore = Depends(get_store),
):
    ids = parse_id_csv(photoIds)
    if not ids:
        raise ValidationError("photoIds parameter is required")
    return await reconciliation.permanent_delete(store, ids)


@router.get("/deleted", response_model=DeletedPhotoList)
async def get_deleted_photos(
    current_user: dict = Depends(get_current_user),
    store: GalleryStore = Depends(get_store),
):
    photos = [DeletedPhoto(**p) for p in await store.list_deleted()]
    return DeletedPhotoList(photos=photos, count=len(photos))


@router.get("/image/{slug}/{order}")
async def proxy_image(
    slug: str,
    order: int,
    store: GalleryStore = Depends(get_store),
    relay: ImageRelay = Depends(get_image_relay),
):
    """Serve the image at a position of a gallery with long-lived caching"""
    if order < 0:
        raise ValidationError("Invalid order number")

    category = await store.get_category(slug)
    if not category:
        raise NotFound("Gallery not found")

    images = category.get("images") or []
    if order >= len(images):
        raise NotFound("Photo not found")

    content, content_type = await relay.fetch(images[order]["url"])
    return Response(
        content=content,
        media_type=content_type,
        headers={"Cache-Control": IMAGE_CACHE_CONTROL},
    )
