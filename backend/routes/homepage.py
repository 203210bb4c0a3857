"""
Homepage pin routes
"""
from typing import List

from fastapi import APIRouter, Depends

from core.dependencies import get_current_user
from models.homepage import HomepageImage, HomepagePins, PinAdd, PinReorder
from services import reconciliation
from services.consistency import normalize_pins
from services.store import GalleryStore, get_store

router = APIRouter(prefix="/api/homepage", tags=["homepage"])


@router.get("", response_model=HomepagePins)
async def get_homepage_pins(store: GalleryStore = Depends(get_store)):
    doc = await store.get_pins_document()
    if not doc:
        return HomepagePins(selectedPhotos=[])
    return HomepagePins(
        selectedPhotos=normalize_pins(doc.get("selectedPhotos") or []),
        updated_at=doc.get("updated_at"),
    )


@router.post("", response_model=HomepagePins)
async def set_homepage_pins(
    data: HomepagePins,
    current_user: dict = Depends(get_current_user),
    store: GalleryStore = Depends(get_store),
):
    pins = [pin.model_dump(exclude_none=True) for pin in data.selectedPhotos]
    return await reconciliation.set_pins(store, pins)


@router.post("/pins", response_model=HomepagePins)
async def pin_photo(
    data: PinAdd,
    current_user: dict = Depends(get_current_user),
    store: GalleryStore = Depends(get_store),
):
    return await reconciliation.add_pin(store, data.photoId, data.slug)


@router.post("/pins/reorder", response_model=HomepagePins)
async def reorder_homepage_pins(
    data: PinReorder,
    current_user: dict = Depends(get_current_user),
    store: GalleryStore = Depends(get_store),
):
    return await reconciliation.reorder_pins(store, data.photoIds)


@router.delete("/pins/{photo_id}", response_model=HomepagePins)
async def unpin_photo(
    photo_id: str,
    current_user: dict = Depends(get_current_user),
    store: GalleryStore = Depends(get_store),
):
    return await reconciliation.remove_pin(store, photo_id)


@router.get("/images", response_model=List[HomepageImage])
async def get_homepage_images(store: GalleryStore = Depends(get_store)):
    return await reconciliation.homepage_images(store)
