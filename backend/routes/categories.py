"""
Category routes: assigning photos to galleries and editing galleries
"""
from fastapi import APIRouter, Depends, Query

from core.dependencies import get_current_user
from core.errors import NotFound
from models.gallery import (
    BatchCategorizeRequest, CategorizeRequest, Category, CategoryList, CategoryReorder,
    PhotoRefUpdate, PublicCategory, RenameSlugRequest,
)
from models.trash import CategoryBatchDelete
from services import reconciliation
from services.store import GalleryStore, get_store

router = APIRouter(prefix="/api/telegram/category", tags=["categories"])
gallery_router = APIRouter(prefix="/api/category", tags=["categories"])


@router.get("", response_model=CategoryList)
async def get_categories(
    current_user: dict = Depends(get_current_user),
    store: GalleryStore = Depends(get_store),
):
    categories = await store.list_categories()
    return CategoryList(categories=[Category(**c) for c in categories])


@router.put("")
async def categorize_photo(
    data: CategorizeRequest,
    current_user: dict = Depends(get_current_user),
    store: GalleryStore = Depends(get_store),
):
    return await reconciliation.categorize(store, data.id, data.slug, data.variant)


@router.post("/batch")
async def batch_categorize_photos(
    data: BatchCategorizeRequest,
    current_user: dict = Depends(get_current_user),
    store: GalleryStore = Depends(get_store),
):
    return await reconciliation.batch_categorize(store, data.imageIds, data.slug, data.variant)


@router.post("/rename")
async def rename_category(
    data: RenameSlugRequest,
    current_user: dict = Depends(get_current_user),
    store: GalleryStore = Depends(get_store),
):
    return await reconciliation.rename_slug(store, data.oldSlug, data.newSlug)


@router.patch("")
async def update_category_photo(
    data: PhotoRefUpdate,
    current_user: dict = Depends(get_current_user),
    store: GalleryStore = Depends(get_store),
):
    return await reconciliation.update_photo_ref(store, data.slug, data.photoId, data.alt, data.variant)


@router.post("/reorder")
async def reorder_category(
    data: CategoryReorder,
    current_user: dict = Depends(get_current_user),
    store: GalleryStore = Depends(get_store),
):
    return await reconciliation.reorder_category(store, data.slug, data.photoIds)


@router.delete("")
async def remove_category_photo(
    slug: str = Query(..., min_length=1),
    photoId: str = Query(..., min_length=1),
    current_user: dict = Depends(get_current_user),
    store: GalleryStore = Depends(get_store),
):
    return await reconciliation.remove_from_category(store, slug, photoId)


@gallery_router.get("/{slug}", response_model=PublicCategory)
async def get_public_category(slug: str, store: GalleryStore = Depends(get_store)):
    """Public read of one gallery; no credential needed"""
    category = await store.get_category(slug)
    if not category:
        raise NotFound("Category not found")
    return PublicCategory(
        slug=slug,
        name=category.get("name") or slug,
        images=category.get("images") or [],
        updated_at=category.get("updated_at"),
    )


@gallery_router.post("/batch-delete")
async def batch_delete_from_category(
    data: CategoryBatchDelete,
    current_user: dict = Depends(get_current_user),
    store: GalleryStore = Depends(get_store),
):
    """Move selected photos of one gallery to the trash"""
    return await reconciliation.soft_delete_from_category(
        store, data.slug, data.photoIds, deleted_by=current_user["id"],
    )
