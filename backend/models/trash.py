"""
Trash (soft delete / restore) models
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class DeletedPhoto(BaseModel):
    """Archived photo with enough context to restore it"""
    model_config = ConfigDict(extra="ignore")
    id: str
    url: str
    file_name: Optional[str] = None
    file_size: Optional[int] = None
    alt: Optional[str] = None
    variant: str = "original"
    uploaded_at: Optional[str] = None
    original_categories: List[str] = []
    was_pinned: bool = False
    deleted_at: str
    deleted_by: str


class DeletedPhotoList(BaseModel):
    success: bool = True
    photos: List[DeletedPhoto]
    count: int


class SoftDeleteRequest(BaseModel):
    photoIds: List[str] = Field(min_length=1)


class RestoreRequest(BaseModel):
    photoIds: List[str] = Field(min_length=1)
    restoreCategories: bool = True
    restorePin: bool = True


class CategoryBatchDelete(BaseModel):
    """Trash photos from within one gallery"""
    slug: str = Field(min_length=1)
    photoIds: List[str] = Field(min_length=1)
