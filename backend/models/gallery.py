"""
Gallery-related Pydantic models
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Literal, Optional

Variant = Literal["original", "square"]


class Photo(BaseModel):
    """Canonical photo record in the image store"""
    model_config = ConfigDict(extra="ignore")
    id: str
    url: str
    file_name: str
    file_size: int = 0
    file_type: Optional[str] = None
    file_id: Optional[str] = None  # Telegram file id
    telegram_file_path: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    alt: Optional[str] = None
    uploaded_by: Optional[str] = None
    uploaded_at: str


class PhotoListItem(Photo):
    """Photo annotated with where it is currently shown"""
    slug: Optional[str] = None  # Current category, None when uncategorized
    pinned: bool = False


class PhotoRef(BaseModel):
    """Denormalized snapshot of a photo inside a category"""
    model_config = ConfigDict(extra="ignore")
    id: str
    url: str
    file_name: Optional[str] = None
    alt: str = ""
    variant: Variant = "original"
    uploaded_at: Optional[str] = None


class Category(BaseModel):
    """Model for a gallery category"""
    model_config = ConfigDict(extra="ignore")
    slug: str
    images: List[PhotoRef] = []
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class CategoryList(BaseModel):
    categories: List[Category]


class PublicCategory(BaseModel):
    """Public view of a single category"""
    slug: str
    name: str
    images: List[PhotoRef]
    updated_at: Optional[str] = None


class CategorizeRequest(BaseModel):
    """Assign (or move) one photo; a blank slug uncategorizes it"""
    id: str = Field(min_length=1)
    slug: Optional[str] = None
    variant: Variant = "original"


class BatchCategorizeRequest(BaseModel):
    imageIds: List[str] = Field(min_length=1)
    slug: Optional[str] = None
    variant: Variant = "original"


class RenameSlugRequest(BaseModel):
    oldSlug: str
    newSlug: str


class PhotoRefUpdate(BaseModel):
    """Edit the denormalized copy inside one category"""
    slug: str = Field(min_length=1)
    photoId: str = Field(min_length=1)
    alt: Optional[str] = None
    variant: Optional[Variant] = None


class CategoryReorder(BaseModel):
    slug: str = Field(min_length=1)
    photoIds: List[str] = Field(min_length=1)
