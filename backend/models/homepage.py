"""
Homepage pin list models
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class HomepagePin(BaseModel):
    model_config = ConfigDict(extra="ignore")
    photoId: str = Field(min_length=1)
    order: int = 0
    slug: Optional[str] = None  # Denormalized; not patched on slug rename


class HomepagePins(BaseModel):
    selectedPhotos: List[HomepagePin]
    updated_at: Optional[str] = None


class PinAdd(BaseModel):
    photoId: str = Field(min_length=1)
    slug: Optional[str] = None


class PinReorder(BaseModel):
    photoIds: List[str]


class HomepageImage(BaseModel):
    """A pinned photo resolved through its category"""
    id: str
    url: str
    file_name: Optional[str] = None
    alt: str = ""
    variant: str = "original"
    slug: str
    order: int
