# Models package
from .auth import AdminLogin, AdminToken, CurrentUser
from .gallery import (
    Variant, Photo, PhotoListItem, PhotoRef,
    Category, CategoryList, PublicCategory,
    CategorizeRequest, BatchCategorizeRequest, RenameSlugRequest,
    PhotoRefUpdate, CategoryReorder,
)
from .homepage import HomepagePin, HomepagePins, PinAdd, PinReorder, HomepageImage
from .trash import DeletedPhoto, DeletedPhotoList, SoftDeleteRequest, RestoreRequest, CategoryBatchDelete
