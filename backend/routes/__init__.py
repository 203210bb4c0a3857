"""
Routes package for the gallery API

Routes are organized by domain:
- health: Health check endpoints
- auth: Admin login
- categories: Gallery assignment, rename and editing
- photos: Trash, restore, permanent delete, image proxy
- homepage: Homepage pin list
- telegram: Uploads and the image store listing
- admin: Consistency audit and repair
"""
from .health import router as health_router
from .auth import router as auth_router
from .categories import router as categories_router, gallery_router
from .photos import router as photos_router
from .homepage import router as homepage_router
from .telegram import router as telegram_router
from .admin import router as admin_router

__all__ = [
    'health_router',
    'auth_router',
    'categories_router',
    'gallery_router',
    'photos_router',
    'homepage_router',
    'telegram_router',
    'admin_router',
]
