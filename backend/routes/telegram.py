"""
Upload routes: Telegram-backed image storage
"""
from fastapi import APIRouter, Depends, File, UploadFile

from core.config import MAX_UPLOAD_SIZE
from core.dependencies import get_current_user
from core.errors import ValidationError
from models.gallery import Photo, PhotoListItem
from services import reconciliation
from services.images import read_image_dimensions
from services.store import GalleryStore, get_store
from services.telegram import TelegramStorage, get_telegram_storage
from utils.helpers import format_file_size, generate_photo_id, utc_now_iso

router = APIRouter(prefix="/api/telegram", tags=["telegram"])


@router.post("/upload", response_model=Photo)
async def upload_image(
    file: UploadFile = File(...),
    current_user: dict = Depends(get_current_user),
    store: GalleryStore = Depends(get_store),
    telegram: TelegramStorage = Depends(get_telegram_storage),
):
    content_type = file.content_type or ""
    if not content_type.startswith("image/"):
        raise ValidationError("Invalid file type - Only images are allowed")

    content = await file.read()
    if len(content) > MAX_UPLOAD_SIZE:
        raise ValidationError(f"File too large - Maximum size is {format_file_size(MAX_UPLOAD_SIZE)}")
    width, height = read_image_dimensions(content)

    filename = file.filename or "upload"
    uploaded = await telegram.upload_photo(content, filename, content_type)

    photo = {
        "id": generate_photo_id(),
        "url": uploaded["url"],
        "file_id": uploaded["file_id"],
        "file_name": filename,
        "file_size": len(content),
        "file_type": content_type,
        "width": width,
        "height": height,
        "uploaded_by": current_user["id"],
        "uploaded_at": utc_now_iso(),
        "telegram_file_path": uploaded["file_path"],
    }
    return await reconciliation.create_photo(store, photo)


@router.get("/images")
async def list_images(
    current_user: dict = Depends(get_current_user),
    store: GalleryStore = Depends(get_store),
):
    photos = await reconciliation.list_photos(store)
    return {"images": [PhotoListItem(**p) for p in photos]}
