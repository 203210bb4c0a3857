# Services module exports
from .auth import create_access_token, verify_admin_credentials, login_admin
from .store import GalleryStore, WriteBatch, get_store
from .consistency import CategorySnapshot, build_photo_ref, normalize_pins, audit_store, repair_store
from .telegram import TelegramStorage, get_telegram_storage
from .images import ImageRelay, get_image_relay, read_image_dimensions
from . import reconciliation
