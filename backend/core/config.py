"""
Application configuration and constants
"""
import os
from pathlib import Path
from dotenv import load_dotenv
import logging

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

ROOT_DIR = Path(__file__).parent.parent
load_dotenv(ROOT_DIR / '.env')

# MongoDB configuration
MONGO_URL = os.environ.get('MONGO_URL', 'mongodb://localhost:27017')
DB_NAME = os.environ.get('DB_NAME', 'photo_gallery')

# Multi-document transactions need a replica set. Standalone servers must
# disable them, which makes write batches non-atomic across collections.
MONGO_USE_TRANSACTIONS = os.environ.get('MONGO_USE_TRANSACTIONS', 'true').lower() in ('1', 'true', 'yes')

# JWT configuration
SECRET_KEY = os.environ['JWT_SECRET_KEY']
ALGORITHM = 'HS256'
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.environ.get('ACCESS_TOKEN_EXPIRE_MINUTES', 60 * 24 * 7))

# Admin credentials
ADMIN_USERNAME = os.environ.get('ADMIN_USERNAME', 'admin')
ADMIN_PASSWORD = os.environ.get('ADMIN_PASSWORD', 'admin123')

# Telegram as image storage
TELEGRAM_BOT_TOKEN = os.environ.get('TELEGRAM_BOT_TOKEN', '')
TELEGRAM_CHAT_ID = os.environ.get('TELEGRAM_CHAT_ID', '')
TELEGRAM_API_BASE = os.environ.get('TELEGRAM_API_BASE', 'https://api.telegram.org').rstrip('/')
TELEGRAM_TIMEOUT = 30.0

# Upload limits
MAX_UPLOAD_SIZE = int(os.environ.get('MAX_UPLOAD_SIZE', 10 * 1024 * 1024))

CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*').split(',')

# ============================================
# COLLECTIONS
# ============================================

IMAGES_COLLECTION = "images"
CATEGORIES_COLLECTION = "categories"
SETTINGS_COLLECTION = "settings"
DELETED_PHOTOS_COLLECTION = "deleted_photos"

HOMEPAGE_PINS_TYPE = "homepage_pins"

# ============================================
# GALLERY CONSTANTS
# ============================================

VARIANT_ORIGINAL = "original"

# Fields that only exist on trash records
TRASH_ONLY_FIELDS = ("original_categories", "was_pinned", "deleted_at", "deleted_by", "variant")

# Image proxy
IMAGE_CACHE_CONTROL = "public, max-age=31536000, immutable"
IMAGE_FETCH_TIMEOUT = 30.0
