"""
Database connection and initialization
"""
import logging
from motor.motor_asyncio import AsyncIOMotorClient

from .config import (
    MONGO_URL, DB_NAME,
    IMAGES_COLLECTION, CATEGORIES_COLLECTION, SETTINGS_COLLECTION, DELETED_PHOTOS_COLLECTION,
)

logger = logging.getLogger(__name__)

# Optimized MongoDB connection with connection pooling
client = AsyncIOMotorClient(
    MONGO_URL,
    maxPoolSize=100,
    minPoolSize=10,
    maxIdleTimeMS=30000,
    connectTimeoutMS=5000,
    serverSelectionTimeoutMS=5000,
    waitQueueTimeoutMS=10000
)

db = client[DB_NAME]


async def create_database_indexes(database=None):
    """Create the unique keys the gallery stores rely on"""
    database = database if database is not None else db
    logger.info("Creating database indexes...")

    try:
        # Image store: photo identity
        await database[IMAGES_COLLECTION].create_index("id", unique=True)
        await database[IMAGES_COLLECTION].create_index([("uploaded_at", -1)])

        # Category store: slug is the document key
        await database[CATEGORIES_COLLECTION].create_index("slug", unique=True)
        await database[CATEGORIES_COLLECTION].create_index([("updated_at", -1)])

        # Settings (homepage pin list)
        await database[SETTINGS_COLLECTION].create_index("type", unique=True)

        # Trash
        await database[DELETED_PHOTOS_COLLECTION].create_index("id", unique=True)
        await database[DELETED_PHOTOS_COLLECTION].create_index([("deleted_at", -1)])

        logger.info("Database indexes created successfully")
    except Exception as e:
        logger.error(f"Error creating indexes (may already exist): {e}")
