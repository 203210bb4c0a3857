"""
Gallery Store - MongoDB access for the four gallery collections

Reads go straight to Motor. Writes are never issued one by one: callers
stage pymongo bulk operations in a WriteBatch and hand it to
GalleryStore.commit(), which applies the whole batch inside one
multi-document transaction.
"""
import logging
from typing import Dict, Iterable, List, Optional

from pymongo import DeleteOne, InsertOne, ReplaceOne
from pymongo.errors import BulkWriteError, DuplicateKeyError, PyMongoError

from core.config import (
    MONGO_USE_TRANSACTIONS,
    IMAGES_COLLECTION, CATEGORIES_COLLECTION, SETTINGS_COLLECTION, DELETED_PHOTOS_COLLECTION,
    HOMEPAGE_PINS_TYPE,
)
from core.database import client as default_client, db as default_db
from core.errors import Conflict, InternalError

logger = logging.getLogger(__name__)

DUPLICATE_KEY_CODE = 11000


class WriteBatch:
    """Ordered pymongo operations grouped per collection"""

    def __init__(self):
        self._operations: Dict[str, list] = {}

    def _add(self, collection: str, operation) -> None:
        self._operations.setdefault(collection, []).append(operation)

    def insert(self, collection: str, document: dict) -> None:
        self._add(collection, InsertOne(dict(document)))

    def replace(self, collection: str, filter: dict, document: dict, upsert: bool = True) -> None:
        replacement = {k: v for k, v in document.items() if k != "_id"}
        self._add(collection, ReplaceOne(filter, replacement, upsert=upsert))

    def delete(self, collection: str, filter: dict) -> None:
        self._add(collection, DeleteOne(filter))

    def operations(self):
        return list(self._operations.items())

    def summary(self) -> str:
        return ", ".join(f"{name}={len(ops)}" for name, ops in self._operations.items())

    def __len__(self) -> int:
        return sum(len(ops) for ops in self._operations.values())


class GalleryStore:
    """
    Access layer over the image, category, settings and trash collections.
    """

    def __init__(self, database=None, mongo_client=None, use_transactions: bool = MONGO_USE_TRANSACTIONS):
        self.db = database if database is not None else default_db
        self.client = mongo_client if mongo_client is not None else default_client
        self.use_transactions = use_transactions

    # ============ Image Store ============

    async def get_photo(self, photo_id: str) -> Optional[dict]:
        return await self.db[IMAGES_COLLECTION].find_one({"id": photo_id}, {"_id": 0})

    async def get_photos(self, photo_ids: Iterable[str]) -> Dict[str, dict]:
        """Fetch many photos in one round-trip, keyed by id"""
        ids = list(photo_ids)
        if not ids:
            return {}
        docs = await self.db[IMAGES_COLLECTION].find({"id": {"$in": ids}}, {"_id": 0}).to_list(None)
        return {doc["id"]: doc for doc in docs}

    async def list_photos(self) -> List[dict]:
        return await self.db[IMAGES_COLLECTION].find({}, {"_id": 0}).sort("uploaded_at", -1).to_list(None)

    async def list_photo_ids(self) -> List[str]:
        docs = await self.db[IMAGES_COLLECTION].find({}, {"_id": 0, "id": 1}).to_list(None)
        return [doc["id"] for doc in docs]

    # ============ Category Store ============

    async def get_category(self, slug: str) -> Optional[dict]:
        return await self.db[CATEGORIES_COLLECTION].find_one({"slug": slug}, {"_id": 0})

    async def list_categories(self) -> List[dict]:
        """Every category, most recently updated first (the reconciliation scan set)"""
        return await self.db[CATEGORIES_COLLECTION].find({}, {"_id": 0}).sort("updated_at", -1).to_list(None)

    # ============ Homepage Pin List ============

    async def get_pins_document(self) -> Optional[dict]:
        return await self.db[SETTINGS_COLLECTION].find_one({"type": HOMEPAGE_PINS_TYPE}, {"_id": 0})

    async def get_pins(self) -> List[dict]:
        doc = await self.get_pins_document()
        if not doc:
            return []
        pins = doc.get("selectedPhotos") or []
        return sorted(pins, key=lambda pin: pin.get("order", 0))

    # ============ Trash ============

    async def get_deleted(self, photo_id: str) -> Optional[dict]:
        return await self.db[DELETED_PHOTOS_COLLECTION].find_one({"id": photo_id}, {"_id": 0})

    async def get_deleted_many(self, photo_ids: Iterable[str]) -> Dict[str, dict]:
        ids = list(photo_ids)
        if not ids:
            return {}
        docs = await self.db[DELETED_PHOTOS_COLLECTION].find({"id": {"$in": ids}}, {"_id": 0}).to_list(None)
        return {doc["id"]: doc for doc in docs}

    async def list_deleted(self) -> List[dict]:
        return await self.db[DELETED_PHOTOS_COLLECTION].find({}, {"_id": 0}).sort("deleted_at", -1).to_list(None)

    # ============ Writes ============

    async def commit(self, batch: WriteBatch) -> None:
        """
        Apply a write batch all-or-nothing.
        Raises Conflict on a unique-key violation and InternalError on any
        other store failure; in both cases nothing was applied.
        """
        if not len(batch):
            return

        try:
            if self.use_transactions:
                async with await self.client.start_session() as session:
                    async with session.start_transaction():
                        await self._apply(batch, session)
            else:
                await self._apply(batch, None)
        except BulkWriteError as e:
            write_errors = e.details.get("writeErrors", [])
            if any(err.get("code") == DUPLICATE_KEY_CODE for err in write_errors):
                raise Conflict("Document already exists") from e
            logger.error(f"Batch commit failed ({batch.summary()}): {e}")
            raise InternalError("Failed to commit changes") from e
        except DuplicateKeyError as e:
            raise Conflict("Document already exists") from e
        except PyMongoError as e:
            logger.error(f"Batch commit failed ({batch.summary()}): {e}")
            raise InternalError("Failed to commit changes") from e

    async def _apply(self, batch: WriteBatch, session) -> None:
        options = {"session": session} if session is not None else {}
        for collection, operations in batch.operations():
            await self.db[collection].bulk_write(operations, ordered=True, **options)


# Global store instance
gallery_store = GalleryStore()


def get_store() -> GalleryStore:
    """Get the gallery store instance"""
    return gallery_store
