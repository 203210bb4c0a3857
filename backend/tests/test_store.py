"""
Test the gallery store access layer and batched commits
"""
import pytest

from core.config import CATEGORIES_COLLECTION, IMAGES_COLLECTION, DELETED_PHOTOS_COLLECTION
from core.errors import Conflict
from services.store import WriteBatch


class TestWriteBatch:
    """WriteBatch groups operations per collection"""

    def test_groups_operations_by_collection(self):
        batch = WriteBatch()
        batch.insert(IMAGES_COLLECTION, {"id": "p1"})
        batch.replace(CATEGORIES_COLLECTION, {"slug": "a"}, {"slug": "a", "images": []})
        batch.delete(IMAGES_COLLECTION, {"id": "p2"})

        assert len(batch) == 3
        names = [name for name, _ in batch.operations()]
        assert names == [IMAGES_COLLECTION, CATEGORIES_COLLECTION]
        assert batch.summary() == f"{IMAGES_COLLECTION}=2, {CATEGORIES_COLLECTION}=1"

    def test_replace_strips_mongo_id(self):
        batch = WriteBatch()
        batch.replace(CATEGORIES_COLLECTION, {"slug": "a"}, {"_id": "x", "slug": "a"})
        (_, operations), = batch.operations()
        assert "_id" not in operations[0]._doc


class TestGalleryStore:
    """Reads and commits against the in-memory database"""

    async def test_empty_batch_is_a_no_op(self, store):
        await store.commit(WriteBatch())
        assert await store.list_photos() == []

    async def test_commit_applies_every_collection(self, store):
        batch = WriteBatch()
        batch.insert(IMAGES_COLLECTION, {"id": "p1", "url": "u", "uploaded_at": "2026-01-01"})
        batch.replace(DELETED_PHOTOS_COLLECTION, {"id": "p0"}, {"id": "p0", "deleted_at": "2026-01-02"})
        await store.commit(batch)

        assert (await store.get_photo("p1"))["url"] == "u"
        assert (await store.get_deleted("p0"))["deleted_at"] == "2026-01-02"

    async def test_duplicate_slug_insert_is_conflict(self, store, make_photo, make_category):
        photo = await make_photo("p1")
        await make_category("weddings", [photo])

        batch = WriteBatch()
        batch.insert(CATEGORIES_COLLECTION, {"slug": "weddings", "images": []})
        with pytest.raises(Conflict):
            await store.commit(batch)

    async def test_get_photos_keys_by_id(self, store, make_photo):
        await make_photo("p1")
        await make_photo("p2")
        photos = await store.get_photos(["p1", "p2", "missing"])
        assert set(photos) == {"p1", "p2"}
        assert "_id" not in photos["p1"]

    async def test_get_pins_sorted_by_order(self, store, make_pins):
        await make_pins("c", "a", "b", orders=[2, 0, 1])
        pins = await store.get_pins()
        assert [pin["photoId"] for pin in pins] == ["a", "b", "c"]

    async def test_get_pins_without_document(self, store):
        assert await store.get_pins() == []
