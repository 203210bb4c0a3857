"""
Test photo categorization

Covers:
1. Moving a photo between categories (single category per photo)
2. Re-categorizing into the same category refreshes the PhotoRef in place
3. Blank slug uncategorizes and removes emptied categories
4. Batch categorize with unknown ids
5. Randomized operation sequences keep the store consistent
"""
import random

import pytest

from core.errors import NotFound, ValidationError
from services import reconciliation
from services.consistency import audit_store


class TestCategorize:
    """Single photo categorize"""

    async def test_move_between_categories_deletes_emptied_source(self, store, make_photo, make_category):
        photo = await make_photo("p1")
        await make_category("weddings", [photo])

        result = await reconciliation.categorize(store, "p1", "portraits")

        assert result["success"] is True
        assert result["removedFrom"] == ["weddings"]
        assert result["deletedCategories"] == ["weddings"]
        assert await store.get_category("weddings") is None, "Emptied category should be deleted"
        portraits = await store.get_category("portraits")
        assert [img["id"] for img in portraits["images"]] == ["p1"]

    async def test_move_without_variant_resets_to_original(self, store, make_photo):
        await make_photo("p1")

        await reconciliation.categorize(store, "p1", "tokyo", "square")
        result = await reconciliation.categorize(store, "p1", "kyoto")

        assert result["removedFrom"] == ["tokyo"]
        assert result["variant"] == "original"
        assert await store.get_category("tokyo") is None
        kyoto = await store.get_category("kyoto")
        assert [img["id"] for img in kyoto["images"]] == ["p1"]
        assert kyoto["images"][0]["variant"] == "original", "A move builds a fresh ref with the default variant"

    async def test_move_keeps_other_photos_in_source(self, store, make_photo, make_category):
        p1 = await make_photo("p1")
        p2 = await make_photo("p2")
        await make_category("weddings", [p1, p2])

        result = await reconciliation.categorize(store, "p1", "portraits")

        assert result["deletedCategories"] == []
        weddings = await store.get_category("weddings")
        assert [img["id"] for img in weddings["images"]] == ["p2"]

    async def test_same_category_refreshes_ref_in_place(self, store, make_photo, make_category):
        p1 = await make_photo("p1")
        p2 = await make_photo("p2")
        await make_category("weddings", [p1, p2])

        result = await reconciliation.categorize(store, "p1", "weddings", "square")

        assert result["removedFrom"] == []
        weddings = await store.get_category("weddings")
        assert [img["id"] for img in weddings["images"]] == ["p1", "p2"], "Position should be kept"
        assert weddings["images"][0]["variant"] == "square"

    async def test_blank_slug_uncategorizes(self, store, make_photo, make_category):
        photo = await make_photo("p1")
        await make_category("weddings", [photo])

        result = await reconciliation.categorize(store, "p1", "   ")

        assert result["slug"] is None
        assert result["removedFrom"] == ["weddings"]
        assert await store.list_categories() == []
        assert await store.get_photo("p1") is not None, "Photo stays in the image store"

    async def test_ref_copies_canonical_fields(self, store, make_photo):
        await make_photo("p1", alt="First dance")

        await reconciliation.categorize(store, "p1", "weddings")

        ref = (await store.get_category("weddings"))["images"][0]
        assert ref["url"] == "https://cdn.example.com/p1.jpg"
        assert ref["alt"] == "First dance"
        assert ref["variant"] == "original"

    async def test_unknown_photo_is_not_found(self, store, make_photo, make_category):
        photo = await make_photo("p1")
        await make_category("weddings", [photo])

        with pytest.raises(NotFound):
            await reconciliation.categorize(store, "missing", "weddings")

        weddings = await store.get_category("weddings")
        assert [img["id"] for img in weddings["images"]] == ["p1"]


class TestBatchCategorize:
    """Batch categorize against one slug"""

    async def test_reports_unknown_ids(self, store, make_photo, make_category):
        p1 = await make_photo("p1")
        await make_photo("p2")
        await make_category("old", [p1])

        result = await reconciliation.batch_categorize(store, ["p1", "p2", "ghost"], "new")

        assert result["successCount"] == 2
        assert result["updatedIds"] == ["p1", "p2"]
        assert result["notFoundIds"] == ["ghost"]
        assert await store.get_category("old") is None
        new = await store.get_category("new")
        assert [img["id"] for img in new["images"]] == ["p1", "p2"]

    async def test_nothing_found_is_not_an_error(self, store):
        result = await reconciliation.batch_categorize(store, ["ghost"], "new")
        assert result["successCount"] == 0
        assert result["notFoundIds"] == ["ghost"]
        assert await store.get_category("new") is None, "Empty categories are never created"

    async def test_requires_ids(self, store):
        with pytest.raises(ValidationError):
            await reconciliation.batch_categorize(store, ["", "  "], "new")


class TestCategoryEditing:
    """PATCH, reorder and single removal"""

    async def test_update_photo_ref_leaves_canonical_photo(self, store, make_photo, make_category):
        photo = await make_photo("p1")
        await make_category("weddings", [photo])

        await reconciliation.update_photo_ref(store, "weddings", "p1", alt="Vows", variant="square")

        ref = (await store.get_category("weddings"))["images"][0]
        assert ref["alt"] == "Vows"
        assert ref["variant"] == "square"
        assert "alt" not in await store.get_photo("p1")

    async def test_update_photo_ref_missing_photo(self, store, make_photo, make_category):
        photo = await make_photo("p1")
        await make_category("weddings", [photo])
        with pytest.raises(NotFound):
            await reconciliation.update_photo_ref(store, "weddings", "p9", alt="x")

    async def test_reorder_requires_permutation(self, store, make_photo, make_category):
        p1 = await make_photo("p1")
        p2 = await make_photo("p2")
        await make_category("weddings", [p1, p2])

        with pytest.raises(ValidationError):
            await reconciliation.reorder_category(store, "weddings", ["p1"])

        await reconciliation.reorder_category(store, "weddings", ["p2", "p1"])
        weddings = await store.get_category("weddings")
        assert [img["id"] for img in weddings["images"]] == ["p2", "p1"]

    async def test_remove_last_photo_deletes_category(self, store, make_photo, make_category):
        photo = await make_photo("p1")
        await make_category("weddings", [photo])

        result = await reconciliation.remove_from_category(store, "weddings", "p1")

        assert result["remainingCount"] == 0
        assert result["categoryDeleted"] is True
        assert await store.get_category("weddings") is None


class TestRandomSequences:
    """Any sequence of operations leaves single membership and no empty categories"""

    @pytest.mark.parametrize("seed", [1, 7, 42])
    async def test_store_stays_consistent(self, store, make_photo, seed):
        rng = random.Random(seed)
        photo_ids = [f"p{i}" for i in range(6)]
        for photo_id in photo_ids:
            await make_photo(photo_id)
        slugs = ["a", "b", "c", None]
        in_trash = set()

        for _ in range(40):
            action = rng.choice(["categorize", "batch", "delete", "restore", "pin"])
            live = [pid for pid in photo_ids if pid not in in_trash]
            if action == "categorize" and live:
                await reconciliation.categorize(store, rng.choice(live), rng.choice(slugs))
            elif action == "batch" and live:
                await reconciliation.batch_categorize(store, rng.sample(live, min(2, len(live))), rng.choice(slugs))
            elif action == "delete" and live:
                photo_id = rng.choice(live)
                await reconciliation.soft_delete(store, [photo_id], "tester")
                in_trash.add(photo_id)
            elif action == "restore" and in_trash:
                photo_id = rng.choice(sorted(in_trash))
                await reconciliation.restore(store, [photo_id], "tester")
                in_trash.discard(photo_id)
            elif action == "pin" and live:
                photo_id = rng.choice(live)
                pinned = {pin["photoId"] for pin in await store.get_pins()}
                if photo_id not in pinned:
                    await reconciliation.add_pin(store, photo_id)

            report = await audit_store(store)
            assert report["multiCategoryPhotos"] == {}
            assert report["emptyCategories"] == []
            assert report["pinOrderDense"] is True
            assert report["orphanedRefs"] == []
