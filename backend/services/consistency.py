"""
Consistency helpers for the denormalized gallery stores

A photo's membership is duplicated across the category documents, the
homepage pin list and the trash. There is no photoId -> slug index, so
every lookup here is a linear scan over an in-memory copy of all
categories. Callers read once, mutate the copy, then stage the changed
documents into a single WriteBatch.
"""
import logging
from typing import Dict, Iterable, List, Optional, Tuple

from core.config import (
    CATEGORIES_COLLECTION, SETTINGS_COLLECTION, HOMEPAGE_PINS_TYPE, VARIANT_ORIGINAL,
)
from services.store import GalleryStore, WriteBatch
from utils.helpers import utc_now_iso

logger = logging.getLogger(__name__)


# ============ Photo refs ============

def build_photo_ref(photo: dict, variant: Optional[str] = None, alt: Optional[str] = None) -> dict:
    """Copy the display fields of a canonical photo into a PhotoRef"""
    return {
        "id": photo["id"],
        "url": photo.get("url"),
        "file_name": photo.get("file_name"),
        "alt": alt if alt is not None else (photo.get("alt") or ""),
        "variant": variant or VARIANT_ORIGINAL,
        "uploaded_at": photo.get("uploaded_at"),
    }


class CategorySnapshot:
    """
    Working copy of the category store.

    Tracks which slugs changed so stage() only writes those documents. A
    category whose image list ends up empty is deleted instead of saved.
    """

    def __init__(self, categories: Iterable[dict], now: Optional[str] = None):
        self.now = now or utc_now_iso()
        self._docs: Dict[str, dict] = {}
        for category in categories:
            doc = dict(category)
            doc["images"] = list(category.get("images") or [])
            self._docs[category["slug"]] = doc
        self._existing = set(self._docs)
        self._dirty = set()

    def __contains__(self, slug: str) -> bool:
        return slug in self._docs

    @property
    def slugs(self) -> List[str]:
        return list(self._docs)

    def images(self, slug: str) -> List[dict]:
        doc = self._docs.get(slug)
        return list(doc["images"]) if doc else []

    def documents(self) -> List[dict]:
        return [dict(doc, images=list(doc["images"])) for doc in self._docs.values()]

    def contains(self, slug: str, photo_id: str) -> bool:
        return any(img.get("id") == photo_id for img in self.images(slug))

    def slugs_containing(self, photo_id: str) -> List[str]:
        return [slug for slug in self._docs if self.contains(slug, photo_id)]

    def refs_for(self, photo_id: str) -> List[Tuple[str, dict]]:
        return [
            (slug, img)
            for slug, doc in self._docs.items()
            for img in doc["images"]
            if img.get("id") == photo_id
        ]

    def remove_from(self, slug: str, photo_id: str) -> bool:
        doc = self._docs.get(slug)
        if not doc:
            return False
        kept = [img for img in doc["images"] if img.get("id") != photo_id]
        if len(kept) == len(doc["images"]):
            return False
        doc["images"] = kept
        self._dirty.add(slug)
        return True

    def remove_everywhere(self, photo_id: str) -> List[str]:
        """Remove a photo from every category; returns the slugs it was in"""
        return [slug for slug in list(self._docs) if self.remove_from(slug, photo_id)]

    def replace_ref(self, slug: str, ref: dict) -> None:
        doc = self._docs[slug]
        doc["images"] = [ref if img.get("id") == ref["id"] else img for img in doc["images"]]
        self._dirty.add(slug)

    def append_ref(self, slug: str, ref: dict) -> None:
        doc = self._docs.get(slug)
        if doc is None:
            doc = {"slug": slug, "images": [], "created_at": self.now, "updated_at": self.now}
            self._docs[slug] = doc
        doc["images"].append(ref)
        self._dirty.add(slug)

    def set_images(self, slug: str, images: List[dict]) -> None:
        self._docs[slug]["images"] = list(images)
        self._dirty.add(slug)

    def drop(self, slug: str) -> None:
        if slug in self._docs:
            self._docs[slug]["images"] = []
            self._dirty.add(slug)

    def stage(self, batch: WriteBatch) -> List[str]:
        """Stage every changed category; returns the slugs that were deleted"""
        deleted = []
        for slug in sorted(self._dirty):
            doc = self._docs[slug]
            if not doc["images"]:
                if slug in self._existing:
                    batch.delete(CATEGORIES_COLLECTION, {"slug": slug})
                    deleted.append(slug)
                del self._docs[slug]
                continue
            doc["updated_at"] = self.now
            batch.replace(CATEGORIES_COLLECTION, {"slug": slug}, doc)
        self._dirty.clear()
        return deleted


def assign_photo(snapshot: CategorySnapshot, ref: dict, slug: Optional[str]) -> List[str]:
    """
    Put a PhotoRef into exactly one category (or none when slug is None).
    Returns the slugs the photo was removed from.
    """
    photo_id = ref["id"]
    current = snapshot.slugs_containing(photo_id)

    if slug and slug in current:
        # Same category: refresh the ref in place, no remove-then-add
        snapshot.replace_ref(slug, ref)
        others = [s for s in current if s != slug]
        for other in others:
            snapshot.remove_from(other, photo_id)
        return others

    for other in current:
        snapshot.remove_from(other, photo_id)
    if slug:
        snapshot.append_ref(slug, ref)
    return current


# ============ Homepage pins ============

def reindex_pins(pins: Iterable[dict]) -> List[dict]:
    """Rewrite order as 0..n-1 following the current sequence"""
    return [dict(pin, order=index) for index, pin in enumerate(pins)]


def normalize_pins(pins: Iterable[dict]) -> List[dict]:
    """Sort by submitted order, keep the first pin per photo, re-index"""
    indexed = list(enumerate(pins))
    indexed.sort(key=lambda item: (item[1].get("order", 0), item[0]))
    seen = set()
    result = []
    for _, pin in indexed:
        photo_id = pin.get("photoId")
        if not photo_id or photo_id in seen:
            continue
        seen.add(photo_id)
        cleaned = {"photoId": photo_id, "order": pin.get("order", 0)}
        if pin.get("slug"):
            cleaned["slug"] = pin["slug"]
        result.append(cleaned)
    return reindex_pins(result)


def pins_document(pins: List[dict], now: str) -> dict:
    return {"type": HOMEPAGE_PINS_TYPE, "selectedPhotos": pins, "updated_at": now}


def stage_pins(batch: WriteBatch, pins: List[dict], now: str) -> List[dict]:
    normalized = normalize_pins(pins)
    batch.replace(SETTINGS_COLLECTION, {"type": HOMEPAGE_PINS_TYPE}, pins_document(normalized, now))
    return normalized


def is_dense(pins: List[dict]) -> bool:
    return sorted(pin.get("order") for pin in pins) == list(range(len(pins)))


# ============ Audit ============

def audit(categories: List[dict], pins: List[dict], photo_ids: Iterable[str]) -> dict:
    """Report every invariant violation across the stores"""
    known_photos = set(photo_ids)
    membership: Dict[str, List[str]] = {}
    empty_categories = []
    orphaned_refs = []

    for category in categories:
        images = category.get("images") or []
        if not images:
            empty_categories.append(category["slug"])
        for img in images:
            photo_id = img.get("id")
            slugs = membership.setdefault(photo_id, [])
            if category["slug"] not in slugs:
                slugs.append(category["slug"])
            if photo_id not in known_photos:
                orphaned_refs.append({"slug": category["slug"], "photoId": photo_id})

    multi_category = {photo_id: slugs for photo_id, slugs in membership.items() if len(slugs) > 1}
    dangling_pins = [pin["photoId"] for pin in pins if pin.get("photoId") not in membership]

    report = {
        "multiCategoryPhotos": multi_category,
        "emptyCategories": empty_categories,
        "danglingPins": dangling_pins,
        "pinOrderDense": is_dense(pins),
        "orphanedRefs": orphaned_refs,
    }
    report["consistent"] = not (
        multi_category or empty_categories or dangling_pins or not report["pinOrderDense"]
    )
    return report


async def audit_store(store: GalleryStore) -> dict:
    categories = await store.list_categories()
    pins = await store.get_pins()
    photo_ids = await store.list_photo_ids()
    report = audit(categories, pins, photo_ids)
    if not report["consistent"]:
        logger.warning(
            f"Consistency audit found issues: {len(report['multiCategoryPhotos'])} multi-category, "
            f"{len(report['emptyCategories'])} empty categories, {len(report['danglingPins'])} dangling pins"
        )
    return report


async def repair_store(store: GalleryStore) -> dict:
    """
    Fix what the audit reports, in one batch.
    Orphaned refs are left alone; they are only reported.
    """
    now = utc_now_iso()
    # Oldest category first so the earliest assignment is the one kept
    categories = sorted(await store.list_categories(), key=lambda c: c.get("created_at") or "")
    pins = await store.get_pins()
    snapshot = CategorySnapshot(categories, now)
    batch = WriteBatch()

    moved = {}
    seen_photos = set()
    for slug in snapshot.slugs:
        kept = []
        for img in snapshot.images(slug):
            if img.get("id") in seen_photos:
                moved.setdefault(img["id"], []).append(slug)
                continue
            seen_photos.add(img.get("id"))
            kept.append(img)
        if len(kept) != len(snapshot.images(slug)):
            snapshot.set_images(slug, kept)

    for category in categories:
        if not (category.get("images") or []):
            snapshot.drop(category["slug"])
    # Includes categories emptied by duplicate removal
    deleted_categories = snapshot.stage(batch)

    surviving = [pin for pin in pins if pin.get("photoId") in seen_photos]
    dropped_pins = [pin["photoId"] for pin in pins if pin.get("photoId") not in seen_photos]
    if dropped_pins or not is_dense(pins):
        stage_pins(batch, surviving, now)

    await store.commit(batch)
    logger.info(f"Consistency repair committed ({batch.summary() or 'no changes'})")
    return {
        "success": True,
        "removedDuplicates": moved,
        "deletedEmptyCategories": deleted_categories,
        "droppedPins": dropped_pins,
    }
