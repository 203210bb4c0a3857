"""
Reconciliation engine

Every mutating gallery operation lives here. Each one reads what it needs
first, computes the new state of every affected document in memory, then
commits a single WriteBatch, so the image store, category store, homepage
pin list and trash never disagree after a committed operation.

Concurrent operations on the same photo are not serialized: the later
commit wins and may undo the earlier one.
"""
import logging
from typing import List, Optional, Tuple

from core.config import (
    IMAGES_COLLECTION, CATEGORIES_COLLECTION, DELETED_PHOTOS_COLLECTION,
    TRASH_ONLY_FIELDS, VARIANT_ORIGINAL,
)
from core.errors import Conflict, NotFound, ValidationError, not_found_unless
from services.consistency import (
    CategorySnapshot, assign_photo, build_photo_ref, normalize_pins, stage_pins,
)
from services.store import GalleryStore, WriteBatch
from utils.helpers import normalize_slug, unique_ids, utc_now_iso

logger = logging.getLogger(__name__)


def _require_ids(photo_ids: Optional[List[str]], field: str = "photoIds") -> List[str]:
    ids = unique_ids(photo_ids or [])
    if not ids:
        raise ValidationError(f"{field} array is required")
    return ids


def _require_permutation(requested: List[str], current: List[str], what: str) -> None:
    if len(requested) != len(current) or set(requested) != set(current):
        raise ValidationError(f"photoIds must list every photo in the {what} exactly once")


# ============ Image store ============

async def create_photo(store: GalleryStore, photo: dict) -> dict:
    """Register a freshly uploaded photo in the image store"""
    batch = WriteBatch()
    batch.insert(IMAGES_COLLECTION, photo)
    await store.commit(batch)
    logger.info(f"Stored photo {photo['id']} ({photo.get('file_name')})")
    return {k: v for k, v in photo.items() if k != "_id"}


async def list_photos(store: GalleryStore) -> List[dict]:
    """All uploaded photos, newest first, with their category and pin state"""
    photos = await store.list_photos()
    snapshot = CategorySnapshot(await store.list_categories())
    pinned = {pin.get("photoId") for pin in await store.get_pins()}
    result = []
    for photo in photos:
        slugs = snapshot.slugs_containing(photo["id"])
        result.append({**photo, "slug": slugs[0] if slugs else None, "pinned": photo["id"] in pinned})
    return result


# ============ Categorize ============

async def categorize(
    store: GalleryStore,
    photo_id: str,
    slug: Optional[str],
    variant: str = VARIANT_ORIGINAL,
) -> dict:
    """
    Move a photo into one category (a blank slug removes it from all).
    The photo ends up in at most one category, carrying a fresh PhotoRef.
    """
    photo = await store.get_photo(photo_id)
    if not photo:
        raise NotFound("Image not found")

    target = normalize_slug(slug)
    snapshot = CategorySnapshot(await store.list_categories())
    ref = build_photo_ref(photo, variant)
    removed_from = assign_photo(snapshot, ref, target)

    batch = WriteBatch()
    deleted_categories = snapshot.stage(batch)
    await store.commit(batch)

    logger.info(f"Categorized {photo_id} -> {target or '(none)'} (removed from {removed_from})")
    return {
        "success": True,
        "message": "Image category updated successfully",
        "slug": target,
        "variant": ref["variant"],
        "removedFrom": removed_from,
        "deletedCategories": deleted_categories,
    }


async def batch_categorize(
    store: GalleryStore,
    photo_ids: List[str],
    slug: Optional[str],
    variant: str = VARIANT_ORIGINAL,
) -> dict:
    """Categorize many photos against one slug; unknown ids are reported, not fatal"""
    ids = _require_ids(photo_ids, "imageIds")
    target = normalize_slug(slug)

    photos = await store.get_photos(ids)
    snapshot = CategorySnapshot(await store.list_categories())
    updated = []
    not_found_ids = []

    for photo_id in ids:
        photo = photos.get(photo_id)
        if not photo:
            logger.warning(f"Batch categorize: image {photo_id} not found")
            not_found_ids.append(photo_id)
            continue
        assign_photo(snapshot, build_photo_ref(photo, variant), target)
        updated.append(photo_id)

    batch = WriteBatch()
    snapshot.stage(batch)
    await store.commit(batch)

    logger.info(f"Batch categorized {len(updated)} image(s) -> {target or '(none)'}")
    return {
        "success": True,
        "successCount": len(updated),
        "updatedIds": updated,
        "notFoundIds": not_found_ids,
        "slug": target,
        "variant": variant or VARIANT_ORIGINAL,
    }


# ============ Category editing ============

async def rename_slug(store: GalleryStore, old_slug: str, new_slug: str) -> dict:
    """
    Rename a category by copying it under the new slug and deleting the old
    document. Pins that carry a slug are left pointing at the old one.
    """
    old_slug = normalize_slug(old_slug)
    new_slug = normalize_slug(new_slug)
    if not old_slug or not new_slug:
        raise ValidationError("Both oldSlug and newSlug are required")
    if old_slug == new_slug:
        raise ValidationError("New slug must be different from old slug")

    category = await store.get_category(old_slug)
    if not category:
        raise NotFound("Old slug not found")
    if await store.get_category(new_slug):
        raise Conflict("New slug already exists")

    renamed = {**category, "slug": new_slug, "updated_at": utc_now_iso()}
    batch = WriteBatch()
    # Insert rather than upsert so a concurrently created target trips the unique index
    batch.insert(CATEGORIES_COLLECTION, renamed)
    batch.delete(CATEGORIES_COLLECTION, {"slug": old_slug})
    await store.commit(batch)

    logger.info(f"Renamed category {old_slug} -> {new_slug}")
    return {
        "success": True,
        "message": f"Successfully renamed {old_slug} to {new_slug}",
        "oldSlug": old_slug,
        "newSlug": new_slug,
    }


async def update_photo_ref(
    store: GalleryStore,
    slug: str,
    photo_id: str,
    alt: Optional[str] = None,
    variant: Optional[str] = None,
) -> dict:
    """Edit alt/variant of the copy inside one category; the canonical photo is untouched"""
    category = await store.get_category(slug)
    if not category:
        raise NotFound("Category not found")

    snapshot = CategorySnapshot([category])
    current = dict(snapshot.refs_for(photo_id)[0][1]) if snapshot.contains(slug, photo_id) else None
    if current is None:
        raise NotFound("Photo not found in category")

    if alt is not None:
        current["alt"] = alt
    if variant is not None:
        current["variant"] = variant
    snapshot.replace_ref(slug, current)

    batch = WriteBatch()
    snapshot.stage(batch)
    await store.commit(batch)
    return {"success": True, "slug": slug, "photo": current}


async def reorder_category(store: GalleryStore, slug: str, photo_ids: List[str]) -> dict:
    category = await store.get_category(slug)
    if not category:
        raise NotFound("Category not found")

    images = category.get("images") or []
    requested = [pid.strip() for pid in photo_ids]
    _require_permutation(requested, [img.get("id") for img in images], "category")

    by_id = {img["id"]: img for img in images}
    snapshot = CategorySnapshot([category])
    snapshot.set_images(slug, [by_id[pid] for pid in requested])

    batch = WriteBatch()
    snapshot.stage(batch)
    await store.commit(batch)
    logger.info(f"Reordered {len(requested)} image(s) in {slug}")
    return {"success": True, "slug": slug, "photoIds": requested}


async def remove_from_category(store: GalleryStore, slug: str, photo_id: str) -> dict:
    """Take one photo out of one category; the photo stays in the image store"""
    category = await store.get_category(slug)
    if not category:
        raise NotFound("Category not found")

    snapshot = CategorySnapshot([category])
    if not snapshot.remove_from(slug, photo_id):
        raise NotFound("Photo not found in category")

    batch = WriteBatch()
    deleted = snapshot.stage(batch)
    await store.commit(batch)
    logger.info(f"Removed {photo_id} from {slug}")
    return {
        "success": True,
        "slug": slug,
        "remainingCount": len(snapshot.images(slug)),
        "categoryDeleted": slug in deleted,
    }


# ============ Soft delete / restore / permanent delete ============

def _stage_trash(
    batch: WriteBatch,
    snapshot: CategorySnapshot,
    photo: dict,
    pins: List[dict],
    deleted_by: str,
    now: str,
) -> Tuple[dict, List[dict]]:
    """
    Archive one photo and scrub it from the category snapshot and pin list.
    Returns the per-photo report and the pins that remain.
    """
    photo_id = photo["id"]
    refs = snapshot.refs_for(photo_id)
    original_categories = snapshot.remove_everywhere(photo_id)
    was_pinned = any(pin.get("photoId") == photo_id for pin in pins)
    remaining_pins = [pin for pin in pins if pin.get("photoId") != photo_id]

    record = dict(photo)
    record.update({
        "variant": refs[0][1].get("variant", VARIANT_ORIGINAL) if refs else VARIANT_ORIGINAL,
        "original_categories": original_categories,
        "was_pinned": was_pinned,
        "deleted_at": now,
        "deleted_by": deleted_by,
    })
    # Archive first, then drop the canonical record
    batch.replace(DELETED_PHOTOS_COLLECTION, {"id": photo_id}, record)
    batch.delete(IMAGES_COLLECTION, {"id": photo_id})
    return {"id": photo_id, "categories": original_categories, "wasPinned": was_pinned}, remaining_pins


async def soft_delete(store: GalleryStore, photo_ids: List[str], deleted_by: str) -> dict:
    """
    Move photos to the trash.

    Each found photo is removed from every category and from the pin list,
    archived with the categories and pin state it had, then removed from
    the image store. Everything commits as one batch; ids that are not in
    the image store are reported in notFoundIds.
    """
    ids = _require_ids(photo_ids)
    now = utc_now_iso()

    photos = await store.get_photos(ids)
    snapshot = CategorySnapshot(await store.list_categories(), now)
    pins = await store.get_pins()
    remaining_pins = list(pins)

    batch = WriteBatch()
    deleted = []
    not_found_ids = []

    for photo_id in ids:
        photo = photos.get(photo_id)
        if not photo:
            logger.warning(f"Soft delete: image {photo_id} not found")
            not_found_ids.append(photo_id)
            continue

        entry, remaining_pins = _stage_trash(batch, snapshot, photo, remaining_pins, deleted_by, now)
        deleted.append(entry)

    not_found_unless(bool(deleted), "No photos found to delete", not_found_ids)

    deleted_categories = snapshot.stage(batch)
    if len(remaining_pins) != len(pins):
        stage_pins(batch, remaining_pins, now)
    await store.commit(batch)

    logger.info(f"Moved {len(deleted)} photo(s) to trash by {deleted_by} ({batch.summary()})")
    return {
        "success": True,
        "message": f"{len(deleted)} photo(s) moved to trash",
        "deletedCount": len(deleted),
        "deletedPhotos": deleted,
        "deletedCategories": deleted_categories,
        "notFoundIds": not_found_ids,
    }


async def soft_delete_from_category(
    store: GalleryStore,
    slug: str,
    photo_ids: List[str],
    deleted_by: str,
) -> dict:
    """
    Move photos to the trash from within one gallery.

    Only ids listed in the category are trashed; the rest are reported in
    notFoundIds. A ref whose canonical photo is already gone is archived
    from the ref itself.
    """
    ids = _require_ids(photo_ids)
    category = await store.get_category(slug)
    if not category:
        raise NotFound("Category not found")

    now = utc_now_iso()
    snapshot = CategorySnapshot(await store.list_categories(), now)
    in_category = {img.get("id"): img for img in snapshot.images(slug)}
    photos = await store.get_photos([pid for pid in ids if pid in in_category])
    pins = await store.get_pins()
    remaining_pins = list(pins)

    batch = WriteBatch()
    deleted = []
    not_found_ids = []

    for photo_id in ids:
        if photo_id not in in_category:
            not_found_ids.append(photo_id)
            continue
        photo = photos.get(photo_id) or dict(in_category[photo_id])
        entry, remaining_pins = _stage_trash(batch, snapshot, photo, remaining_pins, deleted_by, now)
        deleted.append(entry)

    not_found_unless(bool(deleted), "No matching photos found to delete", not_found_ids)

    remaining_count = len(snapshot.images(slug))
    deleted_categories = snapshot.stage(batch)
    if len(remaining_pins) != len(pins):
        stage_pins(batch, remaining_pins, now)
    await store.commit(batch)

    logger.info(f"Moved {len(deleted)} photo(s) from {slug} to trash by {deleted_by}")
    return {
        "success": True,
        "message": f"{len(deleted)} photo(s) deleted successfully",
        "deletedCount": len(deleted),
        "deletedPhotos": deleted,
        "remainingCount": remaining_count,
        "categoryDeleted": slug in deleted_categories,
        "notFoundIds": not_found_ids,
    }


async def restore(
    store: GalleryStore,
    photo_ids: List[str],
    restored_by: str,
    restore_categories: bool = True,
    restore_pin: bool = True,
) -> dict:
    """
    Bring photos back from the trash.

    The canonical record is rewritten with its original fields. Category
    membership is re-created (re-creating missing categories, skipping
    ones that already hold the photo). A restored pin is appended at the
    end of the pin list, not at its original position.
    """
    ids = _require_ids(photo_ids)
    now = utc_now_iso()

    records = await store.get_deleted_many(ids)
    snapshot = CategorySnapshot(await store.list_categories(), now)
    pins = normalize_pins(await store.get_pins())
    pins_changed = False

    batch = WriteBatch()
    restored = []
    trash_ids = []
    not_found_ids = []

    for photo_id in ids:
        record = records.get(photo_id)
        if not record:
            logger.warning(f"Restore: {photo_id} not in trash")
            not_found_ids.append(photo_id)
            continue

        photo = {k: v for k, v in record.items() if k not in TRASH_ONLY_FIELDS}
        batch.replace(IMAGES_COLLECTION, {"id": photo_id}, photo)

        original_categories = list(record.get("original_categories") or [])
        if restore_categories:
            ref = build_photo_ref(photo, record.get("variant"))
            for slug in original_categories:
                if snapshot.contains(slug, photo_id):
                    continue
                snapshot.append_ref(slug, ref)

        restored_pin = bool(restore_pin and record.get("was_pinned"))
        if restored_pin and not any(pin.get("photoId") == photo_id for pin in pins):
            pins.append({"photoId": photo_id, "order": len(pins)})
            pins_changed = True

        trash_ids.append(photo_id)
        restored.append({
            "id": photo_id,
            "restoredToCategories": original_categories if restore_categories else [],
            "restoredToPin": restored_pin,
        })

    not_found_unless(bool(restored), "No photos found in trash to restore", not_found_ids)

    snapshot.stage(batch)
    if pins_changed:
        stage_pins(batch, pins, now)
    for photo_id in trash_ids:
        batch.delete(DELETED_PHOTOS_COLLECTION, {"id": photo_id})
    await store.commit(batch)

    logger.info(f"Restored {len(restored)} photo(s) by {restored_by}")
    return {
        "success": True,
        "message": f"{len(restored)} photo(s) restored successfully",
        "restoredCount": len(restored),
        "restoredPhotos": restored,
        "notFoundIds": not_found_ids,
    }


async def permanent_delete(store: GalleryStore, photo_ids: List[str]) -> dict:
    """Erase trash records for good; no other store is touched"""
    ids = _require_ids(photo_ids)
    records = await store.get_deleted_many(ids)

    batch = WriteBatch()
    deleted_ids = []
    not_found_ids = []
    for photo_id in ids:
        if photo_id not in records:
            not_found_ids.append(photo_id)
            continue
        batch.delete(DELETED_PHOTOS_COLLECTION, {"id": photo_id})
        deleted_ids.append(photo_id)

    not_found_unless(bool(deleted_ids), "No photos found in trash to permanently delete", not_found_ids)

    await store.commit(batch)
    logger.info(f"Permanently deleted {len(deleted_ids)} photo(s): {deleted_ids}")
    return {
        "success": True,
        "message": f"{len(deleted_ids)} photo(s) permanently deleted",
        "deletedCount": len(deleted_ids),
        "deletedIds": deleted_ids,
        "notFoundIds": not_found_ids,
    }


# ============ Homepage pins ============

async def set_pins(store: GalleryStore, pins: List[dict]) -> dict:
    """Replace the whole pin list (sorted by submitted order, de-duplicated, re-indexed)"""
    now = utc_now_iso()
    batch = WriteBatch()
    normalized = stage_pins(batch, pins, now)
    await store.commit(batch)
    logger.info(f"Homepage pins replaced ({len(normalized)} pin(s))")
    return {"success": True, "selectedPhotos": normalized, "updated_at": now}


async def add_pin(store: GalleryStore, photo_id: str, slug: Optional[str] = None) -> dict:
    pins = await store.get_pins()
    if any(pin.get("photoId") == photo_id for pin in pins):
        raise Conflict("Photo is already pinned")
    pin = {"photoId": photo_id, "order": len(pins)}
    if slug:
        pin["slug"] = slug
    return await set_pins(store, pins + [pin])


async def remove_pin(store: GalleryStore, photo_id: str) -> dict:
    pins = await store.get_pins()
    remaining = [pin for pin in pins if pin.get("photoId") != photo_id]
    if len(remaining) == len(pins):
        raise NotFound("Photo is not pinned")
    return await set_pins(store, remaining)


async def reorder_pins(store: GalleryStore, photo_ids: List[str]) -> dict:
    pins = normalize_pins(await store.get_pins())
    requested = [pid.strip() for pid in photo_ids]
    _require_permutation(requested, [pin["photoId"] for pin in pins], "pin list")
    by_id = {pin["photoId"]: pin for pin in pins}
    return await set_pins(store, [dict(by_id[pid], order=index) for index, pid in enumerate(requested)])


async def homepage_images(store: GalleryStore) -> List[dict]:
    """Pinned photos resolved through the category store, in pin order"""
    pins = normalize_pins(await store.get_pins())
    snapshot = CategorySnapshot(await store.list_categories())
    images = []
    for pin in pins:
        refs = snapshot.refs_for(pin["photoId"])
        if not refs:
            # Dangling pin: the photo is in no category
            continue
        slug, ref = refs[0]
        images.append({**ref, "slug": slug, "order": pin["order"]})
    return images
