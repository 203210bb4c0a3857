"""
Shared fixtures for the gallery backend tests
"""
import os

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("MONGO_USE_TRANSACTIONS", "false")
os.environ.setdefault("ADMIN_USERNAME", "admin")
os.environ.setdefault("ADMIN_PASSWORD", "admin-pass")

from io import BytesIO

import httpx
import pytest
from mongomock_motor import AsyncMongoMockClient
from PIL import Image

from core.config import (
    IMAGES_COLLECTION, CATEGORIES_COLLECTION, SETTINGS_COLLECTION, HOMEPAGE_PINS_TYPE,
)
from core.database import create_database_indexes
from server import app
from services.auth import create_access_token
from services.consistency import build_photo_ref
from services.images import ImageRelay, get_image_relay
from services.store import GalleryStore, get_store
from services.telegram import TelegramStorage, get_telegram_storage

ADMIN_IDENTITY = "admin@example.com"


@pytest.fixture
async def store():
    """Gallery store over an in-memory MongoDB"""
    mongo_client = AsyncMongoMockClient()
    database = mongo_client["gallery_test"]
    await create_database_indexes(database)
    return GalleryStore(database=database, mongo_client=mongo_client, use_transactions=False)


@pytest.fixture
def make_photo(store):
    """Factory inserting a canonical photo into the image store"""
    async def _make(photo_id, **fields):
        photo = {
            "id": photo_id,
            "url": f"https://cdn.example.com/{photo_id}.jpg",
            "file_id": f"file-{photo_id}",
            "file_name": f"{photo_id}.jpg",
            "file_size": 1024,
            "file_type": "image/jpeg",
            "uploaded_by": ADMIN_IDENTITY,
            "uploaded_at": "2026-01-01T00:00:00+00:00",
        }
        photo.update(fields)
        await store.db[IMAGES_COLLECTION].insert_one(dict(photo))
        return photo
    return _make


@pytest.fixture
def make_category(store):
    """Factory writing a category document directly (bypassing the engine)"""
    async def _make(slug, photos, variant="original", created_at="2026-01-01T00:00:00+00:00"):
        doc = {
            "slug": slug,
            "images": [build_photo_ref(p, variant) for p in photos],
            "created_at": created_at,
            "updated_at": created_at,
        }
        await store.db[CATEGORIES_COLLECTION].insert_one(dict(doc))
        return doc
    return _make


@pytest.fixture
def make_pins(store):
    async def _make(*photo_ids, orders=None):
        orders = orders or list(range(len(photo_ids)))
        pins = [{"photoId": pid, "order": order} for pid, order in zip(photo_ids, orders)]
        await store.db[SETTINGS_COLLECTION].insert_one(
            {"type": HOMEPAGE_PINS_TYPE, "selectedPhotos": pins, "updated_at": "2026-01-01T00:00:00+00:00"}
        )
        return pins
    return _make


@pytest.fixture
def test_image():
    """JPEG bytes for upload tests"""
    img = Image.new('RGB', (120, 80), color='red')
    img_bytes = BytesIO()
    img.save(img_bytes, format='JPEG')
    return img_bytes.getvalue()


def telegram_handler(request: httpx.Request) -> httpx.Response:
    """Fake Telegram Bot API"""
    if request.url.path.endswith("/sendPhoto"):
        return httpx.Response(200, json={
            "ok": True,
            "result": {"photo": [
                {"file_id": "small-id", "width": 90, "height": 60},
                {"file_id": "large-id", "width": 120, "height": 80},
            ]},
        })
    if request.url.path.endswith("/getFile"):
        assert request.url.params["file_id"] == "large-id"
        return httpx.Response(200, json={"ok": True, "result": {"file_path": "photos/file_1.jpg"}})
    return httpx.Response(404, json={"ok": False, "description": "Not Found"})


def origin_handler(request: httpx.Request) -> httpx.Response:
    """Fake image origin for the proxy endpoint"""
    if request.url.path.endswith("/missing.jpg"):
        return httpx.Response(404)
    return httpx.Response(200, content=b"image-bytes:" + request.url.path.encode(), headers={"content-type": "image/png"})


@pytest.fixture
def telegram_storage():
    return TelegramStorage(
        bot_token="123:abc",
        chat_id="-100200",
        api_base="https://telegram.test",
        transport=httpx.MockTransport(telegram_handler),
    )


@pytest.fixture
async def api_client(store, telegram_storage):
    """Async HTTP client bound to the app with the in-memory store"""
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_telegram_storage] = lambda: telegram_storage
    app.dependency_overrides[get_image_relay] = lambda: ImageRelay(transport=httpx.MockTransport(origin_handler))

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    token = create_access_token({"sub": ADMIN_IDENTITY, "is_admin": True})
    return {"Authorization": f"Bearer {token}"}
