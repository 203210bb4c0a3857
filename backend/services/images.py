"""
Image services: upload inspection and the caching image proxy relay
"""
import logging
from io import BytesIO
from typing import Optional, Tuple

import httpx
from PIL import Image, UnidentifiedImageError

from core.config import IMAGE_FETCH_TIMEOUT
from core.errors import TransportError, ValidationError

logger = logging.getLogger(__name__)


def read_image_dimensions(content: bytes) -> Tuple[int, int]:
    """Return (width, height); raises ValidationError for undecodable bytes"""
    try:
        with Image.open(BytesIO(content)) as img:
            return img.width, img.height
    except (UnidentifiedImageError, OSError) as e:
        logger.warning(f"Rejected upload that is not a readable image: {e}")
        raise ValidationError("Invalid image file") from e


class ImageRelay:
    """Fetches image bytes from a PhotoRef URL for the proxy endpoint"""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.transport = transport

    async def fetch(self, url: str) -> Tuple[bytes, str]:
        """Returns (content, content_type)"""
        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=IMAGE_FETCH_TIMEOUT) as client:
                response = await client.get(url, follow_redirects=True)
        except httpx.HTTPError as e:
            logger.error(f"Image fetch failed for {url}: {e}")
            raise TransportError("Failed to fetch image") from e

        if response.status_code != 200:
            logger.error(f"Image origin returned {response.status_code} for {url}")
            raise TransportError("Failed to fetch image")

        return response.content, response.headers.get("content-type", "image/jpeg")


image_relay = ImageRelay()


def get_image_relay() -> ImageRelay:
    return image_relay
