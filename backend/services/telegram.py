"""
Telegram Storage Service - Telegram Bot API as an image blob store

Photos are posted to a private chat with sendPhoto; the largest rendition's
file_id is resolved through getFile into a permanent download URL.
"""

import logging
from typing import Optional

import httpx

from core.config import TELEGRAM_BOT_TOKEN, TELEGRAM_CHAT_ID, TELEGRAM_API_BASE, TELEGRAM_TIMEOUT
from core.errors import TransportError

logger = logging.getLogger(__name__)


class TelegramStorage:
    """
    Upload transport backed by a Telegram bot and chat.
    """

    def __init__(
        self,
        bot_token: str = TELEGRAM_BOT_TOKEN,
        chat_id: str = TELEGRAM_CHAT_ID,
        api_base: str = TELEGRAM_API_BASE,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.bot_token = bot_token
        self.chat_id = chat_id
        self.api_base = api_base.rstrip('/')
        self.transport = transport
        if self.enabled:
            logger.info("Telegram storage initialized")
        else:
            logger.warning("Telegram not configured - uploads are disabled")

    @property
    def enabled(self) -> bool:
        return bool(self.bot_token and self.chat_id)

    def get_file_url(self, file_path: str) -> str:
        """Get the public download URL for a Telegram file path"""
        return f"{self.api_base}/file/bot{self.bot_token}/{file_path}"

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=f"{self.api_base}/bot{self.bot_token}",
            transport=self.transport,
            timeout=TELEGRAM_TIMEOUT,
        )

    async def upload_photo(
        self,
        content: bytes,
        filename: str,
        content_type: str = 'image/jpeg'
    ) -> dict:
        """
        Upload image bytes.
        Returns {url, file_id, file_path}; raises TransportError on any failure.
        """
        if not self.enabled:
            raise TransportError("Server configuration error - Telegram storage is not configured")

        try:
            async with self._client() as client:
                upload_res = await client.post(
                    "/sendPhoto",
                    data={"chat_id": self.chat_id},
                    files={"photo": (filename, content, content_type)},
                )
                upload_data = upload_res.json()
                if not upload_data.get("ok"):
                    logger.error(f"Telegram sendPhoto failed for {filename}: {upload_data.get('description')}")
                    raise TransportError("Failed to upload to Telegram")

                # Last entry is the highest resolution
                sizes = upload_data["result"]["photo"]
                file_id = sizes[-1]["file_id"]

                file_res = await client.get("/getFile", params={"file_id": file_id})
                file_data = file_res.json()
                if not file_data.get("ok"):
                    logger.error(f"Telegram getFile failed for {file_id}: {file_data.get('description')}")
                    raise TransportError("Failed to get file URL from Telegram")

                file_path = file_data["result"]["file_path"]
        except httpx.HTTPError as e:
            logger.error(f"Telegram request failed for {filename}: {e}")
            raise TransportError("Failed to reach Telegram") from e
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.error(f"Unexpected Telegram response for {filename}: {e}")
            raise TransportError("Unexpected response from Telegram") from e

        logger.info(f"Uploaded to Telegram: {filename} ({file_id})")
        return {
            "url": self.get_file_url(file_path),
            "file_id": file_id,
            "file_path": file_path,
        }


# Global storage instance
telegram_storage = TelegramStorage()


def get_telegram_storage() -> TelegramStorage:
    """Get the Telegram storage instance"""
    return telegram_storage
