"""Telegram Bot API client — sends replies for the webhook front-end."""

import logging

import httpx

logger = logging.getLogger(__name__)

# Telegram rejects messages longer than this
MAX_MESSAGE_CHARS = 4096


class TelegramClient:
    """Minimal Bot API adapter: only ``sendMessage`` is needed."""

    def __init__(
        self,
        bot_token: str,
        api_base: str = "https://api.telegram.org",
        http_client: httpx.AsyncClient | None = None,
    ):
        self._bot_token = bot_token
        self._api_base = api_base.rstrip("/")
        self._http_client = http_client

    @property
    def configured(self) -> bool:
        return bool(self._bot_token)

    async def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is not None:
            return self._http_client
        return httpx.AsyncClient(timeout=15.0)

    async def send_message(self, chat_id: int | str, text: str) -> bool:
        """Send ``text`` to ``chat_id``. Returns False if Telegram refused it.

        Delivery failures are logged, not raised: the webhook must still
        acknowledge the update or Telegram will redeliver it.
        """
        if not self.configured:
            logger.warning("Telegram bot token not configured; dropping reply to %s", chat_id)
            return False

        url = f"{self._api_base}/bot{self._bot_token}/sendMessage"
        payload = {
            "chat_id": chat_id,
            "text": text[:MAX_MESSAGE_CHARS],
            "disable_web_page_preview": True,
        }

        client = await self._get_client()
        should_close = self._http_client is None
        try:
            response = await client.post(url, json=payload)
            if response.status_code != 200:
                logger.error(
                    "Telegram sendMessage failed (%d): %s",
                    response.status_code,
                    response.text[:500],
                )
                return False
            return True
        except httpx.HTTPError as exc:
            logger.error("Telegram sendMessage to %s failed: %s", chat_id, exc)
            return False
        finally:
            if should_close:
                await client.aclose()
