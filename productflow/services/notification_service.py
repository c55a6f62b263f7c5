"""Owner notifications. Best effort: nothing here ever raises to the caller."""

import logging
from typing import Optional

import httpx

from productflow.core.config import settings

logger = logging.getLogger(__name__)


class Notifier:
    """Post ``{title, content}`` to a webhook, or just log when none is configured."""

    def __init__(
        self,
        webhook_url: Optional[str] = None,
        timeout_seconds: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.webhook_url = webhook_url if webhook_url is not None else settings.NOTIFY_WEBHOOK_URL
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    async def notify(self, title: str, content: str) -> bool:
        """Return True when the notification was delivered."""
        if not self.webhook_url:
            logger.info("Notification: %s - %s", title, content)
            return False

        try:
            async with httpx.AsyncClient(timeout=httpx.Timeout(self.timeout_seconds), transport=self._transport) as client:
                response = await client.post(self.webhook_url, json={"title": title, "content": content})
            if response.status_code >= 400:
                logger.warning("Notification webhook returned %s for %r", response.status_code, title)
                return False
            return True
        except Exception as exc:  # noqa: BLE001
            logger.warning("Notification failed for %r: %s", title, exc)
            return False
