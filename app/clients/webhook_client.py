"""
Outgoing webhook used to notify the site owner about new comments.

The payload is {"content": "<message>"}, which Discord-style and most
generic webhook receivers accept. Delivery is best effort: a failure is
logged and never fails the request that triggered it.
"""
import logging
from typing import Optional

import httpx

from app.config import settings

logger = logging.getLogger(__name__)


class WebhookClient:
    def __init__(self) -> None:
        self._http: Optional[httpx.AsyncClient] = None

    async def start(self) -> None:
        self._http = httpx.AsyncClient(timeout=5.0)

    async def stop(self) -> None:
        if self._http:
            await self._http.aclose()
            self._http = None

    async def notify(self, message: str, url: Optional[str] = None) -> bool:
        """POST `message` to the webhook. Returns True when delivered."""
        target = url or settings.webhook_url
        if not target:
            return False
        if self._http is None:
            await self.start()
        try:
            resp = await self._http.post(target, json={"content": message})
            resp.raise_for_status()
        except Exception as exc:
            logger.warning("Webhook delivery to %s failed: %s", target, exc)
            return False
        return True


# Singleton
webhook_client = WebhookClient()
