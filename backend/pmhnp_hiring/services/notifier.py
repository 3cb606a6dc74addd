"""
Discord Notifier

Posts a short embed per ingested source to a Discord webhook.
"""

from datetime import datetime
from typing import Any, Dict, Optional

import httpx

from pmhnp_hiring.core.config import get_settings
from pmhnp_hiring.core.events import Event, EventManager, INGESTION_SOURCE_COMPLETED
from pmhnp_hiring.utils.logger import get_logger

logger = get_logger(__name__)

WARNING_COLOR = 16776960  # yellow
SUCCESS_COLOR = 5763719  # green
WEBHOOK_TIMEOUT_SECONDS = 10.0


def build_source_embed(result: Any) -> Dict[str, Any]:
    """Embed for one ``IngestionResult``; a warning when nothing came back or errors dominate."""
    is_warning = result.fetched == 0 or result.errors > result.added

    return {
        "title": "Ingestion Warning" if is_warning else "Ingestion Complete",
        "color": WARNING_COLOR if is_warning else SUCCESS_COLOR,
        "fields": [
            {"name": "Source", "value": result.source.upper(), "inline": True},
            {"name": "Fetched", "value": str(result.fetched), "inline": True},
            {"name": "New Jobs", "value": str(result.added), "inline": True},
            {"name": "Duplicates", "value": str(result.duplicates), "inline": True},
            {"name": "Errors", "value": str(result.errors), "inline": True},
            {"name": "Duration", "value": f"{result.duration:.1f}s", "inline": True},
        ],
        "timestamp": datetime.utcnow().isoformat() + "Z",
    }


class DiscordNotifier:
    """Webhook client; does nothing when no webhook URL is configured."""

    def __init__(self, webhook_url: Optional[str] = None, client: Optional[httpx.AsyncClient] = None):
        self.webhook_url = webhook_url if webhook_url is not None else get_settings().DISCORD_WEBHOOK_URL
        self.client = client

    @property
    def enabled(self) -> bool:
        return bool(self.webhook_url)

    async def notify_source_result(self, result: Any) -> bool:
        """Post the result embed. Returns whether a message was delivered."""
        if not self.enabled:
            return False

        payload = {"embeds": [build_source_embed(result)]}
        try:
            if self.client is not None:
                response = await self.client.post(self.webhook_url, json=payload)
            else:
                async with httpx.AsyncClient(timeout=WEBHOOK_TIMEOUT_SECONDS) as client:
                    response = await client.post(self.webhook_url, json=payload)
            response.raise_for_status()
            return True
        except httpx.HTTPError as e:
            logger.error(f"Discord notification failed for {result.source}: {e}")
            return False

    async def handle_ingestion_event(self, event: Event) -> None:
        result = event.data.get("result")
        if result is not None:
            await self.notify_source_result(result)

    def subscribe(self, events: EventManager) -> None:
        events.subscribe(INGESTION_SOURCE_COMPLETED, self.handle_ingestion_event)
