"""
Simple Event System

Event handling for pipeline events such as a finished source ingestion.
"""

import asyncio
from typing import Dict, Any, List, Callable, Optional
from datetime import datetime
from dataclasses import dataclass, field

from pmhnp_hiring.utils.logger import get_logger

logger = get_logger(__name__)

INGESTION_SOURCE_COMPLETED = "ingestion.source_completed"


@dataclass
class Event:
    name: str
    data: Dict[str, Any]
    timestamp: datetime = field(default_factory=datetime.utcnow)


class EventManager:
    """Event manager for application events."""

    def __init__(self):
        self._handlers: Dict[str, List[Callable]] = {}

    async def emit(self, event_name: str, data: Optional[Dict[str, Any]] = None) -> None:
        """
        Call every handler subscribed to ``event_name``.

        A failing handler is logged and skipped; the emitter never sees it.
        """
        event = Event(name=event_name, data=data or {})

        for handler in list(self._handlers.get(event_name, [])):
            try:
                if asyncio.iscoroutinefunction(handler):
                    await handler(event)
                else:
                    handler(event)
            except Exception as e:
                logger.error(
                    "Event handler failed",
                    event_name=event_name,
                    handler=getattr(handler, "__qualname__", repr(handler)),
                    error=str(e)
                )

    def subscribe(self, event_name: str, handler: Callable) -> None:
        """Subscribe a handler to an event."""
        self._handlers.setdefault(event_name, []).append(handler)

    def unsubscribe(self, event_name: str, handler: Callable) -> None:
        """Unsubscribe a handler from an event."""
        if handler in self._handlers.get(event_name, []):
            self._handlers[event_name].remove(handler)


# Global event manager instance
event_manager = EventManager()
